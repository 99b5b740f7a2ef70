"""Slug generation for article identifiers"""

import re
import unicodedata


DEFAULT_SLUG = "article"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str, default: str = DEFAULT_SLUG) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug; never empty."""
    text = unicodedata.normalize("NFKD", str(text or "").lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    slug = _NON_ALNUM_RE.sub("-", text).strip("-")
    return slug or default
