"""Alias lists mapping loosely named source keys onto canonical article fields"""

import re
from typing import Any, Iterable, Mapping


FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title":        ("title", "headline", "name", "heading", "subject"),
    "subtitle":     ("subtitle", "sub_title", "subheading", "subhead", "dek", "tagline", "standfirst"),
    "author":       ("author", "byline", "author_name", "writer", "creator", "authors"),
    "category":     ("category", "section", "topic", "kicker", "categories"),
    "tags":         ("tags", "keywords", "labels", "topics"),
    "published_at": ("published_at", "publishedat", "published", "publish_date", "pubdate",
                     "date_published", "datepublished", "date", "created_at", "created"),
    "excerpt":      ("excerpt", "summary", "description", "abstract", "lede", "lead", "teaser"),
    "hero_image":   ("hero_image", "hero", "heroimage", "image", "cover", "cover_image",
                     "featured_image", "thumbnail", "banner"),
    "hero_caption": ("hero_caption", "herocaption", "caption", "image_caption",
                     "thumbnail_caption", "cover_caption"),
    "links":        ("links", "references", "sources", "related", "urls"),
    "body":         ("body", "content", "sections", "text", "article", "blocks",
                     "markdown", "html", "paragraphs"),
}

METADATA_ALIAS_FIELDS = tuple(f for f in FIELD_ALIASES if f != "body")

# Values for these fields are prose; commas inside them are not list separators.
PROSE_FIELDS = frozenset({"title", "subtitle", "excerpt", "author", "category", "hero_caption"})
PROSE_KEYS = frozenset(
    alias for f in PROSE_FIELDS for alias in FIELD_ALIASES[f]
) - frozenset(FIELD_ALIASES["tags"]) - frozenset(FIELD_ALIASES["links"])

_KEY_NORMALIZE_RE = re.compile(r"[\s\-]+")


def normalize_key(key: str) -> str:
    """Case-insensitive key form: lowercase, spaces/hyphens folded to underscores."""
    return _KEY_NORMALIZE_RE.sub("_", str(key).strip().lower())


def build_key_index(data: Mapping[str, Any]) -> dict[str, str]:
    """Map normalized key -> original key; the first spelling of a key wins."""
    index: dict[str, str] = {}
    for key in data:
        index.setdefault(normalize_key(key), key)
    return index


def resolve_fields(
    data: Mapping[str, Any],
    fields: Iterable[str] = FIELD_ALIASES,
    ) -> dict[str, str]:
    """Return {field: source_key} for every field whose alias list matches a key.

    Aliases are tried in order; each source key is claimed by at most one field.
    """
    index = build_key_index(data)
    claimed: set[str] = set()
    resolved: dict[str, str] = {}
    for field_name in fields:
        for alias in FIELD_ALIASES[field_name]:
            key = index.get(alias)
            if key is not None and key not in claimed:
                resolved[field_name] = key
                claimed.add(key)
                break
    return resolved
