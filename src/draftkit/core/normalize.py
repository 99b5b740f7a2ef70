"""Metadata normalization shared by every importer and by export"""

import logging
from datetime import date, datetime, timezone
from pathlib import PurePath
from typing import Any, Iterable, Mapping, Optional

from dateutil import parser as dateutil_parser

from draftkit.core.extract.text import first_sentence
from draftkit.core.models import ArticleLink, ArticleMetadata
from draftkit.core.utils.slug import DEFAULT_SLUG, slugify


logger = logging.getLogger(__name__)

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
LINK_LABEL_KEYS = ("label", "title", "text", "name")
LINK_URL_KEYS = ("url", "href", "link", "uri")
TEXT_FIELDS = ("title", "subtitle", "author", "category", "excerpt", "hero_image", "hero_caption")


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime(ISO_FORMAT)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date-like value into an aware UTC datetime; None if unparseable."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (str, int)) and not isinstance(value, bool) and str(value).strip():
        try:
            parsed = dateutil_parser.parse(str(value).strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_published_at(value: Any) -> str:
    """Return an ISO-8601 UTC timestamp; invalid or absent input becomes now."""
    parsed = parse_datetime(value)
    if parsed is None:
        if value not in (None, ""):
            logger.debug("Unparseable published_at %r; defaulting to now", value)
        return utc_now()
    return parsed.strftime(ISO_FORMAT)


def normalize_tags(value: Any) -> list[str]:
    """Trim, drop empties, and dedupe case-insensitively; first casing wins."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple)):
        value = [value]
    seen: set[str] = set()
    tags = []
    for tag in value:
        clean = str(tag if tag is not None else "").strip().lstrip("#").strip()
        if clean and clean.casefold() not in seen:
            seen.add(clean.casefold())
            tags.append(clean)
    return tags


def _pick(data: Mapping[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        if data.get(key) not in (None, ""):
            return str(data[key]).strip()
    return ""


def _looks_like_url(text: str) -> bool:
    return text.startswith(("http://", "https://", "/", "./", "mailto:", "#"))


def _link_from(item: Any) -> Optional[ArticleLink]:
    if isinstance(item, ArticleLink):
        return item
    if isinstance(item, Mapping):
        return ArticleLink(label=_pick(item, LINK_LABEL_KEYS), url=_pick(item, LINK_URL_KEYS))
    if isinstance(item, str):
        text = item.strip()
        return ArticleLink(url=text) if _looks_like_url(text) else ArticleLink(label=text)
    return None


def normalize_links(value: Any) -> list[ArticleLink]:
    """Uniform [{label, url}] from a string, a {label: url} map, a link object, or a list."""
    if value is None or value == "":
        return []
    if isinstance(value, Mapping):
        if any(k in value for k in LINK_LABEL_KEYS + LINK_URL_KEYS):
            candidates = [value]
        else:
            candidates = [{"label": k, "url": v} for k, v in value.items()]
    elif isinstance(value, (list, tuple)):
        candidates = list(value)
    else:
        candidates = [str(value)]

    links = []
    for item in candidates:
        link = _link_from(item)
        if link is not None and (link.label or link.url):
            links.append(link)
    return links


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if v is not None and str(v).strip())
    return str(value).strip()


def infer_excerpt(blocks: Iterable, kinds: Iterable[str] = ("paragraph",)) -> str:
    """First sentence of the first block of the given kinds that has text."""
    kinds = tuple(kinds)
    for block in blocks:
        if getattr(block, "type", None) in kinds and getattr(block, "text", "").strip():
            return first_sentence(block.text)
    return ""


def normalize_metadata(
    raw: Mapping[str, Any],
    *,
    blocks: Optional[list] = None,
    file_name: Optional[str] = None,
    warnings: Optional[list[str]] = None,
    excerpt_from: Iterable[str] = ("paragraph",),
    default_slug: str = DEFAULT_SLUG,
    ) -> ArticleMetadata:
    """Coerce a loose metadata mapping into ArticleMetadata.

    Backfills a blank title from the file name and a blank excerpt from the
    body blocks, appending a warning for each inference.
    """
    warnings = warnings if warnings is not None else []
    fields = {name: _text(raw.get(name)) for name in TEXT_FIELDS}

    if not fields["title"] and file_name:
        fields["title"] = PurePath(file_name).stem
        warnings.append(f"No title found; using file name '{fields['title']}'.")

    if not fields["excerpt"] and blocks:
        fields["excerpt"] = infer_excerpt(blocks, excerpt_from)
        if fields["excerpt"]:
            warnings.append("Excerpt inferred from body content.")

    slug_source = _text(raw.get("slug")) or fields["title"]
    return ArticleMetadata(
        **fields,
        tags=normalize_tags(raw.get("tags")),
        links=normalize_links(raw.get("links")),
        published_at=coerce_published_at(raw.get("published_at")),
        slug=slugify(slug_source, default_slug),
    )
