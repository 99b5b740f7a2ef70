"""JSON importer: alias-based field detection, manual mapping fallback, and body conversion"""

import json
import logging
from typing import Any, Callable, Mapping

from draftkit.core.decisions import FieldMappingRequest, Resolver, request_decision
from draftkit.core.errors import MalformedSourceError, MissingFieldError
from draftkit.core.extract.text import split_paragraphs, text_to_paragraphs
from draftkit.core.fields import resolve_fields
from draftkit.core.models import (
    ArticleDraft, CodeBlock, DraftSource, EmbedBlock, HeadingBlock, ImageBlock,
    ListBlock, NoteBlock, ParagraphBlock, QuoteBlock, SourceFormat,
)
from draftkit.core.normalize import normalize_metadata


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "body")
TEXT_KEYS = ("text", "content", "body", "value", "html", "markdown")
HEADING_KEYS = ("heading", "title", "headline")


def load_json_root(text: str) -> dict[str, Any]:
    """Parse JSON text; an array root yields its first element, which must be an object."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedSourceError(f"Invalid JSON: {e}") from e
    if isinstance(data, list):
        if not data:
            raise MalformedSourceError("JSON array is empty")
        data = data[0]
    if not isinstance(data, dict):
        raise MalformedSourceError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _text_of(section: Mapping[str, Any], keys=TEXT_KEYS) -> str:
    for key in keys:
        value = section.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None


def _heading(section: Mapping[str, Any]) -> list:
    text = _text_of(section, ("text", "heading", "title", "content"))
    return [HeadingBlock(text=text, level=section.get("level", 2))]


def _quote(section: Mapping[str, Any]) -> list:
    cite = section.get("cite") or section.get("author") or section.get("source")
    return [QuoteBlock(text=_text_of(section), cite=_optional(cite))]


def _list(section: Mapping[str, Any]) -> list:
    items = section.get("items", section.get("list", section.get("content", [])))
    if isinstance(items, str):
        items = [line.strip().lstrip("-*").strip() for line in items.splitlines()]
    elif not isinstance(items, list):
        items = [items]
    ordered = section.get("style") == "ordered" or section.get("ordered") is True
    return [ListBlock(
        style="ordered" if ordered else "unordered",
        items=[str(i) for i in items if i not in (None, "")],
    )]


def _image(section: Mapping[str, Any]) -> list:
    src = section.get("src") or section.get("url") or section.get("image")
    if not src:
        return []
    return [ImageBlock(
        src=str(src),
        alt=_optional(section.get("alt")),
        caption=_optional(section.get("caption")),
        layout=_optional(section.get("layout")),
        width=_to_int(section.get("width")),
        height=_to_int(section.get("height")),
    )]


def _html(section: Mapping[str, Any]) -> list:
    html = _text_of(section, ("html", "content", "text"))
    return [EmbedBlock(html=html)] if html else []


def _embed(section: Mapping[str, Any]) -> list:
    url, html = _optional(section.get("url")), _optional(section.get("html"))
    return [EmbedBlock(url=url, html=html)] if url or html else []


def _code(section: Mapping[str, Any]) -> list:
    code = _text_of(section, ("code", "content", "text"))
    return [CodeBlock(code=code, language=_optional(section.get("language") or section.get("lang")))]


def _note(section: Mapping[str, Any]) -> list:
    return [NoteBlock(text=_text_of(section))]


def _default(section: Mapping[str, Any]) -> list:
    """Paragraph fallback; a heading key plus nested content becomes heading + content."""
    blocks: list = []
    heading = _text_of(section, HEADING_KEYS)
    if heading:
        blocks.append(HeadingBlock(text=heading, level=section.get("level", 2)))
    for key in TEXT_KEYS + ("sections", "items", "paragraphs"):
        if key in section and section[key] not in (None, ""):
            blocks.extend(body_to_blocks(section[key]))
            break
    return blocks


SECTION_HANDLERS: dict[str, Callable[[Mapping[str, Any]], list]] = {
    "heading":   _heading,
    "quote":     _quote,
    "list":      _list,
    "image":     _image,
    "html":      _html,
    "code":      _code,
    "embed":     _embed,
    "note":      _note,
    "paragraph": lambda s: text_to_paragraphs(_text_of(s)) or [ParagraphBlock(text="")],
}


def section_to_blocks(section: Mapping[str, Any]) -> list:
    """Dispatch on the section's `type`; unknown types fall back to a paragraph."""
    kind = str(section.get("type") or "").strip().lower()
    handler = SECTION_HANDLERS.get(kind, _default)
    return handler(section)


def body_to_blocks(body: Any) -> list:
    """Convert a mapped body value (string, list of sections, or object) into blocks."""
    if body is None:
        return []
    if isinstance(body, str):
        return text_to_paragraphs(body)
    if isinstance(body, Mapping):
        return section_to_blocks(body)
    if isinstance(body, list):
        blocks: list = []
        for element in body:
            if isinstance(element, Mapping):
                blocks.extend(section_to_blocks(element))
            elif isinstance(element, str):
                blocks.extend(ParagraphBlock(text=p) for p in split_paragraphs(element))
            elif element is not None:
                blocks.append(ParagraphBlock(text=str(element)))
        return blocks
    return [ParagraphBlock(text=str(body))]


def _validate_mapping(answer: Any, suggested: dict[str, str], data: Mapping[str, Any]) -> dict[str, str]:
    """Merge a manual answer over the auto-resolved fields and check every key exists."""
    if not isinstance(answer, Mapping):
        raise MissingFieldError("body", "Field mapping must be a mapping of field -> key")
    merged = {**suggested, **answer}
    cleaned = {str(f): str(k) for f, k in merged.items() if k not in (None, "")}
    for field, key in cleaned.items():
        if key not in data:
            raise MissingFieldError(field, f"Mapped key '{key}' for {field} not found in JSON")
    for field in REQUIRED_FIELDS:
        if field not in cleaned:
            raise MissingFieldError(field)
    return cleaned


async def parse_json(text: str, file_name: str, resolver: Resolver, default_slug: str = "article") -> ArticleDraft:
    """Parse an arbitrary JSON object into an ArticleDraft.

    Suspends on the resolver with a FieldMappingRequest when title or body
    cannot be matched through the alias lists.
    """
    data = load_json_root(text)
    field_map = resolve_fields(data)
    missing = [f for f in REQUIRED_FIELDS if f not in field_map]

    if missing:
        request = FieldMappingRequest(
            file_name=file_name, keys=list(data), missing=missing, suggested=field_map,
        )
        answer = await request_decision(resolver, request)
        field_map = _validate_mapping(answer, field_map, data)
        logger.info("Manual field mapping for %s: %s", file_name, field_map)

    warnings: list[str] = []
    blocks = body_to_blocks(data[field_map["body"]])
    if not blocks:
        warnings.append("Body is empty.")

    raw = {field: data[key] for field, key in field_map.items() if field != "body"}
    used = set(field_map.values())
    additional = {k: v for k, v in data.items() if k not in used}

    return ArticleDraft(
        metadata=normalize_metadata(
            raw, blocks=blocks, file_name=file_name, warnings=warnings,
            excerpt_from=("paragraph", "quote"), default_slug=default_slug,
        ),
        blocks=blocks,
        additional_metadata=additional,
        source=DraftSource(type=SourceFormat.json, file_name=file_name, field_map=field_map),
        warnings=warnings,
    )
