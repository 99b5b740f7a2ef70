"""Canonical block, metadata, and draft models shared by importers and renderers"""

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator


MIN_HEADING_LEVEL = 2
MAX_HEADING_LEVEL = 4


def new_block_id() -> str:
    """Return a fresh block identifier; random, so never reused within a session."""
    return uuid4().hex


def clamp_heading_level(level: Any) -> int:
    """Coerce any level into the 2..4 range; non-numeric input becomes 2."""
    try:
        value = int(level)
    except (TypeError, ValueError):
        return MIN_HEADING_LEVEL
    return max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, value))


class SourceFormat(str, Enum):
    """Input formats the importers understand"""
    markdown = "markdown"
    json = "json"
    pdf = "pdf"


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str = Field(default_factory=new_block_id)


class ParagraphBlock(_Block):
    type: Literal["paragraph"] = "paragraph"
    text: str = ""


class HeadingBlock(_Block):
    type: Literal["heading"] = "heading"
    text: str = ""
    level: int = MIN_HEADING_LEVEL

    @field_validator("level", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_heading_level(value)


class ListBlock(_Block):
    type: Literal["list"] = "list"
    style: Literal["ordered", "unordered"] = "unordered"
    items: list[str] = Field(default_factory=list)


class QuoteBlock(_Block):
    type: Literal["quote"] = "quote"
    text: str = ""
    cite: Optional[str] = None


class CodeBlock(_Block):
    type: Literal["code"] = "code"
    code: str = ""
    language: Optional[str] = None


class ImageBlock(_Block):
    type: Literal["image"] = "image"
    src: str
    alt: Optional[str] = None
    caption: Optional[str] = None
    layout: Optional[str] = None    # full | left | right | gallery; renderer defaults to full
    width: Optional[int] = None
    height: Optional[int] = None


class EmbedBlock(_Block):
    type: Literal["embed"] = "embed"
    url: Optional[str] = None
    html: Optional[str] = None      # trusted markup, rendered verbatim


class NoteBlock(_Block):
    type: Literal["note"] = "note"
    text: str = ""


ArticleBlock = Annotated[
    Union[
        ParagraphBlock, HeadingBlock, ListBlock, QuoteBlock,
        CodeBlock, ImageBlock, EmbedBlock, NoteBlock,
    ],
    Field(discriminator="type"),
]

BLOCK_TYPES = frozenset({
    "paragraph", "heading", "list", "quote", "code", "image", "embed", "note",
})

_block_adapter = TypeAdapter(ArticleBlock)


def coerce_block(data: Any) -> Any:
    """Validate a raw block mapping; unknown or invalid types degrade to a paragraph."""
    if isinstance(data, BaseModel):
        return data
    if not isinstance(data, Mapping):
        return ParagraphBlock(text="" if data is None else str(data))
    if data.get("type") in BLOCK_TYPES:
        try:
            return _block_adapter.validate_python(dict(data))
        except ValidationError:
            pass
    text = data.get("text") or data.get("content") or ""
    fields = {"text": text if isinstance(text, str) else str(text)}
    if data.get("id"):
        fields["id"] = str(data["id"])
    return ParagraphBlock(**fields)


class ArticleLink(BaseModel):
    label: str = ""
    url: str = ""


class ArticleMetadata(BaseModel):
    """Normalized article metadata; required-field checks happen at export time."""
    title:        str = ""
    subtitle:     str = ""
    author:       str = ""
    category:     str = ""
    tags:         list[str] = Field(default_factory=list)
    published_at: str = ""
    excerpt:      str = ""
    hero_image:   str = ""
    hero_caption: str = ""
    links:        list[ArticleLink] = Field(default_factory=list)
    slug:         str = ""


METADATA_FIELDS = tuple(ArticleMetadata.model_fields)


class DraftSource(BaseModel):
    """Where a draft came from; format-specific extras are allowed."""
    model_config = ConfigDict(extra="allow")
    type: SourceFormat
    file_name: str
    page_count: Optional[int] = None
    field_map: Optional[dict[str, str]] = None


class ArticleDraft(BaseModel):
    """Normalized import result consumed read-only by preview and export."""
    model_config = ConfigDict(frozen=True)
    metadata: ArticleMetadata
    blocks: list[ArticleBlock] = Field(default_factory=list)
    assets: list[dict[str, Any]] = Field(default_factory=list)
    additional_metadata: dict[str, Any] = Field(default_factory=dict)
    source: DraftSource
    warnings: list[str] = Field(default_factory=list)

    @field_validator("blocks", mode="before")
    @classmethod
    def _coerce_blocks(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [coerce_block(b) for b in value]
        return value


class FeedEntry(BaseModel):
    title: str
    slug: str
    url: str
    hero: Optional[str] = None
    excerpt: str
    published_at: str
