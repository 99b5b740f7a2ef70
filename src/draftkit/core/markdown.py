"""Markdown + frontmatter importer"""

from typing import Any

from draftkit.core.extract.blocks import heading_level, markdown_to_blocks
from draftkit.core.fields import METADATA_ALIAS_FIELDS, resolve_fields
from draftkit.core.models import ArticleDraft, DraftSource, HeadingBlock, METADATA_FIELDS, SourceFormat
from draftkit.core.normalize import normalize_metadata
from draftkit.core.parse import parse_frontmatter, split_frontmatter


def _map_frontmatter(frontmatter: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split frontmatter into (canonical metadata, additional metadata) using field aliases."""
    resolved = resolve_fields(frontmatter, METADATA_ALIAS_FIELDS)
    metadata = {field: frontmatter[key] for field, key in resolved.items()}
    if "slug" in frontmatter:
        metadata["slug"] = frontmatter["slug"]
    used = set(resolved.values()) | {"slug"}
    additional = {k: v for k, v in frontmatter.items() if k not in used and k not in METADATA_FIELDS}
    return metadata, additional


def _first_heading(tokens: list) -> tuple[str, int] | None:
    """Text and level of the first top-level heading that has text."""
    for i, tok in enumerate(tokens):
        level = heading_level(tok) if tok.level == 0 else None
        if level is not None and tokens[i + 1].content.strip():
            return tokens[i + 1].content.strip(), level
    return None


def parse_markdown(text: str, file_name: str, preset: str = "gfm-like", default_slug: str = "article") -> ArticleDraft:
    """Parse markdown text (optionally with frontmatter) into an ArticleDraft.

    Title falls back to the first body heading (an H1 used that way is dropped
    from the body), then to the file name with a warning.
    """
    block, body = split_frontmatter(text)
    frontmatter = parse_frontmatter(block) if block is not None else {}
    metadata, additional = _map_frontmatter(frontmatter)

    blocks, tokens = markdown_to_blocks(body, preset)
    warnings: list[str] = []

    if not str(metadata.get("title") or "").strip():
        heading = _first_heading(tokens)
        if heading:
            metadata["title"] = heading[0]
            if heading[1] == 1:
                first = next(i for i, b in enumerate(blocks) if isinstance(b, HeadingBlock) and b.text.strip())
                blocks.pop(first)

    return ArticleDraft(
        metadata=normalize_metadata(
            metadata, blocks=blocks, file_name=file_name, warnings=warnings, default_slug=default_slug,
        ),
        blocks=blocks,
        additional_metadata=additional,
        source=DraftSource(type=SourceFormat.markdown, file_name=file_name),
        warnings=warnings,
    )
