"""Block renderers: HTML fragment, Markdown serialization, and page metadata helpers"""

import json
from datetime import datetime
from typing import Callable

from markupsafe import Markup, escape

from draftkit.core.extract.blocks import escape_block_markers
from draftkit.core.models import (
    ArticleMetadata, CodeBlock, EmbedBlock, HeadingBlock, ImageBlock, ListBlock,
    NoteBlock, QuoteBlock, clamp_heading_level,
)
from draftkit.core.normalize import parse_datetime


def _paragraph_html(block) -> str:
    text = getattr(block, "text", "") or ""
    return f"<p>{escape(text).replace(chr(10), Markup('<br>'))}</p>"


def _heading_html(block: HeadingBlock) -> str:
    tag = f"h{clamp_heading_level(block.level)}"
    return f"<{tag}>{escape(block.text)}</{tag}>"


def _list_html(block: ListBlock) -> str:
    if not block.items:
        return ""
    tag = "ol" if block.style == "ordered" else "ul"
    items = "".join(f"<li>{escape(item)}</li>" for item in block.items)
    return f"<{tag}>{items}</{tag}>"


def _quote_html(block: QuoteBlock) -> str:
    cite = f"<cite>{escape(block.cite)}</cite>" if block.cite else ""
    return f"<blockquote><p>{escape(block.text)}</p>{cite}</blockquote>"


def _code_html(block: CodeBlock) -> str:
    language = f' class="language-{escape(block.language)}"' if block.language else ""
    return f"<pre><code{language}>{escape(block.code)}</code></pre>"


def _image_html(block: ImageBlock) -> str:
    if not block.src:
        return ""
    caption = f"<figcaption>{escape(block.caption)}</figcaption>" if block.caption else ""
    alt = block.alt or block.caption or "Article image"
    return (
        f'<figure class="article-image article-image--{escape(block.layout or "full")}">'
        f'<img src="{escape(block.src)}" alt="{escape(alt)}">{caption}</figure>'
    )


def _embed_html(block: EmbedBlock) -> str:
    if block.html:
        return block.html
    if block.url:
        url = escape(block.url)
        return f'<div class="article-embed"><a href="{url}" rel="noopener" target="_blank">{url}</a></div>'
    return ""


def _note_html(block: NoteBlock) -> str:
    return f"<aside>{escape(block.text)}</aside>"


HTML_RENDERERS: dict[str, Callable] = {
    "heading": _heading_html,
    "list":    _list_html,
    "quote":   _quote_html,
    "code":    _code_html,
    "image":   _image_html,
    "embed":   _embed_html,
    "note":    _note_html,
}


def render_blocks(blocks: list) -> str:
    """Render blocks to an HTML fragment; unknown block types render as paragraphs."""
    return "\n".join(
        HTML_RENDERERS.get(getattr(b, "type", None), _paragraph_html)(b) for b in blocks
    )


def _list_markdown(block: ListBlock) -> str:
    if block.style == "ordered":
        return "\n".join(f"{i}. {item}" for i, item in enumerate(block.items, start=1))
    return "\n".join(f"- {item}" for item in block.items)


def _quote_markdown(block: QuoteBlock) -> str:
    lines = [f"> {line}".rstrip() for line in block.text.split("\n")]
    if block.cite:
        lines += [">", f"> -- {block.cite}"]
    return "\n".join(lines)


def _image_markdown(block: ImageBlock) -> str:
    caption = f"\n_{block.caption}_" if block.caption else ""
    return f"![{block.alt or ''}]({block.src}){caption}"


def _paragraph_markdown(block) -> str:
    return escape_block_markers(getattr(block, "text", "") or "")


MARKDOWN_RENDERERS: dict[str, Callable] = {
    "heading": lambda b: f"{'#' * clamp_heading_level(b.level)} {b.text}".strip(),
    "list":    _list_markdown,
    "quote":   _quote_markdown,
    "code":    lambda b: f"```{b.language or ''}\n{b.code}\n```",
    "image":   _image_markdown,
    "embed":   lambda b: b.url or b.html or "",
    "note":    lambda b: f"> {b.text}",
}


def blocks_to_markdown(blocks: list) -> str:
    """Serialize blocks to Markdown; empty parts are dropped, the rest joined by blank lines."""
    parts = (
        MARKDOWN_RENDERERS.get(getattr(b, "type", None), _paragraph_markdown)(b)
        for b in blocks
    )
    return "\n\n".join(p for p in parts if p).strip()


def build_meta_line(metadata: ArticleMetadata) -> str:
    """'Month D, YYYY · By Author' (author part omitted when unknown)."""
    published = parse_datetime(metadata.published_at) or datetime.now()
    parts = [f"{published:%B} {published.day}, {published.year}"]
    if metadata.author:
        parts.append(f"By {metadata.author}")
    return " · ".join(parts)


def absolute_url(resource: str, base_url: str) -> str:
    """Resolve a site-relative resource against base_url; absolute URLs pass through."""
    if resource.startswith(("http://", "https://")):
        return resource
    base = base_url.removesuffix("index.html").rstrip("/")
    return f"{base}/{resource.lstrip('/')}"


def build_json_ld(metadata: ArticleMetadata, canonical_url: str, base_url: str) -> str:
    """schema.org Article JSON-LD, safe to inline inside a <script> element."""
    data: dict = {
        "@context": "https://schema.org",
        "@type": "Article",
        "headline": metadata.title,
        "description": metadata.excerpt,
        "datePublished": metadata.published_at,
        "dateModified": metadata.published_at,
        "url": canonical_url,
        "mainEntityOfPage": canonical_url,
    }
    if metadata.author:
        data["author"] = {"@type": "Person", "name": metadata.author}
    if metadata.hero_image:
        data["image"] = [absolute_url(metadata.hero_image, base_url)]
    if metadata.tags:
        data["keywords"] = ", ".join(metadata.tags)
    return json.dumps(data, indent=2, ensure_ascii=False).replace("</", "<\\/")
