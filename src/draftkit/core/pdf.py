"""PDF importer: pypdf text extraction, mandatory human review, heading segmentation"""

import asyncio
import io
import logging
from pathlib import PurePath
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from draftkit.core.decisions import Resolver, TextReviewRequest, request_decision
from draftkit.core.errors import MalformedSourceError
from draftkit.core.extract.text import WHITESPACE_RE, first_sentence, segment_text
from draftkit.core.models import ArticleDraft, DraftSource, HeadingBlock, SourceFormat
from draftkit.core.normalize import normalize_metadata


logger = logging.getLogger(__name__)


def _clean_page(text: str) -> str:
    """Join the page's trimmed text runs with single spaces."""
    return WHITESPACE_RE.sub(" ", text).strip()


def _document_title(reader: PdfReader) -> Optional[str]:
    meta = reader.metadata
    title = (meta.title or "").strip() if meta else ""
    if not title or title.startswith(("{", "[")) or "\n" in title or len(title) >= 200:
        return None
    return title


def extract_pdf_text(data: bytes) -> tuple[str, int, Optional[str]]:
    """Return (text, page_count, document_title); one line per page, blank line between pages."""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [_clean_page(page.extract_text() or "") for page in reader.pages]
        title = _document_title(reader)
    except (PyPdfError, ValueError, KeyError) as e:
        raise MalformedSourceError(f"Unreadable PDF: {e}") from e
    return "\n\n".join(p for p in pages if p), len(pages), title


def _infer_title(blocks: list) -> str:
    for block in blocks:
        if isinstance(block, HeadingBlock) and block.text.strip():
            return block.text.strip()
    if blocks:
        return first_sentence(getattr(blocks[0], "text", ""))
    return ""


async def parse_pdf(
    data: bytes,
    file_name: str,
    resolver: Resolver,
    *,
    default_slug: str = "article",
    heading_max_chars: int = 80,
    heading_max_words: int = 12,
    heading_short_words: int = 8,
    ) -> ArticleDraft:
    """Extract, review, and segment a PDF into an ArticleDraft.

    Blank extracted text fails before the review request is sent; text left
    blank by the reviewer fails after it.
    """
    text, page_count, document_title = await asyncio.to_thread(extract_pdf_text, data)
    if not text.strip():
        raise MalformedSourceError(f"No extractable text in {file_name}")

    request = TextReviewRequest(file_name=file_name, text=text, page_count=page_count)
    reviewed = await request_decision(resolver, request)
    if not str(reviewed).strip():
        raise MalformedSourceError(f"Reviewed text for {file_name} is empty")
    logger.debug("Reviewed %d page(s) of %s", page_count, file_name)

    blocks = segment_text(str(reviewed), heading_max_chars, heading_max_words, heading_short_words)
    warnings: list[str] = []
    raw = {"title": _infer_title(blocks)}

    extras = {"document_title": document_title} if document_title else {}
    source = DraftSource(type=SourceFormat.pdf, file_name=file_name, page_count=page_count, **extras)

    return ArticleDraft(
        metadata=normalize_metadata(
            raw, blocks=blocks, file_name=PurePath(file_name).name, warnings=warnings,
            default_slug=default_slug,
        ),
        blocks=blocks,
        source=source,
        warnings=warnings,
    )
