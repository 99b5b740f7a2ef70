"""Plain-text segmentation and layout-agnostic heading heuristics"""

import re

from draftkit.core.models import HeadingBlock, ParagraphBlock


PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
SENTENCE_RE = re.compile(r"^(.+?[.!?])(?=\s|$)", re.DOTALL)
WHITESPACE_RE = re.compile(r"\s+")
SENTENCE_TERMINALS = (".", "!", "?")


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines; returns trimmed, non-empty chunks."""
    return [p.strip() for p in PARAGRAPH_SPLIT_RE.split(text.replace("\r\n", "\n")) if p.strip()]


def text_to_paragraphs(text: str) -> list[ParagraphBlock]:
    """Plain text -> one ParagraphBlock per blank-line-separated chunk."""
    return [ParagraphBlock(text=chunk) for chunk in split_paragraphs(text)]


def first_sentence(text: str) -> str:
    """Return the first sentence of text (whitespace-collapsed), or all of it."""
    flat = WHITESPACE_RE.sub(" ", text or "").strip()
    m = SENTENCE_RE.match(flat)
    return m.group(1) if m else flat


def is_heading_line(
    line: str,
    max_chars: int = 80,
    max_words: int = 12,
    short_words: int = 8,
    ) -> bool:
    """Heuristic: short, not sentence-terminated, and either very short or ALL CAPS."""
    line = line.strip()
    if not line or len(line) > max_chars or line.endswith(SENTENCE_TERMINALS):
        return False
    if not any(ch.isalpha() for ch in line):
        return False
    words = len(line.split())
    if words > max_words:
        return False
    return words <= short_words or line.upper() == line


def segment_text(
    text: str,
    max_chars: int = 80,
    max_words: int = 12,
    short_words: int = 8,
    ) -> list:
    """Segment reviewed PDF text into heading and paragraph blocks.

    Chunks are split on blank lines; within a chunk each heading-like line becomes
    its own HeadingBlock and runs of other lines are joined into one paragraph.
    A line that continues an unfinished sentence is never a heading.
    """
    blocks: list = []
    for chunk in split_paragraphs(text):
        run: list[str] = []
        for line in chunk.splitlines():
            line = WHITESPACE_RE.sub(" ", line).strip()
            if not line:
                continue
            continues = bool(run) and not run[-1].endswith(SENTENCE_TERMINALS)
            if not continues and is_heading_line(line, max_chars, max_words, short_words):
                if run:
                    blocks.append(ParagraphBlock(text=" ".join(run)))
                    run = []
                blocks.append(HeadingBlock(text=line, level=2))
            else:
                run.append(line)
        if run:
            blocks.append(ParagraphBlock(text=" ".join(run)))
    return blocks
