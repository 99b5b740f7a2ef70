"""markdown-it token stream to ArticleBlock conversion"""

import re
from typing import Optional

from markdown_it import MarkdownIt

from draftkit.core.models import (
    CodeBlock, EmbedBlock, HeadingBlock, ImageBlock, ListBlock, ParagraphBlock, QuoteBlock,
)


IMAGE_RE = re.compile(
    r'^!\[(?P<alt>[^\]]*)\]\((?P<src><[^>]*>|[^\s)]+)(?:\s+["\'](?P<title>[^"\']*)["\'])?\)'
    r'(?:[ \t]*\n[ \t]*_(?P<caption>.+)_)?\s*$'
)
CITE_PREFIXES = ("-- ", "— ", "― ")
BLOCK_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:(?P<mark>[#>+*=\-!<]|`{3}|~{3})|(?P<num>\d+)(?P<delim>[.)]))")
ESCAPED_MARKER_RE = re.compile(r"^\\([#>+*=\-!<`~])|^(\d+)\\([.)])", re.MULTILINE)


def make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def heading_level(token) -> Optional[int]:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def _close_index(tokens: list, i: int) -> int:
    """Index of the token closing tokens[i] (itself for self-contained tokens)."""
    tok = tokens[i]
    if tok.nesting != 1:
        return i
    close_type = tok.type[:-len('_open')] + '_close'
    for j in range(i + 1, len(tokens)):
        if tokens[j].type == close_type and tokens[j].level == tok.level:
            return j
    return len(tokens) - 1


def _source_slice(token, source_lines: list[str]) -> str:
    """Extract raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).rstrip()
    return token.content.rstrip()


def _escape_line(line: str) -> str:
    m = BLOCK_MARKER_RE.match(line)
    if m is None:
        return line
    if m.group("mark"):
        return f"{m.group('indent')}\\{line[m.end('indent'):]}"
    return f"{line[:m.end('num')]}\\{line[m.end('num'):]}"


def escape_block_markers(text: str) -> str:
    """Backslash-escape line-leading characters that would start a non-paragraph block."""
    return "\n".join(_escape_line(line) for line in text.split("\n"))


def unescape_block_markers(content: str) -> str:
    """Undo escape_block_markers on paragraph inline content."""
    return ESCAPED_MARKER_RE.sub(lambda m: m.group(1) or m.group(2) + m.group(3), content)


def parse_image(content: str) -> Optional[ImageBlock]:
    """Return an ImageBlock if content is a lone `![alt](src)` with optional `_caption_` line."""
    m = IMAGE_RE.match(content.strip())
    if not m:
        return None
    src = m.group('src').strip('<>')
    caption = m.group('caption') or m.group('title') or None
    return ImageBlock(src=src, alt=m.group('alt') or None, caption=caption)


def _quote_block(inner: list) -> QuoteBlock:
    parts = [t.content for t in inner if t.type == 'inline']
    cite = None
    if len(parts) > 1 and parts[-1].startswith(CITE_PREFIXES):
        cite = parts.pop()[2:].strip()
    return QuoteBlock(text="\n\n".join(parts), cite=cite)


def _list_block(tokens: list, start: int, end: int) -> ListBlock:
    items = []
    for j in range(start + 1, end):
        item = tokens[j]
        if item.type != 'list_item_open' or item.level != tokens[start].level + 1:
            continue
        item_end = _close_index(tokens, j)
        texts = [
            t.content for t in tokens[j + 1:item_end]
            if t.type == 'inline' and t.level == item.level + 2
        ]
        items.append("\n".join(texts))
    style = 'ordered' if tokens[start].type == 'ordered_list_open' else 'unordered'
    return ListBlock(style=style, items=items)


def tokens_to_blocks(tokens: list, source_lines: list[str]) -> list:
    """Convert top-level markdown-it tokens into ArticleBlocks in document order."""
    blocks = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        end = _close_index(tokens, i)

        if tok.type == 'heading_open':
            blocks.append(HeadingBlock(text=tokens[i + 1].content, level=heading_level(tok)))
        elif tok.type == 'paragraph_open':
            content = tokens[i + 1].content
            blocks.append(parse_image(content) or ParagraphBlock(text=unescape_block_markers(content)))
        elif tok.type == 'blockquote_open':
            blocks.append(_quote_block(tokens[i + 1:end]))
        elif tok.type in ('bullet_list_open', 'ordered_list_open'):
            blocks.append(_list_block(tokens, i, end))
        elif tok.type == 'fence':
            language = tok.info.strip().split()[0] if tok.info.strip() else None
            blocks.append(CodeBlock(code=tok.content.rstrip("\n"), language=language))
        elif tok.type == 'code_block':
            blocks.append(CodeBlock(code=tok.content.rstrip("\n")))
        elif tok.type == 'html_block':
            blocks.append(EmbedBlock(html=tok.content.strip()))
        elif tok.type == 'table_open':
            blocks.append(ParagraphBlock(text=_source_slice(tok, source_lines)))

        i = end + 1
    return blocks


def markdown_to_blocks(body: str, preset: str = "gfm-like") -> tuple[list, list]:
    """Tokenize a markdown body; returns (blocks, top-level tokens)."""
    tokens = make_parser(preset).parse(body)
    return tokens_to_blocks(tokens, body.splitlines(keepends=True)), tokens
