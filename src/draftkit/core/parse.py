"""File discovery, frontmatter splitting, and frontmatter value coercion"""

import re
from pathlib import Path
from typing import Any, Optional

import yaml

from draftkit.core.errors import MalformedSourceError
from draftkit.core.fields import PROSE_KEYS, normalize_key


DELIMITER_RE = re.compile(r"^-{3,}\s*$")
FLOW_VALUE_RE = re.compile(r"^(\s*[^\s#:\-][^:]*:\s+)([\[{].*)$")
SUPPORTED_EXTENSIONS = {'.md', '.markdown', '.mdx', '.txt', '.json', '.pdf'}


class PlainScalar(str):
    """A string written unquoted in the frontmatter; only these are coerced further."""


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that tags plain (unquoted, non-block) strings as PlainScalar."""

    def construct_yaml_str(self, node):
        value = super().construct_yaml_str(node)
        return PlainScalar(value) if node.style is None else value


FrontmatterLoader.add_constructor("tag:yaml.org,2002:str", FrontmatterLoader.construct_yaml_str)


def discover_files(path: Path) -> list[Path]:
    """Return sorted importable files under path, or [path] if a single file."""
    if path.is_file():
        return [path]
    return sorted(
        p for p in path.rglob('*')
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS and not p.name.startswith('.')
    )


def split_frontmatter(text: str) -> tuple[Optional[str], str]:
    """Return (frontmatter_block, body); block is None when the text has no header.

    Raises MalformedSourceError when the opening delimiter is never closed.
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or not DELIMITER_RE.match(lines[start].rstrip("\r\n")):
        return None, text

    for end in range(start + 1, len(lines)):
        if DELIMITER_RE.match(lines[end].rstrip("\r\n")):
            return "".join(lines[start + 1:end]), "".join(lines[end + 1:])
    raise MalformedSourceError("Frontmatter is missing its closing '---' delimiter")


def coerce_value(value: Any, key: Optional[str] = None, split: bool = True) -> Any:
    """Post-process a loaded frontmatter value.

    Unquoted comma strings become trimmed lists unless the key holds prose.
    Nulls become empty strings; list items are never split.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        return {str(k): coerce_value(v, str(k), split) for k, v in value.items()}
    if isinstance(value, list):
        return [coerce_value(item, split=False) for item in value]
    if isinstance(value, PlainScalar):
        prose = key is not None and normalize_key(key) in PROSE_KEYS
        if split and not prose and "," in value:
            return [part.strip() for part in value.split(",") if part.strip()]
        return str(value)
    return value


def _is_flow_literal(raw: str) -> bool:
    try:
        yaml.load(raw, Loader=FrontmatterLoader)
    except yaml.YAMLError:
        return False
    return True


def _quote_broken_literals(block: str) -> str:
    """Single-quote `key: [..` / `key: {..` values that do not parse on their own line."""
    lines = []
    for line in block.splitlines():
        m = FLOW_VALUE_RE.match(line)
        if m and not _is_flow_literal(m.group(2)):
            line = m.group(1) + "'" + m.group(2).rstrip().replace("'", "''") + "'"
        lines.append(line)
    return "\n".join(lines)


def parse_frontmatter(block: str) -> dict[str, Any]:
    """Load a YAML frontmatter block into a dict of coerced values.

    A bracket or brace value that is not a valid flow collection is kept as
    its raw string; any other YAML error raises MalformedSourceError.
    """
    try:
        loaded = yaml.load(block, Loader=FrontmatterLoader)
    except yaml.YAMLError:
        try:
            loaded = yaml.load(_quote_broken_literals(block), Loader=FrontmatterLoader)
        except yaml.YAMLError as e:
            raise MalformedSourceError(f"Invalid YAML frontmatter: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise MalformedSourceError(
            f"Invalid YAML frontmatter: expected a mapping, got {type(loaded).__name__}"
        )
    return coerce_value(loaded)
