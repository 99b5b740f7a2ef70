"""Content-sniffing format detection for imported files"""

from pathlib import PurePath

from draftkit.core.models import SourceFormat


PDF_MAGIC = b"%PDF"
UTF8_BOM = b"\xef\xbb\xbf"

EXTENSION_FORMATS: dict[str, SourceFormat] = {
    ".pdf":      SourceFormat.pdf,
    ".json":     SourceFormat.json,
    ".md":       SourceFormat.markdown,
    ".markdown": SourceFormat.markdown,
    ".mdx":      SourceFormat.markdown,
    ".txt":      SourceFormat.markdown,
}


def detect_format(data: bytes, file_name: str = "") -> SourceFormat:
    """Classify raw bytes as markdown, json, or pdf; content beats the file extension.

    Order: PDF magic bytes, leading JSON bracket, leading frontmatter/heading
    marker, extension, then markdown as the default. Never raises.
    """
    if data.startswith(PDF_MAGIC):
        return SourceFormat.pdf

    head = data[len(UTF8_BOM):] if data.startswith(UTF8_BOM) else data
    head = head.lstrip()
    if head[:1] in (b"{", b"["):
        return SourceFormat.json
    if head.startswith(b"---") or head.startswith(b"#"):
        return SourceFormat.markdown

    suffix = PurePath(file_name).suffix.lower()
    return EXTENSION_FORMATS.get(suffix, SourceFormat.markdown)
