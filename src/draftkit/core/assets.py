"""Content-addressed image assets written during one export"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional

from draftkit.core.utils.hashing import sha256_bytes
from draftkit.core.utils.slug import slugify


logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:(.+?);base64,(.+)$", re.DOTALL)
EXTERNAL_PREFIXES = ("http://", "https://", "//")
DEFAULT_EXTENSION = ".png"
MIME_EXTENSIONS = {
    "jpeg":    ".jpg",
    "jpg":     ".jpg",
    "png":     ".png",
    "gif":     ".gif",
    "webp":    ".webp",
    "svg+xml": ".svg",
}


def mime_to_extension(mime: str) -> str:
    """Map an image mime type to a file extension; non-images become .bin."""
    kind, _, subtype = (mime or "").strip().lower().partition("/")
    if kind != "image" or not subtype:
        return ".bin"
    return MIME_EXTENSIONS.get(subtype, f".{subtype}")


@dataclass(frozen=True)
class AssetRef:
    url: str
    path: Path
    digest: str


@dataclass
class AssetStore:
    """Per-export asset writer; identical bytes always resolve to one file and URL."""
    asset_dir: Path
    url_base: str
    source_root: Path = Path(".")
    by_source: dict[str, AssetRef] = field(default_factory=dict)
    by_digest: dict[str, AssetRef] = field(default_factory=dict)
    used_names: set[str] = field(default_factory=set)

    @property
    def written(self) -> list[AssetRef]:
        return list(self.by_digest.values())

    def _load(self, source: str) -> Optional[tuple[bytes, str]]:
        """Return (bytes, extension) for a data URL or local file; None when unusable."""
        m = DATA_URL_RE.match(source)
        if m:
            try:
                payload = "".join(m.group(2).split())
                return base64.b64decode(payload, validate=True), mime_to_extension(m.group(1))
            except (binascii.Error, ValueError) as e:
                logger.warning("Skipping data URL with invalid base64 payload: %s", e)
                return None

        path = Path(source)
        if not path.is_absolute():
            path = self.source_root / source.removeprefix("./")
        try:
            return path.read_bytes(), path.suffix or DEFAULT_EXTENSION
        except OSError as e:
            logger.warning("Skipping unreadable asset %s: %s", path, e)
            return None

    def _unique_name(self, hint: str, digest: str, extension: str) -> str:
        base = f"{slugify(hint, 'image')}-{digest[:6]}"
        candidate, suffix = f"{base}{extension}", 1
        while candidate in self.used_names:
            candidate = f"{base}-{suffix}{extension}"
            suffix += 1
        self.used_names.add(candidate)
        return candidate

    def ensure(self, source: str, name_hint: str) -> Optional[AssetRef]:
        """Copy source into the asset directory and return its reference.

        External URLs and unusable sources return None and are left untouched
        by the caller.
        """
        if not source or source.startswith(EXTERNAL_PREFIXES):
            return None
        if source in self.by_source:
            return self.by_source[source]

        loaded = self._load(source)
        if loaded is None:
            return None
        data, extension = loaded
        digest = sha256_bytes(data)

        ref = self.by_digest.get(digest)
        if ref is None:
            name = self._unique_name(name_hint, digest, extension)
            self.asset_dir.mkdir(parents=True, exist_ok=True)
            target = self.asset_dir / name
            target.write_bytes(data)
            ref = AssetRef(url=str(PurePosixPath(self.url_base) / name), path=target, digest=digest)
            self.by_digest[digest] = ref
            logger.debug("Wrote asset %s", target)

        self.by_source[source] = ref
        return ref
