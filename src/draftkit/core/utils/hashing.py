"""SHA-256 content hashing for asset naming"""

import hashlib


def sha256_bytes(data: bytes) -> str:
    """Return hex-encoded SHA-256 digest of raw bytes (64 chars)."""
    return hashlib.sha256(data).hexdigest()
