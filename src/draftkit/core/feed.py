"""Article feed: upsert by slug, newest first, atomic rewrite"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from draftkit.core.models import FeedEntry
from draftkit.core.normalize import parse_datetime


logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def read_feed(feed_path: Path) -> list[dict]:
    """Load the feed list; a missing or invalid file yields an empty feed."""
    if not feed_path.exists():
        return []
    try:
        data = json.loads(feed_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Resetting unreadable feed %s: %s", feed_path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Resetting feed %s: expected a JSON list", feed_path)
        return []
    return [item for item in data if isinstance(item, dict)]


def _published(item: dict) -> datetime:
    return parse_datetime(item.get("published_at")) or _EPOCH


def write_atomic(path: Path, text: str) -> None:
    """Write text to a sibling temp file, then rename it over path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def update_feed(feed_path: Path, entry: FeedEntry) -> list[dict]:
    """Replace the entry with the same slug (or append), sort newest first, and write."""
    feed = [item for item in read_feed(feed_path) if item.get("slug") != entry.slug]
    feed.append(entry.model_dump())
    feed.sort(key=_published, reverse=True)
    write_atomic(feed_path, json.dumps(feed, indent=2, ensure_ascii=False))
    return feed
