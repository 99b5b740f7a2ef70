"""Logging setup for the draftkit logger hierarchy"""

import logging
import sys


LOGGER_NAME = "draftkit"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def resolve_log_level(raw_level: str) -> int:
    """Map a level name to its logging constant; unknown names become WARNING."""
    resolved = getattr(logging, str(raw_level or "").strip().upper(), None)
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Install a single stderr handler on the draftkit logger; safe to call repeatedly."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
