"""Root test configuration: session-level cleanup of runtime artifacts"""

import logging
import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = [".draftkit", "dist", "articles"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove staging and output directories created during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(autouse=True)
def reset_draftkit_logger():
    """Drop handlers bound to streams that CliRunner closes after each invoke."""
    yield
    logger = logging.getLogger("draftkit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
