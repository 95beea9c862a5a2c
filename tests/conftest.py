"""Test configuration helpers."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

# Explicitly opt-in to the async plugins we rely on. Some execution environments
# disable plugin auto-discovery via ``PYTEST_DISABLE_PLUGIN_AUTOLOAD`` which
# prevents ``pytest-asyncio`` and AnyIO's plugin from being loaded even if the
# packages are installed.
pytest_plugins = ("anyio", "pytest_asyncio")

# Ensure the repository root is importable so that ``import core`` and the
# other absolute imports succeed from arbitrary working directories.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Tests never talk to AWS: keep the app on the in-memory registry and give
# boto3 enough configuration to build clients offline.
os.environ.pop("TABLE_NAME", None)
os.environ.pop("DYNAMODB_ENDPOINT_URL", None)
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")


@pytest.fixture
def anyio_backend() -> str:
    """Default AnyIO backend used when tests do not override the fixture."""

    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def suppress_asyncio_debug_logging() -> None:
    """Prevent asyncio debug logs from writing to closed pytest capture streams."""

    logger = logging.getLogger("asyncio")
    if logger.getEffectiveLevel() < logging.INFO:
        logger.setLevel(logging.INFO)
