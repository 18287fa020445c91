"""Pytest configuration for monitor tests."""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from monitor.core.config import get_settings
from monitor.core.context import clear_context
from monitor.core.log import logger_var


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_request_context():
    """Start every test with an empty request context and no context logger."""
    clear_context()
    token = logger_var.set(None)
    get_settings.cache_clear()
    yield
    logger_var.reset(token)
    clear_context()
    get_settings.cache_clear()
