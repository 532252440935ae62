"""Shared test fixtures for protoc-json tests."""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging config bound to a captured stream once the test ends."""
    yield
    structlog.reset_defaults()
