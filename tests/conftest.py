"""
Shared pytest fixtures and configuration for sequent tests.

This module provides:
- Settings isolation (``SEQUENT_*`` env vars and the cached settings)
- Logging context cleanup between tests
- A ``Recorder`` for asserting which handlers ran
"""

import logging
import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

# Ensure sequent package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sequent.core import logging as sequent_logging
from sequent.core.settings import reset_settings
from sequent.engine.testing import Recorder


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop SEQUENT_* variables from the environment and the settings cache."""
    for key in list(os.environ):
        if key.startswith("SEQUENT_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    """Start every test without bound logging context or logging configuration."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    sequent_logging._configured = False
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("sequent").setLevel(logging.NOTSET)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
