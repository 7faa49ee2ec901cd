"""Shared pytest fixtures for the synopsis test suite."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog

from tests.helpers import USER_SOURCE, user_structure


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo ``configure_logging`` so handlers never outlive a CLI invocation."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def user_file(tmp_path: Path) -> Path:
    """User.swift with its sidecar structure dump."""
    path = tmp_path / "User.swift"
    path.write_text(USER_SOURCE, encoding="utf-8")
    (tmp_path / "User.swift.json").write_text(json.dumps(user_structure()))
    return path
