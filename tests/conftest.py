"""
Shared pytest fixtures and configuration for docaction tests.

This module provides:
- Settings and logging-context cleanup for test isolation
- Settings that never read the developer's ``.env``
- In-memory MongoDB clients seeded with sample documents

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments::

        async def test_something(fake_client, settings):
            ...
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

from docaction.core.settings import DocActionSettings, reset_settings
from tests._support.fakes import FakeClient

# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_fixture(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Drop cached settings and any DOCACTION_* variables around each test.

    Without this a ``DOCACTION_DEFAULT_URI`` exported in the shell would leak
    into CLI tests.
    """
    import os

    for key in list(os.environ):
        if key.startswith("DOCACTION_"):
            monkeypatch.delenv(key)
    reset_settings()
    structlog.contextvars.clear_contextvars()
    yield
    reset_settings()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory so no ``.env`` file is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def settings() -> DocActionSettings:
    """Settings with a short timeout, built without reading ``.env``."""
    return DocActionSettings(_env_file=None, server_selection_timeout_ms=200)


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def sample_data() -> dict[str, dict[str, list[dict[str, Any]]]]:
    """
    One database with two collections.

    ``shop.orders`` has three orders, two of them open.
    """
    return {
        "shop": {
            "orders": [
                {"_id": 1, "status": "open", "total": 30, "customer": "ada"},
                {"_id": 2, "status": "shipped", "total": 12, "customer": "bob"},
                {"_id": 3, "status": "open", "total": 7, "customer": "ada"},
            ],
            "customers": [
                {"_id": "ada", "name": "Ada"},
                {"_id": "bob", "name": "Bob"},
            ],
        }
    }


@pytest.fixture
def fake_client(sample_data: dict[str, Any]) -> FakeClient:
    """An open in-memory client over :func:`sample_data`."""
    return FakeClient(sample_data)


@pytest.fixture
def orders(fake_client: FakeClient):
    """The ``shop.orders`` collection of :func:`fake_client`."""
    return fake_client.get_database("shop").get_collection("orders")
