"""
Shared pytest fixtures for bossdesk tests.

This module provides:
- A scripted ``FakeExecutor`` (see ``tests/_support/fakes.py``)
- Adapter registry and operation context fixtures wired to it
- Settings cache and logging configuration isolation
- Automatic ``unit`` marking

Nothing here talks to PostgreSQL.
"""

from __future__ import annotations

import logging

import pytest
import structlog

from bossdesk.core.settings import clear_settings_cache
from bossdesk.ops.context import OperationContext
from bossdesk.schema.registry import AdapterRegistry
from tests._support.fakes import FakeExecutor


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test that carries no explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "unit" not in markers:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Each test sees a fresh settings cache and no stray BOSSDESK_* env."""
    for key in ("BOSSDESK_SCHEMA_NAME", "BOSSDESK_DATABASE_URL", "BOSSDESK_PAGE_SIZE", "BOSSDESK_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo ``configure_logging`` so one test's log level and stream never leak into the next."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in [h for h in root.handlers if type(h) is logging.StreamHandler]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger("bossdesk").setLevel(logging.NOTSET)


@pytest.fixture()
def executor() -> FakeExecutor:
    """Fake executor reporting schema version 27."""
    return FakeExecutor()


@pytest.fixture()
def registry() -> AdapterRegistry:
    return AdapterRegistry()


@pytest.fixture()
def ctx(executor: FakeExecutor, registry: AdapterRegistry) -> OperationContext:
    return OperationContext(executor=executor, registry=registry, connection_id="test", caller="test")


@pytest.fixture()
def dry_ctx(executor: FakeExecutor, registry: AdapterRegistry) -> OperationContext:
    return OperationContext(
        executor=executor, registry=registry, connection_id="test", caller="test", dry_run=True
    )
