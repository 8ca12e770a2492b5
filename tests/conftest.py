"""Shared fixtures for the supply test suite."""

from __future__ import annotations

import pytest

from supply.core.config import SupplySettings
from supply.emitter import MemoryEmitter
from supply.pipeline import Supply


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> SupplySettings:
    """Default settings, isolated from SUPPLY_* environment variables."""
    return SupplySettings()


@pytest.fixture(autouse=True)
def _clean_supply_env(monkeypatch):
    """Keep the developer's SUPPLY_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("SUPPLY_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo any setup_logging() call made during a test."""
    import logging

    import structlog

    from supply.observability import logger as supply_logger

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    supply_logger._handler = None
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Pipelines
# ---------------------------------------------------------------------------

@pytest.fixture
def emitter() -> MemoryEmitter:
    return MemoryEmitter()


@pytest.fixture
def supply(emitter, settings):
    """A pipeline whose provider is an in-memory emitter."""
    pipeline = Supply(emitter, settings=settings)
    yield pipeline
    pipeline.destroy()


@pytest.fixture
def four_layers(supply) -> Supply:
    """Pipeline holding foo, bar, pez, jam (in that order)."""
    for name in ("foo", "bar", "pez", "jam"):
        supply.use(name, lambda data: None)
    return supply


class Recorder:
    """Completion callback that remembers every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[BaseException | None, bool]] = []

    def __call__(self, error: BaseException | None = None, early: bool = False) -> None:
        self.calls.append((error, early))

    @property
    def once(self) -> tuple[BaseException | None, bool]:
        assert len(self.calls) == 1, f"expected one completion, got {self.calls}"
        return self.calls[0]


@pytest.fixture
def done() -> Recorder:
    return Recorder()
