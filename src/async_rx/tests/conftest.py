"""Shared fixtures for async-rx tests."""

from __future__ import annotations

import pytest

from async_rx.config import clear_settings_cache
from async_rx.observability import configure_logging


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Isolate every test from ambient ASYNC_RX_* variables and cached settings."""
    for name in ("ASYNC_RX_STREAM_STRICT_TERMINATION", "ASYNC_RX_LOG_LEVEL", "ASYNC_RX_LOG_FORMAT", "ASYNC_RX_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    configure_logging("none", "WARNING")
    yield
    clear_settings_cache()


@pytest.fixture
def strict(monkeypatch: pytest.MonkeyPatch) -> None:
    """Adapters built inside the test raise when polled after completion."""
    monkeypatch.setenv("ASYNC_RX_STREAM_STRICT_TERMINATION", "true")
    clear_settings_cache()
