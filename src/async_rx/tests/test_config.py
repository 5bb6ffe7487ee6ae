"""Tests for settings, logging and error types."""

from __future__ import annotations

import io
import json

import pytest
from pydantic import ValidationError

from async_rx import ErrorCode, StreamError, StreamTerminatedError, channel, iter_stream, pending
from async_rx.config import AsyncRxSettings, LoggingSettings, clear_settings_cache, get_settings
from async_rx.observability import (
    ConsoleRenderer,
    JsonRenderer,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
)
from async_rx.testing import assert_closed, assert_next_eq


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


class TestSettings:
    """Tests for environment-based configuration."""

    def test_defaults(self) -> None:
        settings = get_settings()
        assert settings.debug is False
        assert settings.logging.level == "WARNING"
        assert settings.logging.format == "console"
        assert settings.streams.strict_termination is False
        assert settings.effective_log_level == "WARNING"

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ASYNC_RX_LOG_LEVEL", "debug")
        monkeypatch.setenv("ASYNC_RX_LOG_FORMAT", "JSON")
        monkeypatch.setenv("ASYNC_RX_STREAM_STRICT_TERMINATION", "1")
        clear_settings_cache()
        settings = get_settings()
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"
        assert settings.streams.strict_termination is True

    def test_debug_lowers_effective_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ASYNC_RX_DEBUG", "true")
        clear_settings_cache()
        assert get_settings().effective_log_level == "DEBUG"

    def test_invalid_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ASYNC_RX_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            LoggingSettings()

    def test_strict_read_at_construction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        lenient = iter_stream([]).dedup()
        monkeypatch.setenv("ASYNC_RX_STREAM_STRICT_TERMINATION", "true")
        clear_settings_cache()
        strict = iter_stream([]).dedup()

        assert_closed(lenient)
        assert_closed(strict)
        assert_closed(lenient)
        with pytest.raises(StreamTerminatedError):
            assert_closed(strict)


# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────


class TestLogging:
    """Tests for structured adapter logging."""

    def test_debug_suppressed_by_default(self) -> None:
        out = io.StringIO()
        configure_logging("console", "WARNING", output=out)
        get_logger("test").debug("hidden")
        assert out.getvalue() == ""

    def test_console_output(self) -> None:
        out = io.StringIO()
        configure_logging("console", "debug", output=out)
        get_logger("test", component="unit").bind(step=1).info("hello world")
        line = out.getvalue().strip()
        assert "[info] hello world" in line
        assert "component=unit" in line
        assert "logger=test" in line
        assert "step=1" in line

    def test_json_output(self) -> None:
        out = io.StringIO()
        configure_logging("json", "DEBUG", output=out)
        get_logger("test").warning("careful", size=3)
        record = json.loads(out.getvalue())
        assert record["event"] == "careful"
        assert record["level"] == "warning"
        assert record["size"] == 3
        assert record["logger"] == "test"

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            configure_logging("xml")

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            configure_logging("console", "LOUD")

    def test_configure_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ASYNC_RX_LOG_FORMAT", "none")
        clear_settings_cache()
        assert isinstance(configure_from_settings(), NoOpRenderer)
        assert isinstance(configure_from_settings(AsyncRxSettings(logging={"format": "json"})), JsonRenderer)
        assert isinstance(configure_from_settings(AsyncRxSettings(logging={"format": "console"})), ConsoleRenderer)

    def test_adapters_log_transitions(self) -> None:
        out = io.StringIO()
        configure_logging("console", "DEBUG", output=out)

        tx, rx = channel()
        stream = rx.switch()
        tx.send(iter_stream([1]))
        assert_next_eq(stream, 1)
        tx.send(iter_stream([2]))
        assert_next_eq(stream, 2)

        batches = iter_stream([1, 2]).batch_with(pending())
        assert_next_eq(batches, [1, 2])

        logged = out.getvalue()
        assert "inner stream replaced" in logged
        assert "generation=2" in logged
        assert "batch flushed" in logged
        assert "size=2" in logged


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────


class TestErrors:
    """Tests for error payloads."""

    def test_error_render(self) -> None:
        err = StreamTerminatedError.create("Switch", "polled after completion")
        assert err.error.code == ErrorCode.TERMINATED
        assert str(err) == "[TERMINATED] Switch: polled after completion"

    def test_stream_name_from_object(self) -> None:
        assert StreamError(stream=iter_stream([]), message="x").stream == "IterStream"

    def test_error_is_frozen(self) -> None:
        err = StreamError(stream="s", message="m")
        with pytest.raises(ValidationError):
            err.message = "changed"  # type: ignore[misc]
