"""Structured logging for stream adapters.

Bound-context loggers with pluggable renderers:
- Human-readable console output for development
- JSON lines (orjson) for log aggregation
- Silent renderer for tests

Adapters log state transitions (inner stream replaced, batch flushed,
stream terminated) at debug level, so nothing is printed unless the
level is lowered.

Quick Start:
    >>> from async_rx.observability import configure_logging, get_logger
    >>> configure_logging(format="console", level="DEBUG")
    >>> log = get_logger("async_rx.switch")
    >>> log.debug("inner replaced", generation=2)
    # => 10:30:45.123 [debug] inner replaced generation=2 logger=async_rx.switch
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from async_rx.config import AsyncRxSettings

LogValue = str | int | float | bool | None


# ─────────────────────────────────────────────────────────────────────────────
# Core Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class LogEntry:
    """A single rendered log record."""

    timestamp: float
    level: str
    event: str
    context: dict[str, LogValue]

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm"""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context.

    Immutable: bind() returns a new logger with merged context. The level
    threshold is read at call time, so loggers created at import time
    follow a later configure_logging().

    Example:
        >>> log = BoundLogger(context={"adapter": "switch"})
        >>> log.bind(generation=3).debug("inner replaced")
    """

    context: dict[str, LogValue] = field(default_factory=dict)
    _renderer: LogRenderer | None = None

    def bind(self, **kw: LogValue) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer)

    def is_enabled_for(self, level: int) -> bool:
        return level >= _level.get()

    def _log(self, level: int, event: str, **kw: LogValue) -> None:
        if level < _level.get():
            return
        entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**self.context, **kw})
        (self._renderer or _get_renderer()).render(entry)

    def debug(self, event: str, **kw: LogValue) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: LogValue) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: LogValue) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: LogValue) -> None: self._log(logging.ERROR, event, **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """Format: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    show_timestamp: bool = True

    def render(self, entry: LogEntry) -> None:
        parts = [entry.ts_human] if self.show_timestamp else []
        parts += [f"[{entry.level}]", entry.event]
        parts += [f"{k}={v!r}" if isinstance(v, str) and " " in v else f"{k}={v}"
                  for k, v in sorted(entry.context.items())]
        print(" ".join(parts), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        import orjson
        print(orjson.dumps({"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event,
                            **entry.context}, option=orjson.OPT_NON_STR_KEYS).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for testing."""

    def render(self, entry: LogEntry) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: ContextVar[LogRenderer | None] = ContextVar("async_rx_log_renderer", default=None)
_level: ContextVar[int] = ContextVar("async_rx_log_level", default=logging.WARNING)


def configure_logging(
    format: str = "console",  # noqa: A002 - matches settings field name
    level: str = "WARNING",
    *,
    output: TextIO | None = None,
) -> LogRenderer:
    """Configure adapter logging. Format: "console" (human), "json" (machine), "none"."""
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _level.set(resolved)
    _renderer.set(renderer)
    return renderer


def configure_from_settings(settings: AsyncRxSettings | None = None, *, output: TextIO | None = None) -> LogRenderer:
    """Configure logging from AsyncRxSettings (defaults to the cached global settings)."""
    if settings is None:
        from async_rx.config import get_settings
        settings = get_settings()
    return configure_logging(settings.logging.format, settings.effective_log_level, output=output)


def get_logger(name: str | None = None, **initial_context: LogValue) -> BoundLogger:
    """Get a structured logger. Name is added to context as 'logger'."""
    return BoundLogger(context={**initial_context, **({"logger": name} if name else {})})


def _get_renderer() -> LogRenderer:
    if (renderer := _renderer.get()) is None:
        _renderer.set(renderer := ConsoleRenderer())
    return renderer
