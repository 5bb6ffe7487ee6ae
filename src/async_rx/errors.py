"""Error types for async-rx.

The adapters never wrap item failures: an item that encodes an error is
forwarded like any other item. The errors here describe misuse of the
library itself (polling past completion, sending on a closed channel,
handing ``switch`` something that is not a stream).

Uses Pydantic for the structured error payload, mirroring how the
exceptions are rendered in logs.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorCode(StrEnum):
    """Machine-readable error codes."""
    TERMINATED = "TERMINATED"          # Polled after reporting completion
    CHANNEL_CLOSED = "CHANNEL_CLOSED"  # Send on a closed channel
    NOT_READY = "NOT_READY"            # Stream was pending where a value was required
    INVALID_STREAM = "INVALID_STREAM"  # Object is not a stream or async iterable
    UNKNOWN = "UNKNOWN"


class StreamError(BaseModel):
    """Structured description of a library error.

    Attributes:
        stream: Name of the stream or adapter that raised
        message: Human-readable error message
        code: Machine-readable classification
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, validate_default=True)

    stream: Annotated[str, Field(min_length=1, description="Stream or adapter type name")]
    message: Annotated[str, Field(min_length=1, description="Human-readable error message")]
    code: ErrorCode = Field(default=ErrorCode.UNKNOWN, description="Error classification")

    @field_validator("stream", mode="before")
    @classmethod
    def _type_name(cls, v: str | object) -> str:
        """Accept stream objects and use their type name."""
        return v if isinstance(v, str) else type(v).__name__

    def render(self) -> str:
        return f"[{self.code}] {self.stream}: {self.message}"

    __str__ = render


class AsyncRxError(Exception):
    """Base exception carrying a StreamError."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, error: StreamError) -> None:
        self.error = error
        super().__init__(error.render())

    @classmethod
    def create(cls, stream: str | object, message: str) -> Self:
        return cls(StreamError(stream=stream, message=message, code=cls.code))


class StreamTerminatedError(AsyncRxError):
    """Adapter polled again after it reported completion (strict mode only)."""
    code = ErrorCode.TERMINATED


class ChannelClosedError(AsyncRxError):
    """Item sent on a channel whose senders or receiver are closed."""
    code = ErrorCode.CHANNEL_CLOSED


class NotReadyError(AsyncRxError):
    """A stream reported pending where an immediate result was required."""
    code = ErrorCode.NOT_READY


class StreamTypeError(AsyncRxError, TypeError):
    """Object can't be used as a stream."""
    code = ErrorCode.INVALID_STREAM


__all__ = [
    "ErrorCode",
    "StreamError",
    "AsyncRxError",
    "StreamTerminatedError",
    "ChannelClosedError",
    "NotReadyError",
    "StreamTypeError",
]
