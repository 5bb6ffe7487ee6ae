"""async-rx - Composable adapters for pull-based streams.

A stream answers ``poll_next(cx)`` with an item, PENDING (it will wake
``cx.waker`` later), or DONE. On top of that contract this package
provides four adapters not found in the usual iterator toolkits:

    - dedup: drop consecutive duplicates
    - dedup_by_key: drop consecutive items with the same derived key
    - batch_with: buffer items until a trigger stream fires
    - switch: flatten a stream of streams, following the latest one

Quick Start:
    >>> from async_rx import channel, iter_stream
    >>> from async_rx.testing import collect_ready
    >>>
    >>> collect_ready(iter_stream([1, 1, 2, 2, 1]).dedup())
    [1, 2, 1]

Streams are async iterables, and async iterables can be turned into
streams, so adapters slot into asyncio code:

    >>> tx, rx = channel()
    >>> async for batch in rx.batch_with(interval(0.5)):
    ...     await store(batch)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Polling contract
from .poll import DONE, PENDING, Context, Poll, PollKind, Waker, ready

# Stream base
from .stream import Stream, StreamIterator, collect

# Sources
from .channel import Receiver, Sender, channel
from .sources import (
    AsyncIterStream,
    Empty,
    Interval,
    IterStream,
    Pending,
    as_stream,
    empty,
    from_async_iter,
    interval,
    iter_stream,
    once,
    pending,
)

# Adapters
from .adapters import (
    BatchWith,
    Dedup,
    DedupByKey,
    HasInner,
    NoInner,
    Switch,
    batch_with,
    dedup,
    dedup_by_key,
    switch,
)

# Errors
from .errors import (
    AsyncRxError,
    ChannelClosedError,
    ErrorCode,
    NotReadyError,
    StreamError,
    StreamTerminatedError,
    StreamTypeError,
)

# Configuration & logging
from .config import AsyncRxSettings, get_settings
from .observability import configure_logging, get_logger

__all__ = [
    "__version__",
    # Polling contract
    "Poll", "PollKind", "PENDING", "DONE", "ready", "Waker", "Context",
    # Stream base
    "Stream", "StreamIterator", "collect",
    # Sources
    "channel", "Sender", "Receiver",
    "iter_stream", "empty", "pending", "once", "from_async_iter", "as_stream", "interval",
    "IterStream", "Empty", "Pending", "AsyncIterStream", "Interval",
    # Adapters
    "dedup", "dedup_by_key", "batch_with", "switch",
    "Dedup", "DedupByKey", "BatchWith", "Switch", "NoInner", "HasInner",
    # Errors
    "AsyncRxError", "ErrorCode", "StreamError", "StreamTerminatedError",
    "ChannelClosedError", "NotReadyError", "StreamTypeError",
    # Configuration & logging
    "AsyncRxSettings", "get_settings", "configure_logging", "get_logger",
]
