"""Basic stream sources.

    - iter_stream: Items of a plain iterable, then done
    - empty / pending / once: Trivial streams for composition and tests
    - from_async_iter: Poll-driven view of an asyncio async iterator
    - as_stream: Coerce a Stream or async iterable into a Stream
    - interval: Timer trigger, handy as a BatchWith flush signal

Example:
    >>> from async_rx import from_async_iter, interval
    >>> batches = from_async_iter(ticks()).batch_with(interval(1.0))
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import TypeVar

from .errors import StreamTypeError
from .observability import get_logger
from .poll import DONE, PENDING, Context, Poll, Waker, ready
from .stream import Stream

T = TypeVar("T")

log = get_logger("async_rx.sources")


class IterStream(Stream[T]):
    """Yields each item of an iterable immediately, then DONE."""

    __slots__ = ("_it",)

    def __init__(self, iterable: Iterable[T]) -> None:
        self._it: Iterator[T] | None = iter(iterable)

    def poll_next(self, cx: Context) -> Poll[T]:
        if self._it is None:
            return DONE  # type: ignore[return-value]
        try:
            return ready(next(self._it))
        except StopIteration:
            self._it = None
            return DONE  # type: ignore[return-value]


class Empty(Stream[T]):
    """Completes immediately."""

    __slots__ = ()

    def poll_next(self, cx: Context) -> Poll[T]:
        return DONE  # type: ignore[return-value]


class Pending(Stream[T]):
    """Never produces anything and never wakes its consumer."""

    __slots__ = ()

    def poll_next(self, cx: Context) -> Poll[T]:
        return PENDING  # type: ignore[return-value]


def iter_stream(iterable: Iterable[T]) -> IterStream[T]:
    return IterStream(iterable)


def empty() -> Empty[object]:
    return Empty()


def pending() -> Pending[object]:
    return Pending()


def once(value: T) -> IterStream[T]:
    """Stream of exactly one item."""
    return IterStream((value,))


# ─────────────────────────────────────────────────────────────────────────────
# asyncio Bridge
# ─────────────────────────────────────────────────────────────────────────────


class AsyncIterStream(Stream[T]):
    """Expose an async iterator through the polling contract.

    At most one ``__anext__`` task is in flight; its done-callback wakes
    whichever waker the most recent poll supplied. Exceptions raised by
    the iterator propagate from ``poll_next``. Requires a running event
    loop.
    """

    __slots__ = ("_it", "_task", "_waker", "_done")

    def __init__(self, source: AsyncIterable[T]) -> None:
        self._it: AsyncIterator[T] = aiter(source)
        self._task: asyncio.Task[tuple[bool, T | None]] | None = None
        self._waker = Waker.noop()
        self._done = False

    async def _next(self) -> tuple[bool, T | None]:
        try:
            return (True, await anext(self._it))
        except StopAsyncIteration:
            return (False, None)

    def poll_next(self, cx: Context) -> Poll[T]:
        if self._done:
            return DONE  # type: ignore[return-value]
        self._waker = cx.waker
        if self._task is None:
            self._task = asyncio.ensure_future(self._next())
            self._task.add_done_callback(lambda _: self._waker.wake())
        task = self._task
        if not task.done():
            return PENDING  # type: ignore[return-value]
        self._task = None
        has_more, value = task.result()
        if not has_more:
            self._done = True
            return DONE  # type: ignore[return-value]
        return ready(value)  # type: ignore[arg-type]

    def close(self) -> None:
        if self._task is not None and not self._task.done():
            log.debug("cancelling pending anext", source=type(self._it).__name__)
            self._task.cancel()
        self._task = None
        self._done = True


def from_async_iter(source: AsyncIterable[T]) -> AsyncIterStream[T]:
    return AsyncIterStream(source)


def as_stream(obj: Stream[T] | AsyncIterable[T]) -> Stream[T]:
    """Return ``obj`` if it is a Stream, bridge it if it is async iterable."""
    if isinstance(obj, Stream):
        return obj
    if isinstance(obj, AsyncIterable):
        return AsyncIterStream(obj)
    raise StreamTypeError.create(obj, "expected a Stream or an async iterable")


# ─────────────────────────────────────────────────────────────────────────────
# Timer
# ─────────────────────────────────────────────────────────────────────────────


class Interval(Stream[None]):
    """Yields ``None`` once every ``period`` seconds, forever.

    Ticks that were missed while nobody polled collapse into one. Uses
    ``loop.call_at`` on the running loop to wake the consumer.
    """

    __slots__ = ("period", "_deadline", "_handle")

    def __init__(self, period: float) -> None:
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.period = period
        self._deadline: float | None = None
        self._handle: asyncio.TimerHandle | None = None

    def poll_next(self, cx: Context) -> Poll[None]:
        loop = asyncio.get_running_loop()
        now = loop.time()
        if self._deadline is None:
            self._deadline = now + self.period
        if now >= self._deadline:
            self._deadline = now + self.period
            self._cancel_timer()
            return ready(None)
        self._cancel_timer()
        self._handle = loop.call_at(self._deadline, cx.waker.wake)
        return PENDING  # type: ignore[return-value]

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def close(self) -> None:
        self._cancel_timer()


def interval(period: float) -> Interval:
    return Interval(period)


__all__ = [
    "IterStream",
    "Empty",
    "Pending",
    "AsyncIterStream",
    "Interval",
    "iter_stream",
    "empty",
    "pending",
    "once",
    "from_async_iter",
    "as_stream",
    "interval",
]
