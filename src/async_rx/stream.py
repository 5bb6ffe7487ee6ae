"""Stream base class and the asyncio bridge.

Every stream implements ``poll_next(cx)``. The base class attaches the
adapters as chained methods so any stream can be composed:

    >>> from async_rx import iter_stream
    >>> s = iter_stream([1, 1, 2, 3, 3]).dedup()

Streams are also async iterables. Iterating drives ``poll_next`` from
the running event loop, sleeping until the stream's waker fires:

    >>> async for item in channel_receiver.batch_with(interval(0.5)):
    ...     await bulk_insert(item)
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from .config import get_settings
from .errors import StreamTerminatedError
from .poll import DONE, Context, Poll, Waker

if TYPE_CHECKING:
    from .adapters import BatchWith, Dedup, DedupByKey, Switch

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")


class Stream(ABC, Generic[T]):
    """Pull-based producer of items.

    Subclasses implement ``poll_next``. ``close`` releases anything the
    stream holds outside of plain Python references (tasks, timers) and
    is a no-op by default.
    """

    __slots__ = ()

    @abstractmethod
    def poll_next(self, cx: Context) -> Poll[T]:
        """Attempt to produce the next item.

        Returns ready(item), PENDING (after registering ``cx.waker``), or DONE.
        """

    def close(self) -> None:
        """Release resources held by this stream."""

    # ─────────────────────────────────────────────────────────────────────
    # Adapters
    # ─────────────────────────────────────────────────────────────────────

    def dedup(self) -> Dedup[T]:
        """Drop items equal to the item forwarded just before them."""
        from .adapters import Dedup
        return Dedup(self)

    def dedup_by_key(self, key_fn: Callable[[T], K]) -> DedupByKey[T, K]:
        """Drop items whose key equals the key of the item forwarded just before them."""
        from .adapters import DedupByKey
        return DedupByKey(self, key_fn)

    def batch_with(self, trigger: Stream[object] | AsyncIterable[object]) -> BatchWith[T]:
        """Buffer items until ``trigger`` fires, then yield them as one list.

        ``trigger`` is polled after all ready items from ``self`` were read.
        """
        from .adapters import BatchWith
        return BatchWith(self, trigger)

    def switch(self: Stream[Stream[U]]) -> Switch[U]:
        """Forward items from the most recent inner stream only."""
        from .adapters import Switch
        return Switch(self)

    # ─────────────────────────────────────────────────────────────────────
    # asyncio
    # ─────────────────────────────────────────────────────────────────────

    def __aiter__(self) -> AsyncIterator[T]:
        return StreamIterator(self)


class StreamIterator(Generic[T]):
    """Drive a Stream from an asyncio event loop.

    The waker schedules ``Event.set`` on the loop, so streams may be woken
    from other threads. A wake that arrives during a poll leaves the event
    set and the stream is simply polled again. Waking after the loop has
    closed is a no-op.
    """

    __slots__ = ("_stream", "_event", "_finished")

    def __init__(self, stream: Stream[T]) -> None:
        self._stream = stream
        self._event: asyncio.Event | None = None
        self._finished = False

    def __aiter__(self) -> StreamIterator[T]:
        return self

    async def __anext__(self) -> T:
        if self._finished:
            raise StopAsyncIteration
        loop = asyncio.get_running_loop()
        if self._event is None:
            self._event = asyncio.Event()
        event = self._event

        def wake() -> None:
            try:
                loop.call_soon_threadsafe(event.set)
            except RuntimeError:
                # An abandoned __anext__ may outlive its loop
                if not loop.is_closed():
                    raise

        cx = Context(Waker(wake))
        while True:
            event.clear()
            poll = self._stream.poll_next(cx)
            if poll.is_ready:
                return poll.value  # type: ignore[return-value]
            if poll.is_done:
                self._finished = True
                raise StopAsyncIteration
            await event.wait()


async def collect(stream: Stream[T]) -> list[T]:
    """Drive ``stream`` to completion and return every item."""
    return [item async for item in stream]


class Terminable:
    """Completion latch shared by the adapters.

    Once an adapter reports DONE it keeps reporting DONE without touching
    its wrapped streams, or raises StreamTerminatedError when
    ``strict_termination`` is enabled.
    """

    __slots__ = ("_terminated", "_strict")

    def __init__(self) -> None:
        self._terminated = False
        self._strict = get_settings().streams.strict_termination

    @property
    def terminated(self) -> bool:
        return self._terminated

    def _terminate(self) -> Poll[object]:
        self._terminated = True
        return DONE

    def _poll_terminated(self) -> Poll[object]:
        if self._strict:
            raise StreamTerminatedError.create(self, "polled after completion")
        return DONE


__all__ = ["Stream", "StreamIterator", "collect", "Terminable"]
