"""Unbounded single-consumer channel.

The receiving half is a Stream, which makes a channel the natural way to
feed adapters from callbacks, other tasks, or other threads:

    >>> tx, rx = channel()
    >>> batches = rx.batch_with(flush_rx)
    >>> tx.send(1)
    >>> tx.close()  # rx completes once drained

The receiver completes when every sender has been closed and the queue
is empty. Closing the receiver makes further sends fail.
"""

from __future__ import annotations

import threading
import weakref
from collections import deque
from typing import TYPE_CHECKING, Generic, TypeVar

from .errors import ChannelClosedError
from .poll import DONE, PENDING, Context, Poll, Waker, ready
from .stream import Stream

if TYPE_CHECKING:
    from types import TracebackType

T = TypeVar("T")


class _Shared(Generic[T]):
    """State shared by both halves of a channel."""

    __slots__ = ("queue", "senders", "receiver_open", "waker", "lock")

    def __init__(self) -> None:
        self.queue: deque[T] = deque()
        self.senders = 1
        self.receiver_open = True
        self.waker: Waker | None = None
        self.lock = threading.RLock()

    def take_waker(self) -> Waker | None:
        waker, self.waker = self.waker, None
        return waker

    def release_sender(self) -> None:
        with self.lock:
            self.senders -= 1
            waker = self.take_waker() if self.senders == 0 else None
        if waker is not None:
            waker.wake()


class Sender(Generic[T]):
    """Sending half. Use ``clone`` for additional producers.

    A sender that is garbage collected without ``close`` is closed then,
    so dropping the last one completes the receiver.
    """

    __slots__ = ("_shared", "_finalizer", "__weakref__")

    def __init__(self, shared: _Shared[T]) -> None:
        self._shared = shared
        self._finalizer = weakref.finalize(self, shared.release_sender)

    @property
    def _closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def closed(self) -> bool:
        return self._closed or not self._shared.receiver_open

    def send(self, item: T) -> None:
        """Queue ``item`` and wake the receiver.

        Raises:
            ChannelClosedError: This sender or the receiver was closed
        """
        shared = self._shared
        with shared.lock:
            if self._closed or not shared.receiver_open:
                raise ChannelClosedError.create(self, "channel is closed")
            shared.queue.append(item)
            waker = shared.take_waker()
        if waker is not None:
            waker.wake()

    def clone(self) -> Sender[T]:
        shared = self._shared
        with shared.lock:
            if self._closed:
                raise ChannelClosedError.create(self, "cannot clone a closed sender")
            shared.senders += 1
        return Sender(shared)

    def close(self) -> None:
        """Close this sender. Idempotent."""
        self._finalizer()

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class Receiver(Stream[T]):
    """Receiving half; a Stream of sent items."""

    __slots__ = ("_shared",)

    def __init__(self, shared: _Shared[T]) -> None:
        self._shared = shared

    def qsize(self) -> int:
        """Number of items sent but not yet received."""
        return len(self._shared.queue)

    def poll_next(self, cx: Context) -> Poll[T]:
        shared = self._shared
        with shared.lock:
            if shared.queue:
                return ready(shared.queue.popleft())
            if shared.senders == 0 or not shared.receiver_open:
                return DONE  # type: ignore[return-value]
            shared.waker = cx.waker
        return PENDING  # type: ignore[return-value]

    def close(self) -> None:
        """Reject further sends; already queued items can still be received."""
        with self._shared.lock:
            self._shared.receiver_open = False


def channel() -> tuple[Sender[T], Receiver[T]]:
    """Create an unbounded channel."""
    shared: _Shared[T] = _Shared()
    return Sender(shared), Receiver(shared)


__all__ = ["Sender", "Receiver", "channel"]
