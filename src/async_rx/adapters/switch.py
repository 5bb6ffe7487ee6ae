"""Stream-of-streams flattening that always follows the latest inner stream.

Each time the outer stream produces a new inner stream, the previous one
is closed and dropped together with any items it had not delivered yet.
The outer stream is drained eagerly on every poll, so when it produced
several inner streams back to back only the last one is ever read.

Example:
    >>> s = iter_stream([iter_stream([1, 2, 3]), iter_stream([4, 5, 6])]).switch()
    >>> collect_ready(s)
    [4, 5, 6]
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from async_rx.observability import get_logger
from async_rx.poll import PENDING, Context, Poll
from async_rx.sources import as_stream
from async_rx.stream import Stream, Terminable

T = TypeVar("T")

log = get_logger("async_rx.switch")


@dataclass(slots=True, frozen=True)
class NoInner:
    """The outer stream has not produced an inner stream yet."""


@dataclass(slots=True, frozen=True)
class HasInner(Generic[T]):
    """Items are forwarded from ``stream``."""

    stream: Stream[T]


InnerState = NoInner | HasInner[T]


class Switch(Terminable, Stream[T]):
    """Stream adapter produced by ``Stream.switch``.

    Outer items may be Streams or async iterables (bridged with
    ``as_stream``). Completes once the outer stream has completed and
    either no inner stream ever existed or the current one completed.
    """

    __slots__ = ("_outer", "_state", "_outer_done", "_inner_done", "_generation")

    def __init__(self, outer: Stream[Stream[T] | AsyncIterable[T]]) -> None:
        super().__init__()
        self._outer = outer
        self._state: InnerState[T] = NoInner()
        self._outer_done = False
        self._inner_done = False
        self._generation = 0

    @property
    def state(self) -> InnerState[T]:
        return self._state

    def _replace(self, inner: Stream[T] | AsyncIterable[T]) -> None:
        new = as_stream(inner)
        if isinstance(self._state, HasInner):
            self._state.stream.close()
        self._state = HasInner(new)
        self._inner_done = False
        self._generation += 1
        log.debug("inner stream replaced", generation=self._generation)

    def poll_next(self, cx: Context) -> Poll[T]:
        if self._terminated:
            return self._poll_terminated()  # type: ignore[return-value]

        while not self._outer_done:
            poll = self._outer.poll_next(cx)
            if poll.is_ready:
                self._replace(poll.value)  # type: ignore[arg-type]
            elif poll.is_pending:
                break
            else:
                log.debug("outer stream completed", generation=self._generation)
                self._outer_done = True

        match self._state:
            case NoInner():
                if self._outer_done:
                    return self._terminate()  # type: ignore[return-value]
                return PENDING  # type: ignore[return-value]
            case HasInner(stream=inner):
                if not self._inner_done:
                    poll = inner.poll_next(cx)
                    if poll.is_ready:
                        return poll
                    self._inner_done = poll.is_done
                if self._inner_done and self._outer_done:
                    return self._terminate()  # type: ignore[return-value]
                return PENDING  # type: ignore[return-value]

    def close(self) -> None:
        if isinstance(self._state, HasInner):
            self._state.stream.close()
        self._outer.close()


def switch(stream: Stream[Stream[T] | AsyncIterable[T]]) -> Switch[T]:
    """Flatten a stream of streams, forwarding from the latest inner stream only."""
    return Switch(stream)
