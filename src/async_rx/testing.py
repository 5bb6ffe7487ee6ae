"""Assertions for driving streams by hand in tests.

Each helper polls with its own context (a no-op waker unless one is
given) so tests can step a stream one poll at a time:

    >>> tx, rx = channel()
    >>> s = rx.dedup()
    >>> assert_pending(s)
    >>> tx.send(1); tx.send(1); tx.close()
    >>> assert_next_eq(s, 1)
    >>> assert_closed(s)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeVar

from .errors import NotReadyError
from .poll import Context, Poll, Waker
from .stream import Stream

T = TypeVar("T")


@dataclass(slots=True)
class CountingWaker:
    """Waker that records how many times it was woken."""

    count: int = field(default=0)

    def wake(self) -> None:
        self.count += 1

    @property
    def woken(self) -> bool:
        return self.count > 0

    def context(self) -> Context:
        return Context(Waker(self.wake))


def _poll(stream: Stream[T], cx: Context | None) -> Poll[T]:
    return stream.poll_next(cx or Context.noop())


def assert_pending(stream: Stream[T], cx: Context | None = None) -> None:
    """Assert the next poll reports pending."""
    poll = _poll(stream, cx)
    if not poll.is_pending:
        detail = f"item {poll.value!r}" if poll.is_ready else "completion"
        raise AssertionError(f"expected stream to be pending, got {detail}")


def assert_next_eq(stream: Stream[T], expected: T, cx: Context | None = None) -> None:
    """Assert the next poll produces ``expected``."""
    poll = _poll(stream, cx)
    if poll.is_pending:
        raise AssertionError(f"expected item {expected!r}, stream was pending")
    if poll.is_done:
        raise AssertionError(f"expected item {expected!r}, stream was closed")
    if poll.value != expected:
        raise AssertionError(f"expected item {expected!r}, got {poll.value!r}")


def assert_closed(stream: Stream[T], cx: Context | None = None) -> None:
    """Assert the next poll reports completion."""
    poll = _poll(stream, cx)
    if poll.is_ready:
        raise AssertionError(f"expected stream to be closed, got item {poll.value!r}")
    if poll.is_pending:
        raise AssertionError("expected stream to be closed, it was pending")


def collect_ready(stream: Stream[T]) -> list[T]:
    """Poll until completion without waiting.

    Raises:
        NotReadyError: The stream reported pending before completing
    """
    items: list[T] = []
    cx = Context.noop()
    while True:
        poll = stream.poll_next(cx)
        if poll.is_done:
            return items
        if poll.is_pending:
            raise NotReadyError.create(stream, f"pending after {len(items)} item(s)")
        items.append(poll.value)  # type: ignore[arg-type]


__all__ = ["CountingWaker", "assert_pending", "assert_next_eq", "assert_closed", "collect_ready"]
