"""The polling contract shared by every stream.

A stream is asked for its next item with ``poll_next(cx)`` and answers
with one of three outcomes:

    - ready(item): an item was produced
    - PENDING: nothing right now; the stream has registered ``cx.waker``
      and will call it once progress is possible
    - DONE: the stream is permanently finished

Example:
    >>> p = ready(3)
    >>> p.is_ready, p.unwrap()
    (True, 3)
    >>> PENDING.is_pending
    True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Generic, TypeVar

from .errors import NotReadyError

T = TypeVar("T")


class PollKind(StrEnum):
    """Outcome of a single poll."""
    READY = "ready"
    PENDING = "pending"
    DONE = "done"


@dataclass(slots=True, frozen=True)
class Poll(Generic[T]):
    """Result of ``Stream.poll_next``.

    ``value`` is only meaningful when ``kind`` is READY; items may
    legitimately be ``None`` so the kind, not the value, decides.
    """

    kind: PollKind
    value: T | None = None

    @property
    def is_ready(self) -> bool:
        return self.kind is PollKind.READY

    @property
    def is_pending(self) -> bool:
        return self.kind is PollKind.PENDING

    @property
    def is_done(self) -> bool:
        return self.kind is PollKind.DONE

    def unwrap(self) -> T:
        """Get the produced item or raise NotReadyError."""
        if self.kind is not PollKind.READY:
            raise NotReadyError.create("Poll", f"expected an item, stream was {self.kind}")
        return self.value  # type: ignore[return-value]


PENDING: Poll[object] = Poll(PollKind.PENDING)
DONE: Poll[object] = Poll(PollKind.DONE)


def ready(value: T) -> Poll[T]:
    """Wrap a produced item."""
    return Poll(PollKind.READY, value)


def _noop() -> None:
    pass


@dataclass(slots=True, frozen=True)
class Waker:
    """Handle a pending stream uses to ask to be polled again."""

    callback: Callable[[], None] = field(default=_noop)

    def wake(self) -> None:
        self.callback()

    @classmethod
    def noop(cls) -> Waker:
        return cls(_noop)


@dataclass(slots=True, frozen=True)
class Context:
    """Per-poll context handed down through nested streams."""

    waker: Waker = field(default_factory=Waker.noop)

    @classmethod
    def noop(cls) -> Context:
        """Context whose waker does nothing; for one-shot polling."""
        return cls(Waker.noop())

    @classmethod
    def from_callback(cls, callback: Callable[[], None]) -> Context:
        return cls(Waker(callback))


__all__ = ["PollKind", "Poll", "PENDING", "DONE", "ready", "Waker", "Context"]
