"""Consecutive-duplicate elimination.

``Dedup`` keeps a copy of the item it forwarded last and drops following
items equal to it. When copying the whole item is expensive but only part
of it matters for comparison, ``DedupByKey`` stores just a derived key.

Example:
    >>> collect_ready(iter_stream([1, 2, 3, 3, 3, 2, 4, 4]).dedup())
    [1, 2, 3, 2, 4]
    >>> collect_ready(iter_stream([1, 2, 3, 1, 2, 4, 8]).dedup_by_key(lambda n: n % 2))
    [1, 2, 3, 2]
"""

from __future__ import annotations

import copy
from typing import Callable, Generic, TypeVar

from async_rx.observability import get_logger
from async_rx.poll import PENDING, Context, Poll
from async_rx.stream import Stream, Terminable

T = TypeVar("T")
K = TypeVar("K")

log = get_logger("async_rx.dedup")

_MISSING = object()


class Dedup(Terminable, Stream[T]):
    """Stream adapter produced by ``Stream.dedup``."""

    __slots__ = ("_inner", "_prev_item")

    def __init__(self, inner: Stream[T]) -> None:
        super().__init__()
        self._inner = inner
        self._prev_item: object = _MISSING

    def poll_next(self, cx: Context) -> Poll[T]:
        if self._terminated:
            return self._poll_terminated()  # type: ignore[return-value]
        while True:
            poll = self._inner.poll_next(cx)
            if poll.is_pending:
                return PENDING  # type: ignore[return-value]
            if poll.is_done:
                log.debug("inner stream completed", adapter="dedup")
                return self._terminate()  # type: ignore[return-value]
            item = poll.value
            if self._prev_item is _MISSING or self._prev_item != item:
                self._prev_item = copy.copy(item)
                return poll  # type: ignore[return-value]

    def close(self) -> None:
        self._inner.close()


class DedupByKey(Terminable, Stream[T], Generic[T, K]):
    """Stream adapter produced by ``Stream.dedup_by_key``.

    ``key_fn`` is called exactly once per item pulled from the inner
    stream, in order; it may keep state of its own.
    """

    __slots__ = ("_inner", "_key_fn", "_prev_key")

    def __init__(self, inner: Stream[T], key_fn: Callable[[T], K]) -> None:
        super().__init__()
        self._inner = inner
        self._key_fn = key_fn
        self._prev_key: object = _MISSING

    def poll_next(self, cx: Context) -> Poll[T]:
        if self._terminated:
            return self._poll_terminated()  # type: ignore[return-value]
        while True:
            poll = self._inner.poll_next(cx)
            if poll.is_pending:
                return PENDING  # type: ignore[return-value]
            if poll.is_done:
                log.debug("inner stream completed", adapter="dedup_by_key")
                return self._terminate()  # type: ignore[return-value]
            key = self._key_fn(poll.value)  # type: ignore[arg-type]
            if self._prev_key is _MISSING or self._prev_key != key:
                self._prev_key = key
                return poll  # type: ignore[return-value]

    def close(self) -> None:
        self._inner.close()


def dedup(stream: Stream[T]) -> Dedup[T]:
    """Deduplicate consecutive identical items."""
    return Dedup(stream)


def dedup_by_key(stream: Stream[T], key_fn: Callable[[T], K]) -> DedupByKey[T, K]:
    """Deduplicate consecutive items that ``key_fn`` maps to the same key."""
    return DedupByKey(stream, key_fn)
