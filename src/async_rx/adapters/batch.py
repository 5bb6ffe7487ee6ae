"""Trigger-driven batching.

``BatchWith`` drains every ready item of a primary stream into a buffer
and hands the buffer out as one list when a second, signal-only stream
fires. Completion of the primary flushes whatever is buffered without
waiting for the trigger. Batches are never empty.

Example:
    >>> tx, rx = channel()
    >>> flush_tx, flush_rx = channel()
    >>> batches = rx.batch_with(flush_rx)
    >>> tx.send(1); tx.send(2); flush_tx.send(None)
    >>> assert_next_eq(batches, [1, 2])

For a time-based flush, use ``interval(seconds)`` as the trigger.
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from typing import TypeVar

from async_rx.observability import get_logger
from async_rx.poll import PENDING, Context, Poll, ready
from async_rx.sources import as_stream
from async_rx.stream import Stream, Terminable

T = TypeVar("T")

log = get_logger("async_rx.batch_with")


class BatchWith(Terminable, Stream[list[T]]):
    """Stream adapter produced by ``Stream.batch_with``.

    Per poll: drain the primary; on primary completion flush (or
    complete if nothing is buffered); otherwise poll the trigger once and
    flush if it fired and the buffer is non-empty. A trigger firing on an
    empty buffer is dropped. A completed trigger counts as firing on
    every poll, so items are handed out as soon as they arrive.
    """

    __slots__ = ("_primary", "_trigger", "_batch", "_primary_done", "_trigger_done")

    def __init__(self, primary: Stream[T], trigger: Stream[object] | AsyncIterable[object]) -> None:
        super().__init__()
        self._primary = primary
        self._trigger = as_stream(trigger)
        self._batch: list[T] = []
        self._primary_done = False
        self._trigger_done = False

    @property
    def buffered(self) -> int:
        """Number of items waiting for the next flush."""
        return len(self._batch)

    def _take(self, reason: str) -> Poll[list[T]]:
        batch, self._batch = self._batch, []
        log.debug("batch flushed", size=len(batch), reason=reason)
        return ready(batch)

    def poll_next(self, cx: Context) -> Poll[list[T]]:
        if self._terminated:
            return self._poll_terminated()  # type: ignore[return-value]

        while not self._primary_done:
            poll = self._primary.poll_next(cx)
            if poll.is_ready:
                self._batch.append(poll.value)  # type: ignore[arg-type]
            elif poll.is_pending:
                break
            else:
                self._primary_done = True

        if self._primary_done:
            if self._batch:
                return self._take("primary completed")
            log.debug("primary completed with empty buffer")
            return self._terminate()  # type: ignore[return-value]

        if not self._trigger_done:
            signal = self._trigger.poll_next(cx)
            if signal.is_pending:
                return PENDING  # type: ignore[return-value]
            if signal.is_done:
                log.debug("trigger completed", buffered=len(self._batch))
                self._trigger_done = True
        if not self._batch:
            return PENDING  # type: ignore[return-value]
        return self._take("trigger completed" if self._trigger_done else "trigger")

    def close(self) -> None:
        self._primary.close()
        self._trigger.close()


def batch_with(stream: Stream[T], trigger: Stream[object] | AsyncIterable[object]) -> BatchWith[T]:
    """Buffer items from ``stream`` until ``trigger`` produces a value."""
    return BatchWith(stream, trigger)
