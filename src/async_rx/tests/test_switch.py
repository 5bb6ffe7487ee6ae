"""Tests for Switch."""

from __future__ import annotations

import pytest

from async_rx import (
    HasInner,
    NoInner,
    StreamTerminatedError,
    StreamTypeError,
    channel,
    empty,
    iter_stream,
    once,
    pending,
    switch,
)
from async_rx.testing import CountingWaker, assert_closed, assert_next_eq, assert_pending, collect_ready

from .streams import Recording


class TestSwitch:
    """Tests for latest-inner-stream flattening."""

    def test_empty_outer(self) -> None:
        stream = empty().switch()
        assert_closed(stream)
        assert isinstance(stream.state, NoInner)

    def test_single_inner(self) -> None:
        stream = once(iter_stream([1, 2, 3])).switch()
        assert_next_eq(stream, 1)
        assert_next_eq(stream, 2)
        assert_next_eq(stream, 3)
        assert_closed(stream)

    def test_switch_immediately(self) -> None:
        """Inner streams produced back to back: only the last is read."""
        stream = iter_stream([
            iter_stream([1, 2, 3]),
            iter_stream([4, 5, 6]),
            iter_stream([7, 8, 9]),
        ]).switch()

        assert_next_eq(stream, 7)
        assert_next_eq(stream, 8)
        assert_next_eq(stream, 9)
        assert_closed(stream)

    def test_free_function(self) -> None:
        stream = switch(iter_stream([iter_stream("ab"), iter_stream("cd")]))
        assert collect_ready(stream) == ["c", "d"]

    def test_switch_on_channel(self) -> None:
        tx, rx = channel()

        stream = rx.switch()
        assert_pending(stream)

        tx.send(iter_stream([1]))
        assert_next_eq(stream, 1)
        assert_pending(stream)

        tx.send(pending())
        assert_pending(stream)

        tx.send(pending())
        tx.send(iter_stream([0]))
        assert_next_eq(stream, 0)
        assert_pending(stream)

        tx.send(iter_stream([0]))
        tx.send(pending())
        assert_pending(stream)

        tx.send(iter_stream([10, 20]))
        tx.close()

        assert_next_eq(stream, 10)
        assert_next_eq(stream, 20)
        assert_closed(stream)

    def test_partial_delivery_then_replace(self) -> None:
        """An inner stream keeps delivering until the outer produces a replacement."""
        outer_tx, outer_rx = channel()
        first_tx, first_rx = channel()
        second_tx, second_rx = channel()
        stream = outer_rx.switch()

        outer_tx.send(first_rx)
        first_tx.send("a1")
        assert_next_eq(stream, "a1")
        first_tx.send("a2")
        assert_next_eq(stream, "a2")

        first_tx.send("a3")
        outer_tx.send(second_rx)
        assert_pending(stream)

        second_tx.send("b1")
        assert_next_eq(stream, "b1")

    def test_outer_close_does_not_cut_inner(self) -> None:
        outer_tx, outer_rx = channel()
        inner_tx, inner_rx = channel()
        stream = outer_rx.switch()

        outer_tx.send(inner_rx)
        outer_tx.close()
        assert_pending(stream)

        inner_tx.send(1)
        assert_next_eq(stream, 1)
        inner_tx.send(2)
        assert_next_eq(stream, 2)
        assert_pending(stream)

        inner_tx.close()
        assert_closed(stream)

    def test_item_forwarded_in_same_poll_outer_closes(self) -> None:
        outer_tx, outer_rx = channel()
        stream = outer_rx.switch()
        outer_tx.send(iter_stream(["last"]))
        outer_tx.close()
        assert_next_eq(stream, "last")
        assert_closed(stream)

    def test_inner_done_outer_open_is_pending(self) -> None:
        outer_tx, outer_rx = channel()
        inner = Recording(iter_stream([]))
        stream = outer_rx.switch()

        outer_tx.send(inner)
        assert_pending(stream)
        assert_pending(stream)
        # Completed inner stream is not polled again
        assert inner.polls == 1

        outer_tx.close()
        assert_closed(stream)

    def test_outer_closed_without_inner(self) -> None:
        outer_tx, outer_rx = channel()
        stream = outer_rx.switch()
        assert_pending(stream)
        outer_tx.close()
        assert_closed(stream)

    def test_replaced_inner_is_closed(self) -> None:
        tx, rx = channel()
        first = Recording(pending())
        second = Recording(pending())
        stream = rx.switch()

        tx.send(first)
        assert_pending(stream)
        assert isinstance(stream.state, HasInner) and stream.state.stream is first

        tx.send(second)
        assert_pending(stream)
        assert first.closed
        assert not second.closed
        assert stream.state.stream is second

    def test_skipped_inner_never_polled(self) -> None:
        skipped = Recording(iter_stream([1]))
        stream = iter_stream([skipped, iter_stream([2])]).switch()
        assert collect_ready(stream) == [2]
        assert skipped.polls == 0
        assert skipped.closed

    def test_close_propagates(self) -> None:
        outer = Recording(iter_stream([Recording(pending())]))
        stream = outer.switch()
        assert_pending(stream)
        inner = stream.state.stream  # type: ignore[union-attr]
        stream.close()
        assert outer.closed and inner.closed

    def test_wakes_from_outer_and_inner(self) -> None:
        outer_tx, outer_rx = channel()
        inner_tx, inner_rx = channel()
        stream = outer_rx.switch()
        waker = CountingWaker()

        assert_pending(stream, waker.context())
        outer_tx.send(inner_rx)
        assert waker.count == 1

        assert_pending(stream, waker.context())
        inner_tx.send("x")
        assert waker.count == 2
        assert_next_eq(stream, "x")

    def test_rejects_non_stream_inner(self) -> None:
        stream = iter_stream([[1, 2, 3]]).switch()
        with pytest.raises(StreamTypeError):
            assert_pending(stream)

    def test_stays_closed(self) -> None:
        outer = Recording(iter_stream([]))
        stream = outer.switch()
        assert_closed(stream)
        assert_closed(stream)
        assert outer.polls == 1

    def test_strict_termination(self, strict: None) -> None:
        stream = once(iter_stream([1])).switch()
        assert_next_eq(stream, 1)
        assert_closed(stream)
        with pytest.raises(StreamTerminatedError):
            assert_closed(stream)
