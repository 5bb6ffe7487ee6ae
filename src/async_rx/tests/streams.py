"""Helper streams for async-rx tests."""

from __future__ import annotations

from async_rx import Context, Poll, Stream


class ExplodingStream(Stream[object]):
    """Fails the test if it is ever polled."""

    def poll_next(self, cx: Context) -> Poll[object]:
        raise AssertionError("stream should not have been polled")


class FailingStream(Stream[object]):
    """Raises the given exception from poll_next."""

    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def poll_next(self, cx: Context) -> Poll[object]:
        raise self.exc


class Recording(Stream[object]):
    """Wraps a stream and records polls and close()."""

    def __init__(self, inner: Stream[object]) -> None:
        self.inner = inner
        self.polls = 0
        self.closed = False

    def poll_next(self, cx: Context) -> Poll[object]:
        self.polls += 1
        return self.inner.poll_next(cx)

    def close(self) -> None:
        self.closed = True
        self.inner.close()
