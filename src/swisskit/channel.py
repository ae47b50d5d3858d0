from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ChannelClosed, StreamCancelled, StreamError

T = TypeVar("T")

# How often a blocked sender re-checks its cancel token.
_CANCEL_POLL_S = 0.05


@dataclass(frozen=True)
class Entry(Generic[T]):
    """One unit of a stream: a decoded value or the terminal error, never both."""

    value: T | None = None
    error: StreamError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _raise_if_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise StreamCancelled()


class Channel(Generic[T]):
    """Unbuffered channel between threads.

    `send` returns only once a receiver has taken the item, so a producer can
    never run ahead of its consumer. The producer owns `close`; closing with an
    error makes iteration raise that error after the last item.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._slot: list[T] = []
        self._sent = 0
        self._taken = 0
        self._closed = False
        self._error: BaseException | None = None

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    @property
    def error(self) -> BaseException | None:
        with self._cond:
            return self._error

    def _wait(self, cancel: threading.Event | None) -> None:
        self._cond.wait(_CANCEL_POLL_S if cancel is not None else None)

    def send(self, item: T, *, cancel: threading.Event | None = None) -> None:
        with self._cond:
            while self._slot and not self._closed:
                _raise_if_cancelled(cancel)
                self._wait(cancel)
            if self._closed:
                raise ChannelClosed("send on closed channel")
            _raise_if_cancelled(cancel)

            self._slot.append(item)
            self._sent += 1
            ticket = self._sent
            self._cond.notify_all()

            while self._taken < ticket:
                if cancel is not None and cancel.is_set():
                    # Nobody took it; withdraw the item before giving up.
                    self._slot.clear()
                    self._sent -= 1
                    self._cond.notify_all()
                    raise StreamCancelled()
                self._wait(cancel)

    def recv(self, timeout: float | None = None) -> T:
        with self._cond:
            if not self._cond.wait_for(lambda: self._slot or self._closed, timeout):
                raise TimeoutError("timed out waiting for a value")
            if not self._slot:
                raise ChannelClosed("receive from closed channel")
            item = self._slot.pop()
            self._taken += 1
            self._cond.notify_all()
            return item

    def close(self, error: BaseException | None = None) -> None:
        with self._cond:
            if self._closed:
                raise ChannelClosed("close of closed channel")
            self._closed = True
            self._error = error
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                item = self.recv()
            except ChannelClosed:
                break
            yield item
        err = self.error
        if err is not None:
            raise err


def pump(items: Iterator[T], out: Channel[T], *, cancel: threading.Event | None = None) -> None:
    """Send everything `items` yields into `out`, then close `out`.

    `out` is closed exactly once on every path. A failure, cancellation included,
    closes it with the error and is re-raised to the caller.
    """

    error: BaseException | None = None
    try:
        for item in items:
            _raise_if_cancelled(cancel)
            out.send(item, cancel=cancel)
    except BaseException as e:
        error = e
        raise
    finally:
        close = getattr(items, "close", None)
        if close is not None:
            close()
        try:
            out.close(error)
        except ChannelClosed:
            # Already closed elsewhere; the original failure wins.
            if error is None:
                raise
