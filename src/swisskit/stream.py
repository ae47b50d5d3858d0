from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import closing
from pathlib import Path
from typing import Any, Generic, TypeVar

from .channel import Channel, Entry, pump
from .errors import ChannelClosed, StreamCancelled, StreamError
from .jsonstream import iter_json_array

T = TypeVar("T")


class JSONStream(Generic[T]):
    """Single-use handle that decodes one JSON array file into `Entry` values.

    Consumers read `watch()`; `start()` produces in the calling thread. The
    channel ends after every element arrived as an ok entry, or right after a
    single error entry.
    """

    def __init__(self, shape: Any, *, backend: str | None = None, cancel: threading.Event | None = None):
        self._shape = shape
        self._backend = backend
        self._cancel = cancel
        self._channel: Channel[Entry[T]] = Channel()
        self._started = False

    def watch(self) -> Channel[Entry[T]]:
        return self._channel

    def _entries(self, path: str | Path) -> Iterator[Entry[T]]:
        values: Iterator[T] = iter_json_array(path, self._shape, backend=self._backend)
        with closing(values):
            try:
                for value in values:
                    yield Entry(value=value)
            except StreamError as e:
                yield Entry(error=e)

    def start(self, path: str | Path) -> None:
        """Decode `path` into the channel; blocks until the last entry is taken.

        Raises StreamCancelled if the cancel token fires. Decode failures are
        not raised here, they are delivered as the final entry.
        """

        if self._started:
            raise RuntimeError("JSONStream can only be started once")
        self._started = True
        pump(self._entries(path), self._channel, cancel=self._cancel)


def read_json_file(
    path: str | Path,
    shape: Any,
    *,
    backend: str | None = None,
    cancel: threading.Event | None = None,
) -> list[T]:
    """Decode a whole JSON array file into a list of `shape` instances.

    A drain thread collects entries while this thread runs the decoder; results
    are read only after that thread has been joined. On failure the stream error
    is raised with the elements decoded so far in `err.partial`.
    """

    stream: JSONStream[T] = JSONStream(shape, backend=backend, cancel=cancel)
    items: list[T] = []
    failures: list[StreamError] = []

    def drain() -> None:
        entries = stream.watch()
        while True:
            try:
                entry = entries.recv()
            except ChannelClosed:
                return
            if entry.error is not None:
                failures.append(entry.error)
                return
            items.append(entry.value)  # type: ignore[arg-type]

    t = threading.Thread(target=drain, name="swisskit-json-drain", daemon=True)
    t.start()
    try:
        stream.start(path)
    except StreamCancelled as e:
        failures.append(e)
    finally:
        # Deterministically drain so `items` is complete before it is read.
        t.join()

    if failures:
        err = failures[0]
        err.partial = list(items)
        raise err
    return items


def stream_json(
    path: str | Path,
    shape: Any,
    out: Channel[T],
    *,
    backend: str | None = None,
    cancel: threading.Event | None = None,
) -> None:
    """Decode a JSON array file straight into `out`, one element per send.

    `out` is always closed when this returns. On failure it is closed with the
    error (so a consumer iterating it sees the same exception) and the error
    is raised here as well.
    """

    pump(iter_json_array(path, shape, backend=backend), out, cancel=cancel)
