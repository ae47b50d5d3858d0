from __future__ import annotations

import threading
from collections.abc import Iterator
from pathlib import Path

from .channel import Channel, pump
from .errors import LineTooLongError, OpenError

# Longest line (in bytes, terminator excluded) the readers accept. Raise it for
# files with really large lines.
MAX_LINE_SIZE = 10 * 1024 * 1024


def iter_lines(
    path: str | Path,
    *,
    max_line_size: int = MAX_LINE_SIZE,
    encoding: str = "utf-8",
) -> Iterator[str]:
    """Yield the lines of a text file without their `\\n` / `\\r\\n` terminators.

    Blank lines are kept and a final line without a terminator is still
    yielded. A line longer than `max_line_size` bytes raises LineTooLongError.
    """

    if max_line_size <= 0:
        raise ValueError("max_line_size must be greater than zero")

    # Room for the line plus "\r\n", so an oversized line is seen without
    # reading all of it.
    limit = max_line_size + 2

    try:
        f = open(path, "rb")
    except OSError as e:
        raise OpenError(path, e) from e

    with f:
        line_number = 0
        while True:
            raw = f.readline(limit)
            if not raw:
                return
            line_number += 1

            if raw.endswith(b"\n"):
                raw = raw[:-1]
            elif len(raw) == limit:
                raise LineTooLongError(line_number, max_line_size)
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            if len(raw) > max_line_size:
                raise LineTooLongError(line_number, max_line_size)

            # Undecodable bytes survive as surrogates; encode back with the same handler.
            yield raw.decode(encoding, errors="surrogateescape")


def read_lines(
    path: str | Path,
    *,
    max_line_size: int = MAX_LINE_SIZE,
    encoding: str = "utf-8",
) -> list[str]:
    """Read every line of a text file. Fails as a whole; no partial result."""

    return list(iter_lines(path, max_line_size=max_line_size, encoding=encoding))


def stream_lines(
    path: str | Path,
    out: Channel[str],
    *,
    max_line_size: int = MAX_LINE_SIZE,
    encoding: str = "utf-8",
    cancel: threading.Event | None = None,
) -> None:
    """Send each line of a text file into `out`, then close it.

    Errors (unreadable file, oversized line, cancellation) close `out` with the
    error and are raised.
    """

    pump(iter_lines(path, max_line_size=max_line_size, encoding=encoding), out, cancel=cancel)
