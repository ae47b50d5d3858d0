from __future__ import annotations

from pathlib import Path
from typing import Any


class StreamError(Exception):
    """Base class for failures raised by the streaming readers.

    `partial` holds whatever was collected before the failure when a buffering
    reader gives up (empty for the channel-based APIs).
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.partial: list[Any] = []


class OpenError(StreamError):
    def __init__(self, path: str | Path, cause: OSError) -> None:
        super().__init__(f"error opening file {path}: {cause}")
        self.path = Path(path)


class FramingError(StreamError):
    """The top-level `[` or `]` was missing or unreadable."""

    def __init__(self, where: str, detail: str) -> None:
        super().__init__(f"decode {where} delimiter: {detail}")
        self.where = where


class ElementDecodeError(StreamError):
    def __init__(self, index: int, cause: Exception) -> None:
        super().__init__(f"decode element {index}: {cause}")
        self.index = index


class LineTooLongError(StreamError):
    def __init__(self, line_number: int, limit: int) -> None:
        super().__init__(f"line {line_number} exceeds the maximum line size of {limit} bytes")
        self.line_number = line_number
        self.limit = limit


class StreamCancelled(StreamError):
    def __init__(self, message: str = "stream cancelled") -> None:
        super().__init__(message)


class ChannelClosed(StreamError):
    pass


class RetryError(Exception):
    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"operation failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
