"""Streaming decoder for files whose top-level value is a JSON array.

The file is fed chunk by chunk into an `ijson` push parser, so only the element
being decoded is ever held in memory:

    [ {...}, {...}, ... ]

Each element is assembled from parser events and then validated into the
caller's element shape with a pydantic `TypeAdapter`. Any shape pydantic
understands works: stdlib dataclasses, pydantic models, TypedDicts or plain
JSON types. Validation is strict: a JSON value must already have the field's
type (an int may fill a float field). Unknown keys are ignored, missing keys
take the shape's defaults and a `null` element decodes to an all-defaults one.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any, TypeVar

import ijson
from ijson.common import IncompleteJSONError, JSONError, ObjectBuilder
from pydantic import TypeAdapter, ValidationError

from .errors import ElementDecodeError, FramingError, OpenError

T = TypeVar("T")

# "auto" lets ijson pick its fastest installed backend.
DEFAULT_BACKEND = "auto"

Event = tuple[str, str, Any]

_OPENERS = ("start_map", "start_array")
_CLOSERS = ("end_map", "end_array")

_DESCRIBE = {
    "start_map": "'{'",
    "end_map": "'}'",
    "start_array": "'['",
    "end_array": "']'",
    "string": "a string",
    "number": "a number",
    "boolean": "a boolean",
    "null": "null",
}


class _EventSink(list):
    """Push target for ijson coroutines."""

    send = list.append


def _resolve_backend(name: str | None) -> Any:
    if not name or name == "auto":
        return ijson
    return ijson.get_backend(name)


def _parse_events(f: IO[bytes], backend: Any, buf_size: int) -> Iterator[Event]:
    """Yield `(prefix, event, value)` tuples for the JSON text in `f`.

    A syntax error is raised only after every event parsed before it has been
    yielded, even when both sit in the same chunk of input.
    """

    sink = _EventSink()
    coro = backend.parse_coro(sink, use_float=True)
    while True:
        data = f.read(buf_size)
        error: JSONError | None = None
        cause: Exception | None = None
        try:
            if data:
                coro.send(data)
            else:
                coro.close()
        except (JSONError, UnicodeDecodeError) as e:
            # Backends disagree on the class they raise (yajl reports every
            # error as incomplete); only a failure at end of input is one.
            cause = e
            error = JSONError(str(e)) if data else IncompleteJSONError(str(e))

        pending = list(sink)
        del sink[:]
        yield from pending

        if error is not None:
            raise error from cause
        if not data:
            return


def _build_value(event: str, value: Any, events: Iterator[Event]) -> Any:
    """Assemble one complete JSON value whose first event is `event`."""

    builder = ObjectBuilder()
    depth = 0
    while True:
        builder.event(event, value)
        if event in _OPENERS:
            depth += 1
        elif event in _CLOSERS:
            depth -= 1
        if depth == 0:
            return builder.value

        nxt = next(events, None)
        if nxt is None:
            raise IncompleteJSONError("Incomplete JSON content")
        _, event, value = nxt


def _decode(adapter: TypeAdapter[T], raw: Any) -> T:
    """Validate one element strictly, as JSON, so `"5"` or `true` never fill an int field."""

    try:
        return adapter.validate_json(json.dumps(raw), strict=True)
    except ValidationError:
        if raw is not None:
            raise
    # A null element leaves the shape at its defaults.
    return adapter.validate_json("{}", strict=True)


def iter_json_array(
    path: str | Path,
    shape: Any,
    *,
    backend: str | None = None,
    buf_size: int = 64 * 1024,
) -> Iterator[T]:
    """Yield the elements of the JSON array in `path`, each decoded into `shape`.

    Args:
        path: File whose top-level value is a JSON array.
        shape: Element type, anything accepted by `pydantic.TypeAdapter`.
        backend: ijson backend name; "auto" or None picks ijson's default.
        buf_size: Bytes read from the file per parser refill.

    Raises:
        OpenError: the file could not be opened.
        FramingError: the opening `[` or closing `]` is missing.
        ElementDecodeError: element N (1-based) is malformed or does not fit
            `shape`. Nothing after it is yielded.

    Closing the generator early closes the file.
    """

    adapter: TypeAdapter[T] = TypeAdapter(shape)
    parser = _resolve_backend(backend)

    try:
        f = open(path, "rb")
    except OSError as e:
        raise OpenError(path, e) from e

    with f:
        events = _parse_events(f, parser, buf_size)

        try:
            first = next(events, None)
        except JSONError as e:
            raise FramingError("opening", str(e)) from e
        if first is None:
            raise FramingError("opening", "empty input")
        if first[1] != "start_array":
            raise FramingError("opening", f"expected '[' but found {_DESCRIBE.get(first[1], first[1])}")

        index = 1
        while True:
            # Running out of input between elements means the array was never closed;
            # anything else that fails here belongs to the element that should follow.
            try:
                head = next(events, None)
            except IncompleteJSONError as e:
                raise FramingError("closing", str(e)) from e
            except JSONError as e:
                raise ElementDecodeError(index, e) from e
            if head is None:
                raise FramingError("closing", "unexpected end of input")

            _, event, value = head
            if event == "end_array":
                return

            try:
                item = _decode(adapter, _build_value(event, value, events))
            except (JSONError, ValidationError) as e:
                raise ElementDecodeError(index, e) from e

            yield item
            index += 1
