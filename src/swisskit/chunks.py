from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from itertools import islice
from typing import TypeVar

T = TypeVar("T")


def _check_size(size: int) -> None:
    if size <= 0:
        raise ValueError("chunk size must be greater than zero")


def chunk(seq: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split `seq` into consecutive slices of `size` items; the last may be shorter.

    Slices keep the input's type, so a list gives lists and a tuple gives tuples:

        chunk([1, 2, 3, 4, 5, 6, 7], 3)  # [[1, 2, 3], [4, 5, 6], [7]]
    """

    _check_size(size)
    return [seq[i : i + size] for i in range(0, len(seq), size)]


def iter_chunks(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Lazy variant of `chunk` for iterators and streams of unknown length."""

    _check_size(size)

    def gen() -> Iterator[list[T]]:
        it = iter(items)
        while True:
            batch = list(islice(it, size))
            if not batch:
                return
            yield batch

    return gen()
