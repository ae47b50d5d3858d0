from __future__ import annotations

from enum import IntEnum
from pathlib import Path


class Unit(IntEnum):
    KIB = 1 << 10
    MIB = 1 << 20
    GIB = 1 << 30
    TIB = 1 << 40

    @classmethod
    def parse(cls, name: str) -> "Unit":
        """Accept `MiB`, `mib`, `MB` or `M` style names (all powers of 1024)."""

        key = (name or "").strip().upper()
        if key.endswith("IB"):
            key = key[:-2]
        elif key.endswith("B"):
            key = key[:-1]
        for unit in cls:
            if unit.name[0] == key:
                return unit
        raise ValueError(f"unknown size unit: {name!r} (expected KiB, MiB, GiB or TiB)")


def file_size_in(path: str | Path, unit: int) -> float:
    """Return the size of `path` expressed in `unit` bytes.

    OS errors from stat (missing file, permissions) propagate unchanged.
    """

    if unit <= 0:
        raise ValueError("unit must be a positive number of bytes")
    return Path(path).stat().st_size / int(unit)
