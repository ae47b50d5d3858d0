from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .jsonstream import DEFAULT_BACKEND
from .lines import MAX_LINE_SIZE


@dataclass
class ToolkitConfig:
    # Longest accepted line for the line readers, in bytes.
    max_line_size: int = MAX_LINE_SIZE
    encoding: str = "utf-8"

    # ijson backend for the JSON readers: auto|python|yajl2_c|yajl2_cffi|yajl2.
    json_backend: str = DEFAULT_BACKEND

    retry_max_retries: int = 3
    retry_delay_s: float = 1.0

    # Files the CLI reads when no path is given.
    example_json: Path = Path("example.json")
    example_text: Path = Path("example.txt")


def _as_str(v: Any) -> str | None:
    return v if isinstance(v, str) and v else None


def _as_int(v: Any, *, minimum: int) -> int | None:
    # bool is an int subclass; `true` in YAML is not a size.
    if isinstance(v, bool) or not isinstance(v, int):
        return None
    return v if v >= minimum else None


def _as_float(v: Any, *, minimum: float) -> float | None:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v) if v >= minimum else None


def _as_path(v: Any, *, base: Path) -> Path | None:
    s = _as_str(v)
    if s is None:
        return None
    p = Path(s)
    return (base / p).resolve() if not p.is_absolute() else p


def load_config(path: Path, *, base: Path | None = None) -> ToolkitConfig:
    """Load a swisskit.yaml if present; otherwise return defaults.

    Unknown keys are ignored and invalid values fall back to the default.
    Relative example paths resolve against `base` (default: the file's directory).
    """

    data: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            data = loaded

    base = base or path.parent
    cfg = ToolkitConfig()

    cfg.max_line_size = _as_int(data.get("max_line_size"), minimum=1) or cfg.max_line_size
    cfg.encoding = _as_str(data.get("encoding")) or cfg.encoding
    cfg.json_backend = _as_str(data.get("json_backend")) or cfg.json_backend

    cfg.retry_max_retries = _as_int(data.get("retry_max_retries"), minimum=1) or cfg.retry_max_retries
    delay = _as_float(data.get("retry_delay_s"), minimum=0.0)
    if delay is not None:
        cfg.retry_delay_s = delay

    cfg.example_json = _as_path(data.get("example_json"), base=base) or cfg.example_json
    cfg.example_text = _as_path(data.get("example_text"), base=base) or cfg.example_text

    return cfg
