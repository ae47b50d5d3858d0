from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "swisskit.yaml"
CONFIG_ENV_VAR = "SWISSKIT_CONFIG"


def find_repo_root(start: Path | None = None) -> Path:
    """Find the repository root by walking up to a directory containing pyproject.toml.

    This keeps behavior predictable when invoking `swisskit` from subdirectories.
    """

    cur = (start or Path.cwd()).resolve()
    for p in [cur, *cur.parents]:
        if (p / "pyproject.toml").exists():
            return p
    # Fallback: current directory.
    return cur


def config_path(repo_root: Path, *, env: dict[str, str] | None = None) -> Path:
    """Config file location: $SWISSKIT_CONFIG if set, else <repo_root>/swisskit.yaml."""

    override = (env if env is not None else os.environ).get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return repo_root / CONFIG_FILENAME
