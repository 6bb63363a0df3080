"""Filesystem helpers for catalog and CLI state paths."""
from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir


APP_NAME = "StreamVault"
APP_AUTHOR = "StreamVault"


def default_state_dir() -> Path:
    """Return the platform-appropriate directory for local CLI state."""

    return Path(user_data_dir(APP_NAME, APP_AUTHOR))


def ensure_parent_directory(path: str | Path) -> Path:
    """Expand ``path`` and create its parent directory if it does not exist."""

    resolved = Path(path).expanduser()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved
