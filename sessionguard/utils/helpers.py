"""Utility functions for sessionguard."""

import re
from pathlib import Path

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str) -> str:
    """Convert a string to a safe filename component."""
    cleaned = _UNSAFE_CHARS.sub("_", name).strip()
    # A bare ".." would still climb out of the session directory
    if cleaned in ("", ".", ".."):
        return "_"
    return cleaned
