"""Spill oversized tool output to a file beside the session transcript."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

from loguru import logger

from sessionguard.utils.helpers import ensure_dir, safe_filename

SPILL_INFIX = ".tool_result"
SPILL_SUFFIX = ".txt"
_SESSION_SUFFIX = ".jsonl"


@dataclass(frozen=True)
class SpillWritten:
    path: Path


@dataclass(frozen=True)
class SpillFailed:
    reason: str


SpillResult = Union[SpillWritten, SpillFailed]


def spill_path_for(session_file: str | Path, qualifier: str) -> Path:
    """Return ``<dir>/<session base>.tool_result.<qualifier>.txt``."""
    session_path = Path(session_file)
    base = session_path.name
    if base.endswith(_SESSION_SUFFIX):
        base = base[: -len(_SESSION_SUFFIX)]
    name = f"{base}{SPILL_INFIX}.{safe_filename(qualifier)}{SPILL_SUFFIX}"
    return session_path.parent / name


class SpillStore:
    """Write full tool output to auxiliary storage.

    Never raises: every failure comes back as ``SpillFailed`` so callers can
    fall back to an inline-only notice.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def write(
        self,
        session_file: str | Path | None,
        qualifier: str | None,
        text: str,
    ) -> SpillResult:
        if not session_file:
            return SpillFailed("no session file")
        if not qualifier:
            qualifier = str(int(self._clock() * 1000))

        try:
            path = spill_path_for(session_file, qualifier)
            ensure_dir(path.parent)
            path.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.warning(f"Spill write failed for {session_file} ({qualifier}): {e}")
            return SpillFailed(str(e))

        logger.debug(f"Spilled {len(text)} chars to {path}")
        return SpillWritten(path)
