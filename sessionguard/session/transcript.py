"""Append-only JSONL session transcript."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Protocol

from loguru import logger

from sessionguard.session.entries import (
    InvalidEntryError,
    TranscriptEntry,
    parse_entry,
)
from sessionguard.session.repair import repair_tool_pairing
from sessionguard.utils.helpers import ensure_dir


class TranscriptAppender(Protocol):
    """Anything that can persist one transcript entry."""

    def append(self, entry: TranscriptEntry) -> Any: ...


class JsonlTranscript:
    """
    A session transcript stored as JSONL.

    The first line is a metadata record; every following line is one entry.
    Lines are only ever appended.
    """

    def __init__(self, path: Path, metadata: dict[str, Any] | None = None):
        self.path = Path(path)
        self.metadata = metadata or {}

    def get_session_file(self) -> str | None:
        return str(self.path)

    def append(self, entry: TranscriptEntry | Mapping[str, Any]) -> dict[str, Any]:
        """Append one entry and return the dict that was written."""
        record = parse_entry(entry).to_dict()
        ensure_dir(self.path.parent)

        is_new = not self.path.exists()
        with open(self.path, "a", encoding="utf-8") as f:
            if is_new:
                metadata_line = {
                    "_type": "metadata",
                    "created_at": datetime.now().isoformat(),
                    "metadata": self.metadata,
                }
                f.write(json.dumps(metadata_line, ensure_ascii=False) + "\n")
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
        return record

    def read_entries(self) -> list[TranscriptEntry]:
        """Read every entry back, skipping lines that cannot be parsed."""
        if not self.path.exists():
            return []

        entries: list[TranscriptEntry] = []
        with open(self.path, encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                    if isinstance(data, dict) and data.get("_type") == "metadata":
                        continue
                    entries.append(parse_entry(data))
                except (json.JSONDecodeError, InvalidEntryError) as e:
                    logger.warning(f"Skipping unreadable line {lineno} in {self.path}: {e}")
        return entries

    def load_history(self, repair: bool = True) -> list[TranscriptEntry]:
        """Return the transcript, optionally with tool call pairing repaired."""
        entries = self.read_entries()
        return repair_tool_pairing(entries) if repair else entries
