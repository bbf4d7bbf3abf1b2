"""Cap the size of tool results before they reach the transcript.

A result whose text blocks together exceed the soft limit is spilled in full
to a file beside the session. Each oversized block is then replaced inline by
its head, a notice saying where the rest went, and its tail.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

from sessionguard.config.schema import GuardConfig
from sessionguard.session.entries import TextBlock, ToolResultEntry, TranscriptEntry
from sessionguard.session.spill import SpillStore, SpillWritten


@dataclass(frozen=True)
class CapMeta:
    session_file: str | None = None
    tool_call_id: str | None = None


@dataclass(frozen=True)
class SpillRecord:
    original_length: int
    head: str
    tail: str
    path: Path | None = None

    @property
    def head_chars(self) -> int:
        return len(self.head)

    @property
    def tail_chars(self) -> int:
        return len(self.tail)


def split_head_tail(
    text: str,
    keep_chars: int,
    head_snap_ratio: float = 0.8,
    tail_snap_ratio: float = 0.2,
) -> tuple[str, str]:
    """Split ``text`` into a retained head and tail, preferring line breaks.

    The head ends at the last newline inside its window when that newline
    sits at or past ``head_snap_ratio`` of the window. The tail starts after
    the first newline inside its window when that newline sits before
    ``tail_snap_ratio`` of the window.
    """
    length = len(text)
    head_chars = min(keep_chars, length)
    tail_chars = min(keep_chars, length - head_chars)

    head_end = head_chars
    head_newline = text.rfind("\n", 0, head_chars + 1)
    if head_newline != -1 and head_newline >= head_chars * head_snap_ratio:
        head_end = head_newline

    tail_start = length - tail_chars
    if tail_chars:
        tail_newline = text.find("\n", tail_start)
        if tail_newline != -1 and tail_newline < tail_start + tail_chars * tail_snap_ratio:
            tail_start = tail_newline + 1

    return text[:head_end], text[tail_start:]


def build_spill_notice(record: SpillRecord, read_chunk_chars: int = 2_000) -> str:
    """Render head + notice + tail for one truncated block."""
    length = record.original_length
    if record.path is not None:
        where = (
            f"The full content ({length} characters) has been saved to:\n"
            f"  {record.path}\n\n"
            f"Read the file in ranges of about {read_chunk_chars} characters using "
            f"offset/limit rather than all at once. If only specific data is needed, "
            f"consider delegating the extraction to a sub-agent."
        )
    else:
        where = (
            f"The full content ({length} characters) could not be persisted. "
            f"Re-run the tool with offset/limit parameters to read smaller sections."
        )

    return (
        f"{record.head}"
        f"\n\n[TRUNCATED: showing first {record.head_chars} and last "
        f"{record.tail_chars} of {length} characters]\n"
        f"{where}\n\n"
        f"--- last {record.tail_chars} characters ---\n"
        f"{record.tail}"
    )


class SizeGuard:
    """Soft-limit tool result text, spilling the overflow to disk."""

    def __init__(self, config: GuardConfig | None = None, spill_store: SpillStore | None = None):
        self.config = config or GuardConfig()
        self.spill_store = spill_store or SpillStore()

    def cap(self, entry: TranscriptEntry, meta: CapMeta | None = None) -> TranscriptEntry:
        """Return ``entry`` with oversized text blocks replaced.

        Anything other than a result with block content, and any result
        within the soft limit, is returned as the same object.
        """
        if not isinstance(entry, ToolResultEntry) or not isinstance(entry.content, tuple):
            return entry

        texts = [block.text for block in entry.content if isinstance(block, TextBlock)]
        if sum(len(t) for t in texts) <= self.config.soft_max_chars:
            return entry

        meta = meta or CapMeta()
        spilled = self.spill_store.write(meta.session_file, meta.tool_call_id, "\n".join(texts))
        spill_path = spilled.path if isinstance(spilled, SpillWritten) else None

        content = tuple(
            self._truncate_block(block, spill_path)
            if isinstance(block, TextBlock) and len(block.text) > self.config.soft_max_chars
            else block
            for block in entry.content
        )
        return dataclasses.replace(entry, content=content)

    def _truncate_block(self, block: TextBlock, spill_path: Path | None) -> TextBlock:
        head, tail = split_head_tail(
            block.text,
            self.config.keep_chars,
            self.config.head_snap_ratio,
            self.config.tail_snap_ratio,
        )
        record = SpillRecord(
            original_length=len(block.text),
            head=head,
            tail=tail,
            path=spill_path,
        )
        return dataclasses.replace(
            block, text=build_spill_notice(record, self.config.read_chunk_chars)
        )
