"""Transcript repair helpers.

- ``sanitize_tool_call_inputs``: drop malformed tool calls from assistant
  entries before they are persisted
- ``make_missing_tool_result``: build the placeholder for an unanswered call
- ``repair_tool_pairing``: read-time repair of an already persisted history
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Mapping

from loguru import logger

from sessionguard.session.entries import (
    AssistantEntry,
    TextBlock,
    ToolCallBlock,
    ToolResultEntry,
    TranscriptEntry,
)

MISSING_RESULT_TEXT = "[Tool result missing: the call may have been interrupted]"


def make_missing_tool_result(tool_call_id: str, tool_name: str | None = None) -> ToolResultEntry:
    """Create a synthetic tool result for an unmatched tool call."""
    return ToolResultEntry(
        tool_call_id=tool_call_id,
        tool_name=tool_name or "unknown",
        content=(TextBlock(MISSING_RESULT_TEXT),),
        is_error=True,
        synthetic=True,
    )


def _valid_arguments(arguments: Any) -> bool:
    # A call without arguments is a call with no parameters
    if arguments is None or isinstance(arguments, Mapping):
        return True
    if isinstance(arguments, str):
        try:
            return isinstance(json.loads(arguments or "{}"), dict)
        except json.JSONDecodeError:
            return False
    return False


def _valid_openai_call(tc: dict[str, Any]) -> bool:
    tc_id = tc.get("id")
    if not isinstance(tc_id, str) or not tc_id:
        return False
    fn = tc.get("function")
    if not isinstance(fn, dict):
        return False
    return _valid_arguments(fn.get("arguments"))


def _has_payload(entry: AssistantEntry) -> bool:
    if entry.tool_calls:
        return True
    if isinstance(entry.content, str):
        return bool(entry.content.strip())
    return bool(entry.content)


def sanitize_tool_call_inputs(entries: list[TranscriptEntry]) -> list[TranscriptEntry]:
    """Drop tool calls with no id or unusable arguments from assistant entries.

    An assistant entry that loses calls this way and has nothing left (no
    text, no blocks, no calls) is dropped entirely. Untouched entries are
    returned as the same objects.
    """
    result: list[TranscriptEntry] = []
    for entry in entries:
        if not isinstance(entry, AssistantEntry):
            result.append(entry)
            continue

        dropped = 0
        content = entry.content
        if isinstance(content, tuple):
            content = tuple(
                block
                for block in content
                if not isinstance(block, ToolCallBlock)
                or (block.id and _valid_arguments(block.arguments))
            )
            dropped += len(entry.content) - len(content)
        tool_calls = tuple(tc for tc in entry.tool_calls if _valid_openai_call(tc))
        dropped += len(entry.tool_calls) - len(tool_calls)

        if not dropped:
            result.append(entry)
            continue

        logger.debug(f"Dropped {dropped} malformed tool call(s) from assistant entry")
        cleaned = dataclasses.replace(entry, content=content, tool_calls=tool_calls)
        if not _has_payload(cleaned):
            logger.debug("Dropping assistant entry left empty after sanitization")
            continue
        result.append(cleaned)
    return result


def repair_tool_pairing(entries: list[TranscriptEntry]) -> list[TranscriptEntry]:
    """
    Repair tool call / result pairing in a persisted history.

    Every assistant tool call gets a result before the next non-result entry
    (synthesized if missing), and results whose id was never issued, or was
    already answered, are dropped.
    """
    if not entries:
        return entries

    result: list[TranscriptEntry] = []
    # Calls issued and still waiting for a result, in issue order
    pending: dict[str, str | None] = {}

    def close_pending() -> None:
        for tc_id, tc_name in pending.items():
            result.append(make_missing_tool_result(tc_id, tc_name))
            logger.debug(f"Inserted synthetic tool result for: {tc_id}")
        pending.clear()

    for entry in entries:
        if isinstance(entry, ToolResultEntry):
            tc_id = entry.tool_call_id
            if tc_id is not None and tc_id in pending:
                pending.pop(tc_id)
                result.append(entry)
            else:
                logger.debug(f"Dropping orphan tool result: {tc_id}")
            continue

        close_pending()
        result.append(entry)
        if isinstance(entry, AssistantEntry):
            for call in entry.calls():
                pending[call.id] = call.name

    close_pending()
    return result
