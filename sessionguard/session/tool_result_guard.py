"""Write-time tool result guard for session integrity.

Wraps the append operation of a session transcript so that every assistant
tool call has a matching result before anything else is persisted. Calls that
never get a real result are answered with a synthetic one. Tool results pass
through ``SizeGuard`` on the way in, so no single entry can flood the
transcript.

Usage:
    transcript = JsonlTranscript(path)
    guard = guard_transcript(transcript)

    # Hand ``guard`` to whatever used to call ``transcript.append``
    guard.append({"role": "user", "content": "hi"})
    ...
    guard.close()  # end of session: answer anything still pending
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from loguru import logger

from sessionguard.config.schema import GuardConfig
from sessionguard.session.entries import (
    AssistantEntry,
    ToolCall,
    ToolResultEntry,
    TranscriptEntry,
    parse_entry,
)
from sessionguard.session.events import TranscriptNotifier
from sessionguard.session.repair import make_missing_tool_result, sanitize_tool_call_inputs
from sessionguard.session.size_guard import CapMeta, SizeGuard
from sessionguard.session.transcript import JsonlTranscript, TranscriptAppender


@dataclass(frozen=True)
class ToolResultMeta:
    """What the result transform is told about the result it receives."""

    tool_call_id: str | None = None
    tool_name: str | None = None
    is_synthetic: bool = False


EntryTransform = Callable[[TranscriptEntry], TranscriptEntry]
ResultTransform = Callable[[TranscriptEntry, ToolResultMeta], TranscriptEntry]
Sanitizer = Callable[[list[TranscriptEntry]], list[TranscriptEntry]]
MissingResultFactory = Callable[[str, str | None], TranscriptEntry]


class ToolResultGuard:
    """Tracks pending tool calls and keeps calls and results paired on write.

    One guard per active session. Not thread-safe: entries must arrive one at
    a time from the loop that owns the session.

    The pending set only ever holds calls issued since the last non-result
    entry. With synthetic results disabled, that entry still ends the window:
    the calls are dropped from the set without a placeholder being written.
    """

    def __init__(
        self,
        target: TranscriptAppender,
        *,
        config: GuardConfig | None = None,
        session_file: Callable[[], str | None] | None = None,
        notify: Callable[[str], None] | None = None,
        sanitize: Sanitizer = sanitize_tool_call_inputs,
        make_missing: MissingResultFactory = make_missing_tool_result,
        transform_entry: EntryTransform | None = None,
        transform_result: ResultTransform | None = None,
        size_guard: SizeGuard | None = None,
    ):
        self.config = config or GuardConfig()
        self.size_guard = size_guard or SizeGuard(self.config)
        self._append = target.append
        self._get_session_file = session_file
        self._notify = notify
        self._sanitize = sanitize
        self._make_missing = make_missing
        self._transform_entry = transform_entry
        self._transform_result = transform_result
        # tool_call_id -> tool name, in registration order
        self._pending: dict[str, str | None] = {}

    @property
    def allow_synthetic(self) -> bool:
        return self.config.allow_synthetic_tool_results

    @property
    def pending_ids(self) -> list[str]:
        return list(self._pending)

    @property
    def pending_calls(self) -> list[ToolCall]:
        return [ToolCall(tc_id, tc_name) for tc_id, tc_name in self._pending.items()]

    def session_file(self) -> str | None:
        return self._get_session_file() if self._get_session_file else None

    # -- public API ----------------------------------------------------------

    def append(self, entry: TranscriptEntry | Mapping[str, Any]) -> Any:
        """Persist ``entry`` through the guard.

        Returns whatever the underlying append returned, or ``None`` when an
        assistant entry was discarded because nothing survived sanitization.
        """
        entry = parse_entry(entry)

        if isinstance(entry, AssistantEntry):
            sanitized = self._sanitize([entry])
            if not sanitized:
                if self.allow_synthetic and self._pending:
                    self.flush_pending()
                logger.debug("Guard: discarded assistant entry with no usable content")
                return None
            entry = sanitized[0]

        if isinstance(entry, ToolResultEntry):
            return self._append_result(entry)
        return self._append_other(entry)

    def flush_pending(self) -> int:
        """Answer every pending call with a synthetic result.

        Returns the number of synthetic results written. With synthesis
        disabled the pending set is only cleared.
        """
        if not self._pending:
            return 0

        written = 0
        if self.allow_synthetic:
            for tc_id, tc_name in list(self._pending.items()):
                logger.debug(f"Guard: synthesizing missing result for {tc_id} ({tc_name})")
                synthetic = self._before_persist(self._make_missing(tc_id, tc_name))
                meta = ToolResultMeta(tool_call_id=tc_id, tool_name=tc_name, is_synthetic=True)
                self._append(self._before_persist_result(synthetic, meta))
                written += 1
        self._pending.clear()
        return written

    def close(self) -> None:
        """Flush at end of session so no call is left unanswered."""
        self.flush_pending()

    # -- internals -----------------------------------------------------------

    def _before_persist(self, entry: TranscriptEntry) -> TranscriptEntry:
        return self._transform_entry(entry) if self._transform_entry else entry

    def _before_persist_result(self, entry: TranscriptEntry, meta: ToolResultMeta) -> TranscriptEntry:
        return self._transform_result(entry, meta) if self._transform_result else entry

    def _append_result(self, entry: ToolResultEntry) -> Any:
        tc_id = entry.tool_call_id
        tool_name = self._pending.pop(tc_id, None) if tc_id else None

        capped = self.size_guard.cap(
            self._before_persist(entry),
            CapMeta(session_file=self.session_file(), tool_call_id=tc_id),
        )
        meta = ToolResultMeta(tool_call_id=tc_id, tool_name=tool_name, is_synthetic=False)
        return self._append(self._before_persist_result(capped, meta))

    def _append_other(self, entry: TranscriptEntry) -> Any:
        calls = entry.calls() if isinstance(entry, AssistantEntry) else []

        # Outstanding calls are settled before anything else lands, including
        # an assistant entry that opens new calls. With synthesis disabled
        # this only forgets them.
        if self._pending:
            self.flush_pending()

        result = self._append(self._before_persist(entry))

        session_file = self.session_file()
        if session_file and self._notify:
            self._notify(session_file)

        for call in calls:
            self._pending[call.id] = call.name
        return result


def guard_transcript(
    transcript: JsonlTranscript,
    config: GuardConfig | None = None,
    notifier: TranscriptNotifier | None = None,
    **kwargs: Any,
) -> ToolResultGuard:
    """Build a guard over ``transcript``'s append and session file."""
    return ToolResultGuard(
        transcript,
        config=config,
        session_file=transcript.get_session_file,
        notify=notifier.emit if notifier else None,
        **kwargs,
    )
