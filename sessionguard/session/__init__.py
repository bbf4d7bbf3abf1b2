"""Session transcript guarding."""

from sessionguard.session.entries import (
    AssistantEntry,
    InvalidEntryError,
    MessageEntry,
    OpaqueBlock,
    TextBlock,
    ToolCall,
    ToolCallBlock,
    ToolResultEntry,
    TranscriptEntry,
    parse_entry,
)
from sessionguard.session.events import TranscriptNotifier
from sessionguard.session.size_guard import CapMeta, SizeGuard, SpillRecord
from sessionguard.session.spill import SpillFailed, SpillStore, SpillWritten
from sessionguard.session.tool_result_guard import (
    ToolResultGuard,
    ToolResultMeta,
    guard_transcript,
)
from sessionguard.session.transcript import JsonlTranscript, TranscriptAppender

__all__ = [
    "AssistantEntry",
    "CapMeta",
    "InvalidEntryError",
    "JsonlTranscript",
    "MessageEntry",
    "OpaqueBlock",
    "SizeGuard",
    "SpillFailed",
    "SpillRecord",
    "SpillStore",
    "SpillWritten",
    "TextBlock",
    "ToolCall",
    "ToolCallBlock",
    "ToolResultEntry",
    "ToolResultGuard",
    "ToolResultMeta",
    "TranscriptAppender",
    "TranscriptEntry",
    "TranscriptNotifier",
    "guard_transcript",
    "parse_entry",
]
