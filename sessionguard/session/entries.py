"""Transcript entry model.

Entries travel as plain dicts (one JSON object per transcript line). They are
parsed once, at the boundary, into a closed set of variants:

- ``AssistantEntry``: model output, possibly carrying tool calls
- ``ToolResultEntry``: a tool's output, correlated to a call by id
- ``MessageEntry``: everything else (user, system, ...)

Content is either a string or a tuple of blocks (``TextBlock``,
``ToolCallBlock``, ``OpaqueBlock``). Keys the model does not know about are
kept in ``extra`` and written back unchanged by ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Union

TOOL_CALL_KINDS = ("toolCall", "toolUse", "functionCall")
RESULT_ROLES = ("tool", "toolResult")

# Correlation id keys, in lookup order
PRIMARY_ID_FIELDS = ("tool_call_id", "toolCallId")
LEGACY_ID_FIELDS = ("tool_use_id", "toolUseId")


class InvalidEntryError(ValueError):
    """Raised when a raw transcript entry cannot be parsed."""


@dataclass(frozen=True)
class ToolCall:
    """A tool call issued by the assistant."""

    id: str
    name: str | None = None


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextBlock:
    text: str
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "type": "text", "text": self.text}


@dataclass(frozen=True)
class ToolCallBlock:
    id: str
    name: str | None = None
    arguments: Any = None
    kind: str = "toolCall"
    arguments_key: str = "arguments"
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = {**self.extra, "type": self.kind, "id": self.id}
        if self.name is not None:
            data["name"] = self.name
        if self.arguments is not None:
            data[self.arguments_key] = self.arguments
        return data


@dataclass(frozen=True)
class OpaqueBlock:
    """Any block kind the guard does not inspect (images, thinking, ...)."""

    data: Any

    def to_dict(self) -> Any:
        return self.data


ContentBlock = Union[TextBlock, ToolCallBlock, OpaqueBlock]
Content = Union[str, tuple[ContentBlock, ...], None]


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssistantEntry:
    content: Content = None
    # OpenAI-style ``tool_calls`` list, kept as raw dicts
    tool_calls: tuple[dict[str, Any], ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    role: ClassVar[str] = "assistant"

    def calls(self) -> list[ToolCall]:
        """Return every tool call with a usable id, in order of appearance."""
        found: list[ToolCall] = []
        if isinstance(self.content, tuple):
            for block in self.content:
                if isinstance(block, ToolCallBlock) and block.id:
                    found.append(ToolCall(block.id, block.name))
        for tc in self.tool_calls:
            tc_id = tc.get("id")
            if not isinstance(tc_id, str) or not tc_id:
                continue
            fn = tc.get("function")
            name = fn.get("name") if isinstance(fn, dict) else tc.get("name")
            found.append(ToolCall(tc_id, name if isinstance(name, str) else None))
        return found

    def to_dict(self) -> dict[str, Any]:
        data = {**self.extra, "role": self.role, "content": _dump_content(self.content)}
        if self.tool_calls:
            data["tool_calls"] = [dict(tc) for tc in self.tool_calls]
        return data


@dataclass(frozen=True)
class ToolResultEntry:
    tool_call_id: str | None = None
    content: Content = None
    tool_name: str | None = None
    is_error: bool = False
    synthetic: bool = False
    role: str = "tool"
    id_field: str = "tool_call_id"
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {**self.extra, "role": self.role}
        if self.tool_call_id is not None:
            data[self.id_field] = self.tool_call_id
        if self.tool_name is not None:
            data["name"] = self.tool_name
        data["content"] = _dump_content(self.content)
        if self.is_error:
            data["is_error"] = True
        if self.synthetic:
            data["synthetic"] = True
        return data


@dataclass(frozen=True)
class MessageEntry:
    role: str
    content: Content = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "role": self.role, "content": _dump_content(self.content)}


TranscriptEntry = Union[AssistantEntry, ToolResultEntry, MessageEntry]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_entry(data: Mapping[str, Any] | TranscriptEntry) -> TranscriptEntry:
    """Parse a raw transcript dict into its entry variant.

    Already-parsed entries are returned unchanged.

    Raises:
        InvalidEntryError: If ``data`` is not a mapping, has no string role,
            or carries content that is neither a string nor a list.
    """
    if isinstance(data, (AssistantEntry, ToolResultEntry, MessageEntry)):
        return data
    if not isinstance(data, Mapping):
        raise InvalidEntryError(f"Transcript entry must be a mapping, got {type(data).__name__}")

    role = data.get("role")
    if not isinstance(role, str) or not role:
        raise InvalidEntryError("Transcript entry has no role")

    rest = dict(data)
    rest.pop("role")
    content = _parse_content(rest.pop("content", None))

    if role == "assistant":
        raw_calls = rest.get("tool_calls")
        tool_calls: tuple[dict[str, Any], ...] = ()
        if isinstance(raw_calls, list):
            rest.pop("tool_calls")
            tool_calls = tuple(tc for tc in raw_calls if isinstance(tc, dict))
        return AssistantEntry(content=content, tool_calls=tool_calls, extra=rest)

    if role in RESULT_ROLES:
        tool_call_id, id_field = _pop_correlation_id(rest)
        name = rest.pop("name", None)
        return ToolResultEntry(
            tool_call_id=tool_call_id,
            content=content,
            tool_name=name if isinstance(name, str) else None,
            is_error=bool(rest.pop("is_error", False)),
            synthetic=bool(rest.pop("synthetic", False)),
            role=role,
            id_field=id_field,
            extra=rest,
        )

    return MessageEntry(role=role, content=content, extra=rest)


def _pop_correlation_id(rest: dict[str, Any]) -> tuple[str | None, str]:
    for key in PRIMARY_ID_FIELDS + LEGACY_ID_FIELDS:
        value = rest.get(key)
        if isinstance(value, str) and value:
            rest.pop(key)
            return value, key
    return None, PRIMARY_ID_FIELDS[0]


def _parse_content(raw: Any) -> Content:
    if raw is None or isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return tuple(_parse_block(item) for item in raw)
    raise InvalidEntryError(f"Unsupported content shape: {type(raw).__name__}")


def _parse_block(raw: Any) -> ContentBlock:
    if not isinstance(raw, dict):
        return OpaqueBlock(raw)
    kind = raw.get("type")

    if kind == "text" and isinstance(raw.get("text"), str):
        extra = {k: v for k, v in raw.items() if k not in ("type", "text")}
        return TextBlock(raw["text"], extra)

    if kind in TOOL_CALL_KINDS:
        arguments_key = "input" if "input" in raw and "arguments" not in raw else "arguments"
        block_id = raw.get("id")
        name = raw.get("name")
        extra = {
            k: v for k, v in raw.items() if k not in ("type", "id", "name", arguments_key)
        }
        return ToolCallBlock(
            id=block_id if isinstance(block_id, str) else "",
            name=name if isinstance(name, str) else None,
            arguments=raw.get(arguments_key),
            kind=kind,
            arguments_key=arguments_key,
            extra=extra,
        )

    return OpaqueBlock(raw)


def _dump_content(content: Content) -> Any:
    if isinstance(content, tuple):
        return [block.to_dict() for block in content]
    return content
