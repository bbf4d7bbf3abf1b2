"""Tests for sessionguard.session.transcript: JSONL append-only log."""

import json

from sessionguard.session.entries import MessageEntry, ToolResultEntry
from sessionguard.session.transcript import JsonlTranscript


class TestJsonlTranscript:
    def test_first_append_writes_metadata_header(self, tmp_path):
        transcript = JsonlTranscript(tmp_path / "nested" / "s.jsonl", metadata={"channel": "cli"})
        transcript.append({"role": "user", "content": "hi"})
        transcript.append({"role": "user", "content": "again"})

        lines = transcript.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        header = json.loads(lines[0])
        assert header["_type"] == "metadata"
        assert header["metadata"] == {"channel": "cli"}
        assert json.loads(lines[2]) == {"role": "user", "content": "again"}

    def test_append_returns_written_record(self, tmp_path):
        transcript = JsonlTranscript(tmp_path / "s.jsonl")
        record = transcript.append(MessageEntry(role="user", content="hi"))
        assert record == {"role": "user", "content": "hi"}

    def test_read_entries_round_trip(self, tmp_path):
        transcript = JsonlTranscript(tmp_path / "s.jsonl")
        transcript.append({"role": "user", "content": "hi"})
        transcript.append({"role": "tool", "tool_call_id": "a", "content": "ok"})

        entries = transcript.read_entries()
        assert entries[0] == MessageEntry(role="user", content="hi")
        assert isinstance(entries[1], ToolResultEntry)

    def test_unreadable_lines_skipped(self, tmp_path):
        path = tmp_path / "s.jsonl"
        path.write_text(
            '{"role": "user", "content": "one"}\n'
            "not json\n"
            "\n"
            '{"content": "no role"}\n'
            '{"role": "user", "content": "two"}\n',
            encoding="utf-8",
        )
        entries = JsonlTranscript(path).read_entries()
        assert [e.content for e in entries] == ["one", "two"]

    def test_missing_file_reads_empty(self, tmp_path):
        assert JsonlTranscript(tmp_path / "none.jsonl").read_entries() == []

    def test_load_history_repairs_pairing(self, tmp_path):
        transcript = JsonlTranscript(tmp_path / "s.jsonl")
        transcript.append({"role": "assistant", "tool_calls": [{"id": "a", "function": {"name": "f"}}]})
        transcript.append({"role": "user", "content": "interrupted"})

        assert len(transcript.load_history(repair=False)) == 2
        repaired = transcript.load_history()
        assert [e.role for e in repaired] == ["assistant", "tool", "user"]

    def test_session_file_accessor(self, tmp_path):
        path = tmp_path / "s.jsonl"
        assert JsonlTranscript(path).get_session_file() == str(path)
