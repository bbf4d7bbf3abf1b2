"""Tests for sessionguard.session.spill and the filename helpers it relies on."""

from pathlib import Path

from sessionguard.session.spill import SpillFailed, SpillStore, SpillWritten, spill_path_for
from sessionguard.utils.helpers import safe_filename


class TestSpillPath:
    def test_jsonl_suffix_stripped(self):
        path = spill_path_for("/data/sessions/chat_1.jsonl", "call_7")
        assert path == Path("/data/sessions/chat_1.tool_result.call_7.txt")

    def test_other_suffix_kept(self):
        path = spill_path_for("/data/log.txt", "x")
        assert path.name == "log.txt.tool_result.x.txt"

    def test_qualifier_cannot_escape_directory(self, tmp_path):
        path = spill_path_for(tmp_path / "s.jsonl", "../../etc/passwd")
        assert path.parent == tmp_path


class TestSpillStore:
    def test_writes_utf8(self, tmp_path):
        result = SpillStore().write(tmp_path / "s.jsonl", "a", "héllo ✓")
        assert isinstance(result, SpillWritten)
        assert result.path.read_text(encoding="utf-8") == "héllo ✓"

    def test_creates_directory(self, tmp_path):
        session_file = tmp_path / "a" / "b" / "s.jsonl"
        result = SpillStore().write(session_file, "q", "text")
        assert isinstance(result, SpillWritten)
        assert result.path.parent == session_file.parent

    def test_overwrite_is_deterministic(self, tmp_path):
        store = SpillStore()
        first = store.write(tmp_path / "s.jsonl", "a", "one")
        second = store.write(tmp_path / "s.jsonl", "a", "two")
        assert first.path == second.path
        assert second.path.read_text(encoding="utf-8") == "two"

    def test_timestamp_qualifier_when_id_missing(self, tmp_path):
        store = SpillStore(clock=lambda: 1_700_000_000.5)
        result = store.write(tmp_path / "s.jsonl", None, "text")
        assert result.path.name == "s.tool_result.1700000000500.txt"

    def test_no_session_file(self):
        assert isinstance(SpillStore().write(None, "a", "x"), SpillFailed)
        assert isinstance(SpillStore().write("", "a", "x"), SpillFailed)

    def test_io_failure_is_reported_not_raised(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not dir")
        result = SpillStore().write(blocker / "s.jsonl", "a", "x")
        assert isinstance(result, SpillFailed)
        assert result.reason

    def test_write_error_is_reported(self, tmp_path, monkeypatch):
        def fail(self, *args, **kwargs):
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr(Path, "write_text", fail)
        result = SpillStore().write(tmp_path / "s.jsonl", "a", "x")
        assert result == SpillFailed("read-only filesystem")


class TestSafeFilename:
    def test_replaces_unsafe_characters(self):
        assert safe_filename('a/b\\c:d*e?"f') == "a_b_c_d_e__f"

    def test_dot_names(self):
        assert safe_filename("..") == "_"
        assert safe_filename("") == "_"

    def test_keeps_ordinary_ids(self):
        assert safe_filename("call_abc-123.x") == "call_abc-123.x"
