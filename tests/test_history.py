"""Tests for the undo/redo history."""

import pytest

from prodoc.version.history import HistoryManager


class TestRecord:
    """Recording snapshots."""

    def test_same_content_twice_is_deduplicated(self):
        history = HistoryManager()
        assert history.record("<p>a</p>") is True
        assert history.record("<p>a</p>") is False
        assert len(history.entries) == 1

    def test_equal_content_after_other_entry_is_recorded(self):
        history = HistoryManager()
        history.record("a")
        history.record("b")
        assert history.record("a") is True
        assert [entry.content for entry in history.entries] == ["a", "b", "a"]

    def test_history_is_bounded(self):
        history = HistoryManager(limit=50)
        for index in range(60):
            history.record(f"snapshot {index}")

        entries = history.entries
        assert len(entries) == 50
        assert history.cursor == 49
        assert entries[0].content == "snapshot 10"
        assert entries[-1].content == "snapshot 59"

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            HistoryManager(limit=0)


class TestUndoRedo:
    """Moving through history."""

    def test_undo_and_redo_return_entries(self):
        history = HistoryManager()
        for content in ("a", "b", "c"):
            history.record(content)

        assert history.undo().content == "b"
        assert history.undo().content == "a"
        assert history.undo() is None
        assert history.redo().content == "b"
        assert history.current.content == "b"

    def test_recording_after_undo_discards_redo_branch(self):
        history = HistoryManager()
        for content in ("a", "b", "c"):
            history.record(content)

        history.undo()
        history.record("d")

        assert history.redo() is None
        assert not history.can_redo
        assert [entry.content for entry in history.entries] == ["a", "b", "d"]

    def test_single_entry_cannot_undo(self):
        history = HistoryManager()
        history.record("only")
        assert not history.can_undo
        assert history.undo() is None
        assert history.cursor == 0

    def test_empty_history(self):
        history = HistoryManager()
        assert history.current is None
        assert history.redo() is None

    def test_clear(self):
        history = HistoryManager()
        history.record("a")
        history.clear()
        assert history.entries == []
        assert history.cursor == -1
