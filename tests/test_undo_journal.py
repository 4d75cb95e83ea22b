# tests/test_undo_journal.py
"""
Tests for the undo journal (component_4_undo_journal.py)
"""

import pytest

from component_1_sentence_record import SentenceRecord
from component_4_undo_journal import BatchKind, UndoBatch, UndoJournal


def _records(*line_numbers):
    return [SentenceRecord(line_number=n, text=f"line {n}") for n in line_numbers]


class TestCapture:
    """Tests for capture()"""

    def test_snapshot_is_sorted_deep_copy(self):
        """Test: Snapshots are ordered by line and share no storage"""
        journal = UndoJournal()
        records = _records(3, 1)

        batch = journal.capture(BatchKind.REMOVE, records, description="remove")
        records[0].text = "changed"
        records[0].indices.append(7)

        assert batch.line_numbers == [1, 3]
        assert batch.snapshot[1].text == "line 3"
        assert batch.snapshot[1].indices == [-1]
        assert batch.snapshot[1] is not records[0]

    def test_capture_does_not_store(self):
        """Test: Batches are only stored on commit"""
        journal = UndoJournal()
        journal.capture(BatchKind.ADD, _records(1))
        assert journal.can_undo is False

    def test_describe(self):
        """Test: Batch description names kind and lines"""
        batch = UndoBatch(BatchKind.ADD, _records(2, 4))
        assert batch.describe() == "add (lines 2, 4)"
        batch.description = "insert"
        assert batch.describe() == "insert (lines 2, 4)"


class TestHistory:
    """Tests for commit, undo/redo bookkeeping and limits"""

    def test_negative_limit_rejected(self):
        """Test: undo_limit must not be negative"""
        with pytest.raises(ValueError):
            UndoJournal(undo_limit=-1)

    def test_commit_and_finish(self):
        """Test: Batches move between the undo and redo sides"""
        journal = UndoJournal()
        first = journal.capture(BatchKind.ADD, _records(1))
        second = journal.capture(BatchKind.ADD, _records(2))
        journal.commit(first)
        journal.commit(second)

        assert journal.peek_undo() is second
        assert journal.finish_undo() is second
        assert journal.peek_redo() is second
        assert (journal.undo_depth, journal.redo_depth) == (1, 1)

        assert journal.finish_redo() is second
        assert journal.can_redo is False
        assert journal.undo_depth == 2

    def test_commit_clears_redo(self):
        """Test: A new batch drops the redo side"""
        journal = UndoJournal()
        journal.commit(journal.capture(BatchKind.ADD, _records(1)))
        journal.finish_undo()
        assert journal.can_redo is True

        journal.commit(journal.capture(BatchKind.ADD, _records(1)))

        assert journal.can_redo is False
        assert journal.peek_redo() is None

    def test_limit_discards_oldest(self):
        """Test: The oldest batch goes once the limit is exceeded"""
        journal = UndoJournal(undo_limit=2)
        batches = [journal.capture(BatchKind.ADD, _records(n)) for n in (1, 2, 3)]
        for batch in batches:
            journal.commit(batch)

        assert journal.undo_depth == 2
        assert journal.finish_undo() is batches[2]
        assert journal.finish_undo() is batches[1]
        assert journal.can_undo is False

    def test_unlimited_by_default(self):
        """Test: Limit 0 keeps every batch"""
        journal = UndoJournal()
        for n in range(50):
            journal.commit(journal.capture(BatchKind.MODIFY, _records(1)))
        assert journal.undo_depth == 50

    def test_clear(self):
        """Test: clear() empties both sides"""
        journal = UndoJournal()
        journal.commit(journal.capture(BatchKind.ADD, _records(1)))
        journal.commit(journal.capture(BatchKind.ADD, _records(2)))
        journal.finish_undo()

        journal.clear()

        assert journal.can_undo is False
        assert journal.can_redo is False
        assert journal.peek_undo() is None
