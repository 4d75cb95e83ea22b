# tests/test_renumber_engine.py
"""
Tests for the renumber engine (component_2_renumber_engine.py)

Test categories:
1. Index path assignment on insert
2. Renumbering by boundary and delta
3. Derivation and verification
4. Structural checks for insert and remove
5. Scope promotion and demotion
"""

import pytest

from aris_exceptions import IndexPathError, StructureRejected
from component_1_sentence_record import SentenceRecord
from component_2_renumber_engine import RenumberEngine, RenumberEvent


def build(engine, layout):
    """Builds a numbered record list from (depth, subproof) pairs."""
    records = []
    for depth, subproof in layout:
        record = SentenceRecord(depth=depth, subproof=subproof)
        preceding = records[-1] if records else None
        engine.assign_on_insert(record, preceding, len(records) + 1)
        records.append(record)
    return records


def paths(records):
    return [list(record.indices) for record in records]


@pytest.fixture
def engine():
    """Fixture: renumber engine without listeners"""
    return RenumberEngine()


class TestAssignOnInsert:
    """Tests for assign_on_insert()"""

    def test_top_level_lines(self, engine):
        """Test: Top-level lines only carry the sentinel"""
        records = build(engine, [(0, False), (0, False)])
        assert [r.line_number for r in records] == [1, 2]
        assert paths(records) == [[-1], [-1]]

    def test_opener_stores_its_own_line(self, engine):
        """Test: An opener's innermost boundary is its own line number"""
        records = build(engine, [(0, False), (1, True), (1, False)])
        assert paths(records) == [[-1], [2, -1], [2, -1]]

    def test_nested_openers(self, engine):
        """Test: Nested openers extend the enclosing path"""
        records = build(engine, [(0, False), (1, True), (2, True), (2, False)])
        assert records[2].indices == [2, 3, -1]
        assert records[3].indices == [2, 3, -1]

    def test_sibling_opener_starts_fresh_boundary(self, engine):
        """Test: A sibling opener replaces the closed subproof's boundary"""
        records = build(engine, [(0, False), (1, True), (1, False), (1, True)])
        assert records[3].indices == [4, -1]

    def test_returning_to_outer_level(self, engine):
        """Test: A line after a nested subproof keeps only outer boundaries"""
        records = build(
            engine, [(0, False), (1, True), (2, True), (2, False), (1, False)]
        )
        assert records[4].indices == [2, -1]

    def test_assigned_paths_match_derivation(self, engine):
        """Test: Assigned paths agree with the scope-stack derivation"""
        records = build(
            engine,
            [(0, False), (1, True), (2, True), (2, False), (1, True), (1, False), (0, False)],
        )
        assert engine.derive_indices(records) == paths(records)
        engine.verify(records)


class TestRenumberFrom:
    """Tests for renumber_from()"""

    def test_shift_moves_lines_and_boundaries(self, engine):
        """Test: Lines and boundaries at or after the boundary move"""
        records = build(engine, [(0, False), (1, True), (1, False)])
        engine.renumber_from(records, 2, 1)

        assert [r.line_number for r in records] == [1, 3, 4]
        assert paths(records) == [[-1], [3, -1], [3, -1]]

    def test_earlier_boundaries_stay(self, engine):
        """Test: Boundaries before the shift point are unchanged"""
        records = build(engine, [(0, False), (1, True), (1, False), (1, False)])
        engine.renumber_from(records, 4, 1)

        assert [r.line_number for r in records] == [1, 2, 3, 5]
        assert records[3].indices == [2, -1]

    def test_shift_back_restores(self, engine):
        """Test: Shifting forward then back restores every field"""
        records = build(engine, [(0, False), (1, True), (2, True), (2, False)])
        before = [(r.line_number, list(r.indices)) for r in records]

        engine.renumber_from(records, 2, 3)
        engine.renumber_from(records, 5, -3)

        assert [(r.line_number, list(r.indices)) for r in records] == before

    def test_zero_delta_is_a_no_op(self, engine):
        """Test: Delta 0 changes nothing and emits nothing"""
        events = []
        engine.add_listener(events.append)
        records = build(engine, [(0, False), (1, True)])

        assert engine.renumber_from(records, 1, 0) is None
        assert [r.line_number for r in records] == [1, 2]
        assert events == []

    def test_unassigned_records_untouched(self, engine):
        """Test: Records without a line number are never shifted"""
        records = build(engine, [(0, False)])
        goal = SentenceRecord()
        engine.renumber_from(records + [goal], 1, 2)

        assert goal.line_number == -1
        assert goal.indices == [-1]
        assert records[0].line_number == 3

    def test_listeners_receive_events(self, engine):
        """Test: Every non-zero shift is reported"""
        events = []
        engine.add_listener(events.append)
        records = build(engine, [(0, False), (0, False)])

        engine.renumber_from(records, 2, 1)
        engine.remove_listener(events.append)
        engine.renumber_from(records, 3, -1)

        assert events == [RenumberEvent(boundary=2, delta=1)]


class TestVerify:
    """Tests for derive_indices() and verify()"""

    def test_too_deep_rejected(self, engine):
        """Test: A line deeper than its enclosing scopes fails derivation"""
        record = SentenceRecord(line_number=1, depth=1, indices=[1, -1])
        with pytest.raises(IndexPathError):
            engine.derive_indices([record])

    def test_numbering_gap(self, engine):
        """Test: Non-consecutive line numbers fail verification"""
        records = build(engine, [(0, False), (0, False)])
        records[1].line_number = 3
        with pytest.raises(IndexPathError):
            engine.verify(records)

    def test_stale_boundary(self, engine):
        """Test: A boundary naming the wrong opener fails verification"""
        records = build(engine, [(0, False), (1, True), (1, False)])
        records[2].indices = [1, -1]
        with pytest.raises(IndexPathError) as exc_info:
            engine.verify(records)
        assert exc_info.value.context["expected"] == [2, -1]

    def test_missing_sentinel(self, engine):
        """Test: A path without sentinel fails verification"""
        records = build(engine, [(0, False), (1, True)])
        records[1].indices = [2, 2]
        with pytest.raises(IndexPathError):
            engine.verify(records)


class TestCheckInsert:
    """Tests for check_insert()"""

    def test_premise_must_be_top_level(self, engine):
        """Test: Premises sit at depth 0"""
        records = build(engine, [(0, False), (1, True)])
        record = SentenceRecord(depth=1, premise=True)
        with pytest.raises(StructureRejected):
            engine.check_insert(record, records[1], None)

    def test_opener_needs_depth(self, engine):
        """Test: An opener at depth 0 is refused"""
        record = SentenceRecord(depth=0, subproof=True)
        with pytest.raises(StructureRejected):
            engine.check_insert(record, None, None)

    def test_depth_jump_rejected(self, engine):
        """Test: A line may not skip a nesting level"""
        records = build(engine, [(0, False)])
        with pytest.raises(StructureRejected):
            engine.check_insert(SentenceRecord(depth=1), records[0], None)
        with pytest.raises(StructureRejected):
            engine.check_insert(SentenceRecord(depth=2, subproof=True), records[0], None)

    def test_opening_one_level_deeper(self, engine):
        """Test: An opener may sit one level below its predecessor"""
        records = build(engine, [(0, False)])
        engine.check_insert(SentenceRecord(depth=1, subproof=True), records[0], None)

    def test_capture_by_plain_line(self, engine):
        """Test: A shallower line may not split a subproof"""
        records = build(engine, [(0, False), (1, True), (1, False)])
        with pytest.raises(StructureRejected):
            engine.check_insert(SentenceRecord(depth=0), records[1], records[2])

    def test_plain_line_before_opener(self, engine):
        """Test: A plain line may precede an opener one level deeper"""
        records = build(engine, [(0, False), (1, True)])
        engine.check_insert(SentenceRecord(depth=0), records[0], records[1])

    def test_capture_by_new_opener(self, engine):
        """Test: A new opener may not absorb the following member"""
        records = build(engine, [(0, False), (1, True), (1, False), (1, False)])
        with pytest.raises(StructureRejected):
            engine.check_insert(
                SentenceRecord(depth=1, subproof=True), records[2], records[3]
            )

    def test_opener_before_sibling_opener(self, engine):
        """Test: A new opener may precede a sibling opener"""
        records = build(engine, [(0, False), (1, True), (1, False), (1, True)])
        engine.check_insert(
            SentenceRecord(depth=1, subproof=True), records[2], records[3]
        )


class TestCheckRemove:
    """Tests for check_remove()"""

    def test_plain_line(self, engine):
        """Test: Plain lines need no promotion"""
        records = build(engine, [(0, False), (1, True), (1, False)])
        assert engine.check_remove(records, 2) is False

    def test_empty_subproof(self, engine):
        """Test: An opener without members needs no promotion"""
        records = build(engine, [(0, False), (1, True), (0, False)])
        assert engine.check_remove(records, 1) is False

    def test_opener_with_members(self, engine):
        """Test: Removing an opener with members promotes the next line"""
        records = build(engine, [(0, False), (1, True), (1, False)])
        assert engine.check_remove(records, 1) is True

    def test_nested_first_member_rejected(self, engine):
        """Test: A nested opener cannot be promoted"""
        records = build(engine, [(0, False), (1, True), (2, True), (2, False)])
        with pytest.raises(StructureRejected):
            engine.check_remove(records, 1)


class TestScopeHandOver:
    """Tests for promote_scope() and demote_scope()"""

    def test_promote_rewrites_boundaries(self, engine):
        """Test: Survivor becomes opener and members follow it"""
        records = build(
            engine, [(0, False), (1, True), (1, False), (1, False), (0, False)]
        )
        survivor = engine.promote_scope(records, 1)

        assert survivor is records[2]
        assert survivor.subproof is True
        assert paths(records) == [[-1], [2, -1], [3, -1], [3, -1], [-1]]

    def test_demote_reverses_promote(self, engine):
        """Test: Demotion hands the scope back to the original opener"""
        records = build(
            engine, [(0, False), (1, True), (1, False), (1, False), (0, False)]
        )
        before = [(r.subproof, list(r.indices)) for r in records]

        engine.promote_scope(records, 1)
        engine.demote_scope(records, 1)

        assert [(r.subproof, list(r.indices)) for r in records] == before
