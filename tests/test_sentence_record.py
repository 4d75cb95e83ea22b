# tests/test_sentence_record.py
"""
Tests for sentence records (component_1_sentence_record.py)

Test categories:
1. Rule table and boolean compatibility
2. Index path helpers
3. Reference list serialization
4. Copy / restore
5. Scope helpers
"""

import pytest

from aris_exceptions import IndexPathError
from component_1_sentence_record import (
    Highlight,
    Rule,
    SentenceRecord,
    ValueState,
    index_boundaries,
    make_index_path,
    parse_ref_lines,
    scope_end,
    scope_members,
    serialize_ref_lines,
    validate_index_path,
)


def _record(line, depth, indices, subproof=False):
    return SentenceRecord(
        line_number=line, depth=depth, indices=indices, subproof=subproof
    )


class TestRule:
    """Tests for the Rule enumeration"""

    def test_from_abbreviation(self):
        """Test: Abbreviations are looked up case-insensitively"""
        assert Rule.from_abbreviation("mp") is Rule.MP
        assert Rule.from_abbreviation(" DM ") is Rule.DM
        assert Rule.from_abbreviation("") is Rule.NONE
        assert Rule.from_abbreviation(None) is Rule.NONE

    def test_unknown_abbreviation(self):
        """Test: Unknown abbreviations raise ValueError"""
        with pytest.raises(ValueError):
            Rule.from_abbreviation("zz")

    def test_order(self):
        """Test: Rule order follows the rule table"""
        assert Rule.NONE.order == -1
        assert Rule.MP.order == 0
        assert Rule.MP.order < Rule.DM.order < Rule.EG.order < Rule.SP.order

    @pytest.mark.parametrize(
        "rule", [Rule.MP, Rule.AD, Rule.CD, Rule.IM, Rule.EQ, Rule.EP, Rule.EG, Rule.LM, Rule.SP]
    )
    def test_rules_excluded_in_boolean_mode(self, rule):
        """Test: Inference rules, EQ, EP and EG..SP are not boolean-compatible"""
        assert rule.is_boolean_compatible is False

    @pytest.mark.parametrize(
        "rule", [Rule.NONE, Rule.DM, Rule.AS, Rule.DN, Rule.SB, Rule.UG, Rule.SQ, Rule.BI]
    )
    def test_rules_allowed_in_boolean_mode(self, rule):
        """Test: Remaining rules are boolean-compatible"""
        assert rule.is_boolean_compatible is True


class TestIndexPaths:
    """Tests for index path helpers"""

    def test_make_index_path(self):
        """Test: Boundaries are terminated by the sentinel"""
        assert make_index_path([]) == [-1]
        assert make_index_path([2, 3]) == [2, 3, -1]

    def test_index_boundaries(self):
        """Test: Sentinel is stripped"""
        assert index_boundaries([2, 3, -1]) == [2, 3]
        assert index_boundaries([-1]) == []

    def test_validate_accepts_well_formed_path(self):
        """Test: Path of length depth + 1 ending in the sentinel"""
        validate_index_path([2, -1], 1, line_number=3)
        validate_index_path([-1], 0)

    @pytest.mark.parametrize(
        "indices, depth",
        [
            ([2, -1], 0),  # too long
            ([-1], 1),  # too short
            ([2, 4], 1),  # no sentinel
            ([0, -1], 1),  # boundary below the first line
        ],
    )
    def test_validate_rejects_malformed_path(self, indices, depth):
        """Test: Malformed paths raise IndexPathError"""
        with pytest.raises(IndexPathError):
            validate_index_path(indices, depth)

    def test_boundaries_property(self):
        """Test: Record exposes its boundaries"""
        record = _record(4, 2, [2, 3, -1])
        assert record.boundaries == [2, 3]
        assert record.boundary(1) == 3


class TestReferenceLists:
    """Tests for persisted reference lists"""

    def test_serialize(self):
        """Test: Citation order is kept and the sentinel appended"""
        assert serialize_ref_lines([3, 1]) == [3, 1, -1]
        assert serialize_ref_lines([]) == [-1]

    def test_parse_stops_at_sentinel(self):
        """Test: Reading stops at the first sentinel"""
        assert parse_ref_lines([3, 1, -1, 7]) == [3, 1]

    def test_parse_without_sentinel(self):
        """Test: Lists without sentinel are read in full"""
        assert parse_ref_lines((1, 2)) == [1, 2]
        assert parse_ref_lines(None) == []

    def test_cited_lines_property(self):
        """Test: cited_lines hides the sentinel"""
        record = SentenceRecord(ref_lines=[1, 2, -1])
        assert record.cited_lines == [1, 2]


class TestCopyRestore:
    """Tests for deep copies"""

    def test_defaults(self):
        """Test: A fresh record is unassigned and blank"""
        record = SentenceRecord()
        assert record.line_number == -1
        assert record.is_numbered is False
        assert record.indices == [-1]
        assert record.ref_lines == [-1]
        assert record.value_state is ValueState.BLANK
        assert record.highlight is Highlight.DEFAULT

    def test_ids_are_unique(self):
        """Test: Every record gets its own identity"""
        assert SentenceRecord().id != SentenceRecord().id

    def test_negative_depth_rejected(self):
        """Test: Depth must not be negative"""
        with pytest.raises(ValueError):
            SentenceRecord(depth=-1)

    def test_copy_shares_no_storage(self):
        """Test: Mutating the copy leaves the original untouched"""
        record = SentenceRecord(
            line_number=3, depth=1, indices=[2, -1], references=["x"], ref_lines=[1, -1]
        )
        copy = record.copy()
        copy.indices[0] = 9
        copy.references.append("y")
        copy.ref_lines.insert(0, 2)

        assert copy.id == record.id
        assert record.indices == [2, -1]
        assert record.references == ["x"]
        assert record.ref_lines == [1, -1]

    def test_restore_from(self):
        """Test: restore_from brings back every field"""
        record = SentenceRecord(line_number=2, text="A", rule=Rule.MP)
        saved = record.copy()
        record.line_number = 5
        record.text = "B"
        record.rule = Rule.AD
        record.selected = True

        record.restore_from(saved)

        assert record.line_number == 2
        assert record.text == "A"
        assert record.rule is Rule.MP
        assert record.selected is False

    def test_content_round_trip(self):
        """Test: content() / set_content() cover text, rule and citations"""
        record = SentenceRecord(text="A", rule=Rule.MP, ref_lines=[1, -1])
        other = SentenceRecord()
        other.set_content(record.content())
        assert other.content() == ("A", Rule.MP, [1, -1])


class TestScopes:
    """Tests for subproof scope helpers"""

    @pytest.fixture
    def records(self):
        """Fixture: 1 | 2 opener | 3 | 4 opener | 5 | 6"""
        return [
            _record(1, 0, [-1]),
            _record(2, 1, [2, -1], subproof=True),
            _record(3, 1, [2, -1]),
            _record(4, 1, [4, -1], subproof=True),
            _record(5, 1, [4, -1]),
            _record(6, 0, [-1]),
        ]

    def test_scope_of_opener(self, records):
        """Test: A scope ends before the next sibling subproof"""
        assert scope_end(records, 1) == 3
        assert [r.line_number for r in scope_members(records, 3)] == [4, 5]

    def test_scope_of_plain_line(self, records):
        """Test: A non-opener is its own unit"""
        assert scope_end(records, 2) == 3
        assert scope_members(records, 0) == [records[0]]

    def test_in_scope_of(self, records):
        """Test: Membership is decided by the boundary slot"""
        assert records[2].in_scope_of(records[1])
        assert not records[4].in_scope_of(records[1])
        assert not records[5].in_scope_of(records[1])
        assert not records[1].in_scope_of(records[0])
