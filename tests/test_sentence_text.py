# tests/test_sentence_text.py
"""
Tests for sentence text handling (component_6_sentence_text.py)
"""

import pytest

from component_6_sentence_text import (
    AND,
    BICONDITIONAL,
    CONDITIONAL,
    connective_for_shortcut,
    find_matching_paren,
    normalize_text,
    strip_comment,
    to_ascii,
)


class TestNormalizeText:
    """Tests for normalize_text() and strip_comment()"""

    @pytest.mark.parametrize(
        "typed, stored",
        [
            ("A & B", "A ∧ B"),
            ("A | B", "A ∨ B"),
            ("~A", "¬A"),
            ("A -> B", "A → B"),
            ("A <-> B", "A ↔ B"),
            ("@x P(x)", "∀x P(x)"),
            ("$x P(x)", "∃x P(x)"),
            ("^T & ^F", "⊤ ∧ ⊥"),
            ("x % {}", "x ∈ ∅"),
        ],
    )
    def test_ascii_connectives(self, typed, stored):
        """Test: ASCII forms become glyphs"""
        assert normalize_text(typed) == stored

    def test_glyphs_kept(self):
        """Test: Canonical glyphs pass unchanged"""
        assert normalize_text("A ∧ ¬B") == "A ∧ ¬B"

    def test_comment_dropped(self):
        """Test: Everything from the comment character on is dropped"""
        assert strip_comment("A & B; note") == "A & B"
        assert normalize_text("A & B; note -> x") == "A ∧ B"

    def test_empty(self):
        """Test: None and empty text give empty text"""
        assert normalize_text(None) == ""
        assert normalize_text("") == ""
        assert normalize_text("; only a comment") == ""

    def test_to_ascii(self):
        """Test: Glyphs convert back to their ASCII forms"""
        assert to_ascii("A ↔ (B → ¬C)") == "A <-> (B -> ~C)"
        assert to_ascii(normalize_text("A <-> B")) == "A <-> B"


class TestShortcuts:
    """Tests for connective shortcuts"""

    def test_bound_keys(self):
        """Test: Control-key shortcuts of the toolbar"""
        assert connective_for_shortcut("7") is AND
        assert connective_for_shortcut("4") is CONDITIONAL
        assert connective_for_shortcut("5") is BICONDITIONAL

    def test_unbound_key(self):
        """Test: Other keys insert nothing"""
        assert connective_for_shortcut("q") is None


class TestFindMatchingParen:
    """Tests for find_matching_paren()"""

    def test_forward_and_backward(self):
        """Test: Matches are found in both directions"""
        text = "(A ∧ (B ∨ C))"
        assert find_matching_paren(text, 0) == len(text) - 1
        assert find_matching_paren(text, 5) == 11
        assert find_matching_paren(text, 11) == 5

    def test_unbalanced(self):
        """Test: Unbalanced parentheses give -1"""
        assert find_matching_paren("(A ∧ B", 0) == -1
        assert find_matching_paren("A ∧ B)", 5) == -1

    def test_no_paren(self):
        """Test: Offsets that are not parentheses raise ValueError"""
        with pytest.raises(ValueError):
            find_matching_paren("A ∧ B", 0)
        with pytest.raises(ValueError):
            find_matching_paren("(A)", 7)
