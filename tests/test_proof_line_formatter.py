# tests/test_proof_line_formatter.py
"""
Tests for proof line labels (ui/widgets/proof_line_formatter.py)
"""

from component_1_sentence_record import Highlight, Rule, SentenceRecord, ValueState
from ui.widgets.proof_line_formatter import ProofLineFormatter


class TestLabels:
    """Tests for line, rule and citation labels"""

    def test_format_line(self):
        """Test: Number, indentation, text, rule and citations"""
        record = SentenceRecord(
            line_number=4, depth=1, text="P → Q", rule=Rule.II, ref_lines=[2, 3, -1]
        )
        assert ProofLineFormatter.format_line(record) == "  4  | P → Q    ii 2, 3"

    def test_format_line_without_rule(self):
        """Test: Lines without rule show no justification"""
        record = SentenceRecord(line_number=1, text="A")
        assert ProofLineFormatter.format_line(record) == "  1  A"

    def test_unnumbered_line(self):
        """Test: Goal lines have no line label"""
        assert ProofLineFormatter.line_label(SentenceRecord(text="G")) == ""

    def test_verdicts_and_colors(self):
        """Test: Verdict symbols and theme colors"""
        assert ProofLineFormatter.verdict_symbol(ValueState.TRUE) == "✓"
        assert ProofLineFormatter.verdict_symbol(ValueState.BLANK) == ""
        assert ProofLineFormatter.background_color(Highlight.FOCUS, "light") == "#dde8f5"
        assert ProofLineFormatter.background_color(
            Highlight.DEFAULT, "unknown"
        ) == ProofLineFormatter.background_color(Highlight.DEFAULT, "dark")


class TestMenuLabels:
    """Tests for "N - name" menu labels"""

    def test_parse(self):
        """Test: Labels split into line number and name"""
        assert ProofLineFormatter.parse_menu_label("12 - lemma a") == (12, "lemma a")
        assert ProofLineFormatter.parse_menu_label("lemma") is None

    def test_relabel(self):
        """Test: Only labels at or after the boundary move"""
        labels = ["1 - a", "3 - b", "5 - c", "custom"]
        assert ProofLineFormatter.relabel_menu_labels(labels, 3, 2) == [
            "1 - a",
            "5 - b",
            "7 - c",
            "custom",
        ]

    def test_relabel_zero_delta(self):
        """Test: Delta 0 keeps every label"""
        labels = ["3 - b"]
        assert ProofLineFormatter.relabel_menu_labels(labels, 1, 0) == labels
