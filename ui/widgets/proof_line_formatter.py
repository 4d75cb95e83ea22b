"""
ui.widgets.proof_line_formatter

Text formatting for proof line widgets.

Produces the line number, rule and citation labels shown next to each proof
line, the verdict symbols and background colors, and keeps "N - name" menu
labels in step with renumbering.

WARNING: Symbols returned here are for Qt rendering. Log messages use the
plain line numbers instead.
"""

import re
from typing import Dict, List, Optional, Tuple

from component_1_sentence_record import Highlight, SentenceRecord, ValueState

_MENU_LABEL = re.compile(r"^(\d+) - (.*)$")


class ProofLineFormatter:
    """
    Formatter for proof line labels.

    Provides methods for:
    - Line number and rule labels
    - Citation lists
    - Verdict symbols and background colors
    - Lemma menu labels that follow renumbering
    """

    VERDICT_SYMBOLS: Dict[ValueState, str] = {
        ValueState.BLANK: "",
        ValueState.TRUE: "✓",
        ValueState.FALSE: "✗",
        ValueState.ERROR: "!",
        ValueState.BOOL: "B",
        ValueState.REF: "←",
    }

    BACKGROUND_COLORS: Dict[str, Dict[Highlight, str]] = {
        "dark": {
            Highlight.DEFAULT: "#2b2b2b",
            Highlight.FOCUS: "#3c4a5c",
            Highlight.REFERENCE: "#4a5c3c",
            Highlight.SELECTED: "#5c3c4a",
        },
        "light": {
            Highlight.DEFAULT: "#ffffff",
            Highlight.FOCUS: "#dde8f5",
            Highlight.REFERENCE: "#e2f5dd",
            Highlight.SELECTED: "#f5dde8",
        },
    }

    @staticmethod
    def line_label(record: SentenceRecord) -> str:
        """Line number as shown in the gutter, empty for unnumbered lines."""
        return str(record.line_number) if record.is_numbered else ""

    @staticmethod
    def rule_label(record: SentenceRecord) -> str:
        return record.rule.label

    @staticmethod
    def citation_label(record: SentenceRecord) -> str:
        """Comma-separated cited line numbers in citation order."""
        return ", ".join(str(n) for n in record.cited_lines)

    @classmethod
    def format_line(cls, record: SentenceRecord) -> str:
        """
        One-line text rendering of a record.

        Example:
            "4  | P → Q    ii 2, 3"
        """
        indent = "| " * record.depth
        text = f"{cls.line_label(record):>3}  {indent}{record.text}"
        rule = cls.rule_label(record)
        if rule:
            citations = cls.citation_label(record)
            text += f"    {rule} {citations}".rstrip()
        return text

    @classmethod
    def verdict_symbol(cls, value_state: ValueState) -> str:
        return cls.VERDICT_SYMBOLS.get(value_state, "")

    @classmethod
    def background_color(cls, highlight: Highlight, theme: str = "dark") -> str:
        palette = cls.BACKGROUND_COLORS.get(theme, cls.BACKGROUND_COLORS["dark"])
        return palette[highlight]

    # ------------------------------------------------------------------
    # Menu labels
    # ------------------------------------------------------------------

    @staticmethod
    def menu_label(line_number: int, name: str) -> str:
        return f"{line_number} - {name}"

    @staticmethod
    def parse_menu_label(label: str) -> Optional[Tuple[int, str]]:
        """Splits "N - name" into (N, name); None for other labels."""
        match = _MENU_LABEL.match(label)
        if not match:
            return None
        return int(match.group(1)), match.group(2)

    @classmethod
    def relabel_menu_labels(
        cls, labels: List[str], boundary: int, delta: int
    ) -> List[str]:
        """
        Shifts the line number of every "N - name" label with N >= boundary.

        Args:
            labels: Current menu labels
            boundary: First line number affected by the renumbering
            delta: Shift applied to the line numbers

        Returns:
            New label list; labels without a line number are kept as they are
        """
        relabeled = []
        for label in labels:
            parsed = cls.parse_menu_label(label)
            if parsed is None or parsed[0] < boundary or delta == 0:
                relabeled.append(label)
                continue
            line_number, name = parsed
            relabeled.append(cls.menu_label(line_number + delta, name))
        return relabeled
