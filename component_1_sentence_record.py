"""
component_1_sentence_record.py

Sentence Records for the Aris proof document model

One SentenceRecord is one proof line. It carries the structural fields
(line number, depth, index path, premise/opener flags), the journaled content
(text, rule, persisted reference list) and a few presentation markers that are
never journaled (verdict, highlight, selection).

Index paths:
    A record at depth d has an index path of d + 1 entries. Entries 0..d-1 are
    the line numbers of the opening lines of the enclosing subproofs, read
    outward to inward, and entry d is the -1 sentinel. A subproof opener stores
    its own line number as its innermost boundary.

Functions:
- Rule: Justification rules with their abbreviations
- ValueState / Highlight: Verdict and background markers
- SentenceRecord: The atomic data unit
- Helpers for building, checking and serializing index paths and
  reference lists
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from aris_exceptions import IndexPathError
from common.constants import FIRST_LINE_NUMBER, INDEX_SENTINEL, UNASSIGNED_LINE

# ============================================================================
# Enumerations
# ============================================================================


class Rule(Enum):
    """Justification rules, valued by their toolbar abbreviation."""

    NONE = ""

    # Inference
    MP = "mp"  # Modus Ponens
    AD = "ad"  # Addition
    SM = "sm"  # Simplification
    CN = "cn"  # Conjunction
    HS = "hs"  # Hypothetical Syllogism
    DS = "ds"  # Disjunctive Syllogism
    EX = "ex"  # Excluded Middle
    CD = "cd"  # Constructive Dilemma

    # Equivalence
    IM = "im"  # Implication
    DM = "dm"  # DeMorgan
    AS = "as"  # Association
    CO = "co"  # Commutativity
    ID = "id"  # Idempotence
    DT = "dt"  # Distribution
    EQ = "eq"  # Equivalence
    DN = "dn"  # Double Negation
    EP = "ep"  # Exportation
    SB = "sb"  # Subsumption

    # Predicate
    UG = "ug"  # Universal Generalization
    UI = "ui"  # Universal Instantiation
    EG = "eg"  # Existential Generalization
    EI = "ei"  # Existential Instantiation
    BV = "bv"  # Bound Variable
    NQ = "nq"  # Null Quantifier
    PR = "pr"  # Prenex
    II = "ii"  # Identity
    FV = "fv"  # Free Variable

    # Miscellaneous
    LM = "lm"  # Lemma
    SP = "sp"  # Subproof
    SQ = "sq"  # Sequence
    IN = "in"  # Induction

    # Boolean
    BI = "bi"  # Boolean Identity
    BN = "bn"  # Boolean Negation
    BD = "bd"  # Boolean Dominance
    SN = "sn"  # Symbol Negation

    @property
    def order(self) -> int:
        """Position in the rule table; NONE has no position (-1)."""
        if self is Rule.NONE:
            return -1
        return _RULE_ORDER.index(self)

    @property
    def label(self) -> str:
        """Abbreviation shown next to a line, empty for NONE."""
        return self.value

    @property
    def is_boolean_compatible(self) -> bool:
        """
        Whether the rule may be used while boolean mode is active.

        Inference rules before DeMorgan, Equivalence, Exportation and the
        block from Existential Generalization through Subproof are excluded.
        """
        if self is Rule.NONE:
            return True
        order = self.order
        if order < Rule.DM.order or self in (Rule.EQ, Rule.EP):
            return False
        return not (Rule.EG.order <= order <= Rule.SP.order)

    @classmethod
    def from_abbreviation(cls, text: Optional[str]) -> "Rule":
        """
        Looks up a rule by abbreviation (case-insensitive).

        Raises:
            ValueError: Unknown abbreviation
        """
        if text is None:
            return cls.NONE
        return cls(text.strip().lower())


# Declaration order minus NONE
_RULE_ORDER: List[Rule] = [rule for rule in Rule if rule is not Rule.NONE]


class ValueState(Enum):
    """Verification verdict marker written by the verification collaborator."""

    BLANK = "blank"  # Not checked since the last change
    TRUE = "true"  # Rule correctly applied
    FALSE = "false"  # Rule incorrectly applied
    ERROR = "error"  # Checker failed (e.g. unparsable text)
    BOOL = "bool"  # Rule not usable in boolean mode
    REF = "ref"  # Line is cited by the focused line


class Highlight(Enum):
    """Background state of a line."""

    DEFAULT = "default"
    FOCUS = "focus"
    REFERENCE = "reference"
    SELECTED = "selected"


# ============================================================================
# Index path helpers
# ============================================================================


def make_index_path(boundaries: Iterable[int]) -> List[int]:
    """Builds a sentinel-terminated index path from boundary line numbers."""
    path = list(boundaries)
    path.append(INDEX_SENTINEL)
    return path


def index_boundaries(indices: List[int]) -> List[int]:
    """Returns the boundary entries of an index path, without the sentinel."""
    try:
        end = indices.index(INDEX_SENTINEL)
    except ValueError:
        end = len(indices)
    return list(indices[:end])


def validate_index_path(
    indices: List[int], depth: int, line_number: Optional[int] = None
) -> None:
    """
    Checks the shape of an index path.

    Args:
        indices: Index path to check
        depth: Depth of the owning record
        line_number: Line number used in the error context

    Raises:
        IndexPathError: Wrong length, misplaced sentinel or non-positive boundary
    """
    if len(indices) != depth + 1 or indices[depth] != INDEX_SENTINEL:
        raise IndexPathError(
            "Index path does not end with the sentinel at its depth",
            line_number=line_number,
            actual=list(indices),
        )
    for slot in indices[:depth]:
        if slot < FIRST_LINE_NUMBER:
            raise IndexPathError(
                "Index path holds a boundary below the first line",
                line_number=line_number,
                actual=list(indices),
            )


def serialize_ref_lines(lines: Iterable[int]) -> List[int]:
    """Serializes cited line numbers as an ordered, sentinel-terminated list."""
    return make_index_path(lines)


def parse_ref_lines(serialized: Optional[Iterable[int]]) -> List[int]:
    """
    Reads cited line numbers from a persisted list.

    Stops at the first sentinel; a list without a sentinel is read in full.
    """
    if serialized is None:
        return []
    lines = []
    for value in serialized:
        if value == INDEX_SENTINEL:
            break
        lines.append(int(value))
    return lines


def new_record_id() -> str:
    """Creates a fresh, position-independent record identity."""
    return uuid.uuid4().hex


# ============================================================================
# SentenceRecord
# ============================================================================


@dataclass
class SentenceRecord:
    """
    One proof line.

    Attributes:
        id: Stable identity, independent of position
        line_number: 1-based line number, UNASSIGNED_LINE outside the numbered proof
        depth: Nesting level (0 = top level)
        indices: Sentinel-terminated index path of length depth + 1
        premise: Whether the line is a premise of the whole proof
        subproof: Whether the line opens a subproof
        rule: Justification rule
        text: Sentence text (comments already stripped)
        references: Cited record identities in citation order
        ref_lines: Persisted cited line numbers, sentinel-terminated
        value_state: Verification verdict (presentation, not journaled)
        highlight: Background state (presentation, not journaled)
        is_reference: Highlighted as cited by the focused line
        selected: Member of the document selection
    """

    id: str = field(default_factory=new_record_id)
    line_number: int = UNASSIGNED_LINE
    depth: int = 0
    indices: List[int] = field(default_factory=lambda: [INDEX_SENTINEL])
    premise: bool = False
    subproof: bool = False
    rule: Rule = Rule.NONE
    text: str = ""
    references: List[str] = field(default_factory=list)
    ref_lines: List[int] = field(default_factory=lambda: [INDEX_SENTINEL])
    value_state: ValueState = ValueState.BLANK
    highlight: Highlight = Highlight.DEFAULT
    is_reference: bool = False
    selected: bool = False

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")

    @property
    def is_numbered(self) -> bool:
        """Whether the record takes part in renumbering."""
        return self.line_number >= FIRST_LINE_NUMBER

    @property
    def boundaries(self) -> List[int]:
        return index_boundaries(self.indices)

    @property
    def cited_lines(self) -> List[int]:
        """Persisted cited line numbers without the sentinel."""
        return parse_ref_lines(self.ref_lines)

    def boundary(self, level: int) -> int:
        """Boundary line of the enclosing subproof at the given level."""
        return self.indices[level]

    def in_scope_of(self, opener: "SentenceRecord") -> bool:
        """Whether this record lies inside the subproof opened by opener."""
        level = opener.depth - 1
        if level < 0 or self.depth <= level:
            return False
        return self.indices[level] == opener.line_number

    def content(self) -> Tuple[str, Rule, List[int]]:
        """The journaled content: text, rule and persisted reference list."""
        return self.text, self.rule, list(self.ref_lines)

    def set_content(self, content: Tuple[str, Rule, List[int]]) -> None:
        text, rule, ref_lines = content
        self.text = text
        self.rule = rule
        self.ref_lines = list(ref_lines)

    def copy(self) -> "SentenceRecord":
        """Deep copy sharing no storage with this record."""
        return SentenceRecord(
            id=self.id,
            line_number=self.line_number,
            depth=self.depth,
            indices=list(self.indices),
            premise=self.premise,
            subproof=self.subproof,
            rule=self.rule,
            text=self.text,
            references=list(self.references),
            ref_lines=list(self.ref_lines),
            value_state=self.value_state,
            highlight=self.highlight,
            is_reference=self.is_reference,
            selected=self.selected,
        )

    def restore_from(self, saved: "SentenceRecord") -> None:
        """Overwrites every field with the values of a saved copy."""
        self.id = saved.id
        self.line_number = saved.line_number
        self.depth = saved.depth
        self.indices = list(saved.indices)
        self.premise = saved.premise
        self.subproof = saved.subproof
        self.rule = saved.rule
        self.text = saved.text
        self.references = list(saved.references)
        self.ref_lines = list(saved.ref_lines)
        self.value_state = saved.value_state
        self.highlight = saved.highlight
        self.is_reference = saved.is_reference
        self.selected = saved.selected

    def __str__(self) -> str:
        rule = f" [{self.rule.label}]" if self.rule is not Rule.NONE else ""
        return f"{self.line_number}: {'  ' * self.depth}{self.text}{rule}"


# ============================================================================
# Scope helpers
# ============================================================================


def scope_end(records: List[SentenceRecord], position: int) -> int:
    """
    Returns the position one past the last member of a subproof.

    Members follow their opener contiguously while they sit at the opener's
    depth or deeper and carry the opener's line number as boundary. For a
    record that does not open a subproof the unit is the record alone.
    """
    opener = records[position]
    end = position + 1
    if not opener.subproof:
        return end
    while end < len(records) and records[end].in_scope_of(opener):
        end += 1
    return end


def scope_members(
    records: List[SentenceRecord], position: int
) -> List[SentenceRecord]:
    """The opener at position followed by every member of its subproof."""
    return records[position : scope_end(records, position)]
