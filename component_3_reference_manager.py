"""
component_3_reference_manager.py

Reference Manager for the Aris proof document model

Maintains justification citations between records together with their
highlight and selection consequences.

Citations are stored twice on the citing record:
- references: record identities in citation order (live back-links)
- ref_lines: the persisted, sentinel-terminated line number list

Identities are validated against a live-identity table, so a citation of a
removed record fails a lookup instead of silently resolving to another line.
After every edit the persisted list is rewritten from the identities; after
load and undo/redo the identities are rebuilt from the persisted list.

Entire-subproof references:
    A line outside a closed subproof cannot cite a single line inside it. It
    cites the whole subproof instead, represented by the subproof's opener.
    Highlighting and selection of such a unit cover the opener and every
    member of its subproof.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from aris_exceptions import ReferenceRejected, StaleReferenceError
from common.constants import FIRST_LINE_NUMBER, INDEX_SENTINEL
from component_1_sentence_record import (
    Highlight,
    Rule,
    SentenceRecord,
    scope_end,
    serialize_ref_lines,
)
from component_10_logging_config import get_logger

logger = get_logger(__name__)


class SiblingScopePolicy(Enum):
    """
    Resolution of a citation into a closed subproof when citing and cited
    line sit at the same depth at the first index mismatch.
    """

    ENTIRE_SUBPROOF = "entire_subproof"  # Cite the whole sibling subproof
    REJECT = "reject"  # Refuse the citation


class ReferenceKind(Enum):
    ORDINARY = "ordinary"
    ENTIRE_SUBPROOF = "entire_subproof"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ReferenceOutcome:
    """
    Result of can_select_as_ref().

    Attributes:
        kind: Ordinary, entire-subproof or rejected
        line_number: Line of the record to cite (the candidate itself, or the
            opener of the enclosing closed subproof); 0 when rejected
        reason: Why the citation was rejected
    """

    kind: ReferenceKind
    line_number: int = 0
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.kind is not ReferenceKind.REJECTED

    @property
    def entire(self) -> bool:
        return self.kind is ReferenceKind.ENTIRE_SUBPROOF


@dataclass(frozen=True)
class ToggleResult:
    """Result of toggle_reference()."""

    added: bool
    target: SentenceRecord
    entire: bool


@dataclass
class RuleToggleState:
    """
    State of the rule toolbar, threaded through focus changes.

    Attributes:
        active_rule: Rule shown as active for the focused line
        user_toggled: Whether the user picked the rule on the toolbar rather
            than it being shown because a line was focused
    """

    active_rule: Rule = Rule.NONE
    user_toggled: bool = False

    @classmethod
    def for_record(cls, record: Optional[SentenceRecord]) -> "RuleToggleState":
        """Toolbar state after focusing a record (nothing active for None)."""
        if record is None:
            return cls()
        return cls(active_rule=record.rule, user_toggled=False)

    def toggle(self, rule: Rule) -> "RuleToggleState":
        """Toolbar state after the user clicks a rule button."""
        if self.active_rule is rule:
            return RuleToggleState()
        return RuleToggleState(active_rule=rule, user_toggled=True)


class ReferenceManager:
    """
    Maintains citations, reference highlights and selection propagation.

    All operations take the document's ordered record list; the manager keeps
    no record state of its own.
    """

    def __init__(
        self, sibling_policy: SiblingScopePolicy = SiblingScopePolicy.ENTIRE_SUBPROOF
    ):
        self.sibling_policy = sibling_policy

    # ------------------------------------------------------------------
    # Identity lookups
    # ------------------------------------------------------------------

    @staticmethod
    def live_table(records: List[SentenceRecord]) -> Dict[str, SentenceRecord]:
        return {record.id: record for record in records}

    def resolve(self, records: List[SentenceRecord], record_id: str) -> SentenceRecord:
        """
        Looks up a live record by identity.

        Raises:
            StaleReferenceError: No live record carries the identity
        """
        for record in records:
            if record.id == record_id:
                return record
        raise StaleReferenceError(
            "Reference names a record that is no longer live", record_id=record_id
        )

    @staticmethod
    def find_line(
        records: List[SentenceRecord], line_number: int
    ) -> Optional[SentenceRecord]:
        for record in records:
            if record.line_number == line_number:
                return record
        return None

    # ------------------------------------------------------------------
    # Citation policy
    # ------------------------------------------------------------------

    def can_select_as_ref(
        self, citing: SentenceRecord, candidate: SentenceRecord
    ) -> ReferenceOutcome:
        """
        Decides whether citing may cite candidate, and what it would cite.

        Walks both index paths while they agree. If the candidate's path ends
        there, the candidate lies in a scope that is still open for the citing
        line and is cited directly. Otherwise the candidate sits inside a
        closed subproof whose opener is the first differing boundary, and the
        whole subproof is cited.

        Returns:
            ReferenceOutcome (never raises)
        """
        if (
            candidate.line_number < FIRST_LINE_NUMBER
            or candidate.line_number >= citing.line_number
        ):
            return ReferenceOutcome(
                ReferenceKind.REJECTED, reason="only earlier lines can be cited"
            )

        i = 0
        while (
            citing.indices[i] != INDEX_SENTINEL
            and candidate.indices[i] != INDEX_SENTINEL
            and citing.indices[i] == candidate.indices[i]
        ):
            i += 1

        if candidate.indices[i] == INDEX_SENTINEL:
            return ReferenceOutcome(ReferenceKind.ORDINARY, candidate.line_number)

        boundary = candidate.indices[i]
        if (
            citing.indices[i] != INDEX_SENTINEL
            and citing.depth == candidate.depth
            and self.sibling_policy is SiblingScopePolicy.REJECT
        ):
            return ReferenceOutcome(
                ReferenceKind.REJECTED,
                reason="lines of a sibling subproof cannot be cited",
            )
        return ReferenceOutcome(ReferenceKind.ENTIRE_SUBPROOF, boundary)

    @staticmethod
    def is_entire_reference(citing: SentenceRecord, cited: SentenceRecord) -> bool:
        """
        Whether an existing citation of an opener stands for its whole subproof.

        True when the citing line is outside the opener's subproof, False when
        it cites the opener as an assumption from inside.
        """
        if not cited.subproof:
            return False
        if cited.depth > citing.depth:
            return True
        level = cited.depth - 1
        return citing.indices[level] != cited.line_number

    # ------------------------------------------------------------------
    # Citation edits
    # ------------------------------------------------------------------

    def add_reference(
        self,
        citing: SentenceRecord,
        cited: SentenceRecord,
        records: List[SentenceRecord],
    ) -> bool:
        """
        Adds cited to citing's references.

        Returns:
            False if the citation was already present

        Raises:
            ReferenceRejected: citing is a premise or cited is not earlier
        """
        if citing.premise:
            raise ReferenceRejected(
                "Premises do not cite other lines",
                citing_line=citing.line_number,
                cited_line=cited.line_number,
            )
        if (
            cited.line_number < FIRST_LINE_NUMBER
            or cited.line_number >= citing.line_number
        ):
            raise ReferenceRejected(
                "Only earlier lines can be cited",
                citing_line=citing.line_number,
                cited_line=cited.line_number,
            )
        if cited.id in citing.references:
            return False

        citing.references.append(cited.id)
        self.serialize(citing, records)
        logger.debug(
            "Reference added",
            extra={"citing": citing.line_number, "cited": cited.line_number},
        )
        return True

    def remove_reference(
        self,
        citing: SentenceRecord,
        cited: SentenceRecord,
        records: List[SentenceRecord],
    ) -> bool:
        """
        Removes cited from citing's references.

        Returns:
            False if citing did not cite it
        """
        if cited.id not in citing.references:
            return False
        citing.references.remove(cited.id)
        self.serialize(citing, records)
        logger.debug(
            "Reference removed",
            extra={"citing": citing.line_number, "cited": cited.line_number},
        )
        return True

    def toggle_reference(
        self,
        focused: SentenceRecord,
        candidate: SentenceRecord,
        records: List[SentenceRecord],
    ) -> ToggleResult:
        """
        Adds or removes the citation of candidate's unit from focused.

        Raises:
            ReferenceRejected: The candidate cannot be cited from focused
            StaleReferenceError: The resolved opener is not live
        """
        outcome = self.can_select_as_ref(focused, candidate)
        if not outcome.accepted:
            raise ReferenceRejected(
                f"Citation refused: {outcome.reason}",
                citing_line=focused.line_number,
                cited_line=candidate.line_number,
            )

        target = candidate
        if outcome.line_number != candidate.line_number:
            target = self.find_line(records, outcome.line_number)
            if target is None:
                raise StaleReferenceError(
                    "Subproof opener of the cited line is missing",
                    context={"line_number": outcome.line_number},
                )

        if target.id in focused.references:
            self.remove_reference(focused, target, records)
            self.set_reference_highlight(records, target, False, outcome.entire)
            added = False
        else:
            self.add_reference(focused, target, records)
            self.set_reference_highlight(records, target, True, outcome.entire)
            added = True

        logger.info(
            "Reference toggled",
            extra={
                "citing": focused.line_number,
                "cited": target.line_number,
                "entire": outcome.entire,
                "added": added,
            },
        )
        return ToggleResult(added=added, target=target, entire=outcome.entire)

    def serialize(self, citing: SentenceRecord, records: List[SentenceRecord]) -> None:
        """
        Rewrites citing's persisted list from its identities.

        Raises:
            StaleReferenceError: An identity does not resolve
        """
        table = self.live_table(records)
        lines = []
        for record_id in citing.references:
            cited = table.get(record_id)
            if cited is None:
                raise StaleReferenceError(
                    "Reference names a record that is no longer live",
                    record_id=record_id,
                    context={"citing_line": citing.line_number},
                )
            lines.append(cited.line_number)
        citing.ref_lines = serialize_ref_lines(lines)

    def reserialize_all(self, records: List[SentenceRecord]) -> None:
        for record in records:
            self.serialize(record, records)

    def clear_incoming(
        self, target: SentenceRecord, records: List[SentenceRecord]
    ) -> Dict[str, List[int]]:
        """
        Removes every citation of target.

        Returns:
            Identity of each citing record mapped to its persisted list
            before the removal
        """
        cleared = {}
        for record in records:
            if target.id in record.references:
                cleared[record.id] = list(record.ref_lines)
                self.remove_reference(record, target, records)
        if cleared:
            logger.debug(
                "Incoming references cleared",
                extra={"target": target.line_number, "citers": len(cleared)},
            )
        return cleared

    def citers_of(
        self, target: SentenceRecord, records: List[SentenceRecord]
    ) -> List[SentenceRecord]:
        return [record for record in records if target.id in record.references]

    # ------------------------------------------------------------------
    # Resync
    # ------------------------------------------------------------------

    def resync_record(
        self, record: SentenceRecord, records: List[SentenceRecord]
    ) -> None:
        """
        Rebuilds one record's identities from its persisted list.

        Every cited number goes through can_select_as_ref(): a line inside a
        closed subproof is replaced by the subproof's opener, and numbers that
        are refused or name no earlier live line are dropped with a warning.
        The persisted list is rewritten to match.
        """
        by_line = {
            other.line_number: other
            for other in records
            if FIRST_LINE_NUMBER <= other.line_number < record.line_number
        }
        references = []
        kept = []
        dropped = []
        for line_number in record.cited_lines:
            cited = by_line.get(line_number)
            target = None
            if cited is not None:
                outcome = self.can_select_as_ref(record, cited)
                if outcome.accepted:
                    target = by_line.get(outcome.line_number)
            if target is None:
                dropped.append(line_number)
                continue
            if target is not cited:
                logger.debug(
                    "Citation resolved to its subproof opener",
                    extra={
                        "citing": record.line_number,
                        "cited": line_number,
                        "opener": target.line_number,
                    },
                )
            if target.id not in references:
                references.append(target.id)
                kept.append(target.line_number)

        record.references = references
        record.ref_lines = serialize_ref_lines(kept)
        if dropped:
            logger.warning(
                "Dropped citations that cannot be cited from this line",
                extra={"line_number": record.line_number, "dropped": dropped},
            )

    def resync(self, records: List[SentenceRecord]) -> None:
        """Rebuilds every record's identities from its persisted list."""
        for record in records:
            self.resync_record(record, records)

    # ------------------------------------------------------------------
    # Highlighting and selection
    # ------------------------------------------------------------------

    @staticmethod
    def _resting_highlight(record: SentenceRecord) -> Highlight:
        return Highlight.SELECTED if record.selected else Highlight.DEFAULT

    def unit(
        self, records: List[SentenceRecord], target: SentenceRecord, entire: bool
    ) -> List[SentenceRecord]:
        """The records covered by citing or selecting target."""
        position = records.index(target)
        if not entire:
            return [target]
        return records[position : scope_end(records, position)]

    def set_reference_highlight(
        self,
        records: List[SentenceRecord],
        target: SentenceRecord,
        on: bool,
        entire: bool,
    ) -> None:
        for member in self.unit(records, target, entire):
            member.highlight = Highlight.REFERENCE if on else self._resting_highlight(
                member
            )
        target.is_reference = on

    def set_focus_highlights(
        self, focused: SentenceRecord, records: List[SentenceRecord]
    ) -> None:
        """Highlights the focused line and every unit it cites."""
        for record_id in focused.references:
            cited = self.resolve(records, record_id)
            entire = self.is_entire_reference(focused, cited)
            self.set_reference_highlight(records, cited, True, entire)
        focused.highlight = Highlight.FOCUS

    def clear_focus_highlights(
        self, focused: SentenceRecord, records: List[SentenceRecord]
    ) -> None:
        """Inverse of set_focus_highlights()."""
        for record_id in focused.references:
            cited = self.resolve(records, record_id)
            entire = self.is_entire_reference(focused, cited)
            self.set_reference_highlight(records, cited, False, entire)
        focused.highlight = self._resting_highlight(focused)

    def toggle_selection(
        self, record: SentenceRecord, records: List[SentenceRecord]
    ) -> bool:
        """
        Flips the selection of a record and, for an opener, of its subproof.

        Returns:
            The new selection state
        """
        selected = not record.selected
        for member in self.unit(records, record, record.subproof):
            member.selected = selected
            if member.highlight in (Highlight.DEFAULT, Highlight.SELECTED):
                member.highlight = self._resting_highlight(member)
        logger.debug(
            "Selection toggled",
            extra={"line_number": record.line_number, "selected": selected},
        )
        return selected
