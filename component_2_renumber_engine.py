"""
component_2_renumber_engine.py

Renumber Engine for the Aris proof document model

Keeps line numbers and index paths consistent with the document structure
after insertion, deletion or a change of scope.

Functions:
- assign_on_insert(): Index path of a newly inserted record
- renumber_from(): Shift line numbers and boundary markers by a delta
- derive_indices() / verify(): Recompute index paths with a scope stack and
  compare them against the stored ones
- check_insert() / check_remove(): Structural rules for edits
- promote_scope() / demote_scope(): Hand a subproof over to a new opener
  and back

Listeners registered with add_listener() receive a RenumberEvent for every
non-zero shift.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from aris_exceptions import AllocationFailure, IndexPathError, StructureRejected
from common.constants import FIRST_LINE_NUMBER, INDEX_SENTINEL
from component_1_sentence_record import (
    SentenceRecord,
    make_index_path,
    scope_end,
    validate_index_path,
)
from component_10_logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenumberEvent:
    """A shift of every line number and boundary >= boundary by delta."""

    boundary: int
    delta: int


RenumberListener = Callable[[RenumberEvent], None]


class RenumberEngine:
    """
    Computes and repairs line numbers and index paths.

    The engine holds no records itself; every operation works on the ordered
    record list owned by the document.
    """

    def __init__(self):
        self._listeners: List[RenumberListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: RenumberListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: RenumberListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: RenumberEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    def assign_on_insert(
        self,
        record: SentenceRecord,
        preceding: Optional[SentenceRecord],
        line_number: int,
    ) -> None:
        """
        Assigns line number and index path to a record about to be inserted.

        The enclosing boundaries are copied from the preceding record. An
        opener inherits one level less and adds its own line number as the
        innermost boundary.

        Args:
            record: Record being inserted
            preceding: Record it will follow, None at the top of the proof
            line_number: Line number the record will carry

        Raises:
            AllocationFailure: Index buffer could not be allocated
        """
        inherited = record.depth - 1 if record.subproof else record.depth
        available = preceding.depth if preceding is not None else 0
        copy_end = min(inherited, available)

        try:
            boundaries = list(preceding.indices[:copy_end]) if preceding else []
            if record.subproof:
                boundaries.append(line_number)
            indices = make_index_path(boundaries)
        except MemoryError as e:
            raise AllocationFailure(
                "Index path allocation failed",
                operation="assign_on_insert",
                original_exception=e,
            ) from e

        record.line_number = line_number
        record.indices = indices

        logger.debug(
            "Index path assigned",
            extra={"line_number": line_number, "indices": indices},
        )

    def renumber_from(
        self, records: List[SentenceRecord], boundary: int, delta: int
    ) -> Optional[RenumberEvent]:
        """
        Shifts line numbers and boundary markers at or after a boundary.

        Every numbered record whose line number is >= boundary moves by delta.
        Every index entry >= boundary in any numbered record moves by delta,
        so boundary markers keep naming the same logical line. Unassigned
        records (line number < 1) are left alone.

        Args:
            records: Ordered record list
            boundary: First line number affected
            delta: Amount to add (0 leaves everything unchanged)

        Returns:
            RenumberEvent that was emitted, None for delta 0
        """
        if delta == 0:
            return None

        for record in records:
            if not record.is_numbered:
                continue
            if record.line_number >= boundary:
                record.line_number += delta
            record.indices = [
                slot + delta if slot != INDEX_SENTINEL and slot >= boundary else slot
                for slot in record.indices
            ]

        event = RenumberEvent(boundary=boundary, delta=delta)
        logger.debug(
            "Renumbered", extra={"boundary": boundary, "delta": delta}
        )
        self._notify(event)
        return event

    # ------------------------------------------------------------------
    # Derivation and verification
    # ------------------------------------------------------------------

    def derive_indices(self, records: List[SentenceRecord]) -> List[List[int]]:
        """
        Recomputes every index path from order, depth and opener flags.

        Raises:
            IndexPathError: A record is deeper than its enclosing scopes allow
        """
        stack: List[int] = []
        derived = []
        for record in records:
            inherited = record.depth - 1 if record.subproof else record.depth
            if inherited > len(stack) or (record.subproof and record.depth < 1):
                raise IndexPathError(
                    "Record is deeper than its enclosing subproofs",
                    line_number=record.line_number,
                    expected=make_index_path(stack),
                    actual=list(record.indices),
                )
            stack = stack[:inherited]
            if record.subproof:
                stack.append(record.line_number)
            derived.append(make_index_path(stack))
        return derived

    def verify(self, records: List[SentenceRecord]) -> None:
        """
        Checks the numbering and every stored index path.

        Raises:
            IndexPathError: Numbering gap or a stored path that disagrees
                with the scope structure
        """
        derived = self.derive_indices(records)
        for position, (record, expected) in enumerate(zip(records, derived)):
            if record.line_number != position + FIRST_LINE_NUMBER:
                raise IndexPathError(
                    "Line numbers are not consecutive",
                    line_number=record.line_number,
                    context={"position": position},
                )
            validate_index_path(record.indices, record.depth, record.line_number)
            if record.indices != expected:
                raise IndexPathError(
                    "Stored index path disagrees with the subproof structure",
                    line_number=record.line_number,
                    expected=expected,
                    actual=list(record.indices),
                )

    # ------------------------------------------------------------------
    # Structural rules
    # ------------------------------------------------------------------

    def check_insert(
        self,
        record: SentenceRecord,
        preceding: Optional[SentenceRecord],
        following: Optional[SentenceRecord],
    ) -> None:
        """
        Rejects an insertion that would break the subproof structure.

        Raises:
            StructureRejected: Misplaced premise, depth jump, or a following
                record that would be captured into a new scope
        """
        depth = record.depth
        context = {"depth": depth, "subproof": record.subproof}

        if record.premise and (depth != 0 or record.subproof):
            raise StructureRejected(
                "Premises sit at depth 0 and do not open subproofs",
                context=context,
            )
        if record.subproof and depth < 1:
            raise StructureRejected(
                "A subproof opener sits at depth 1 or deeper", context=context
            )

        available = preceding.depth if preceding is not None else 0
        limit = available + 1 if record.subproof else available
        if depth > limit:
            raise StructureRejected(
                "Line is nested deeper than its predecessor allows",
                context={**context, "preceding_depth": available},
            )

        if following is None:
            return
        if record.subproof:
            captured = following.depth >= depth and not (
                following.subproof and following.depth == depth
            )
        else:
            captured = following.depth > depth and not (
                following.subproof and following.depth == depth + 1
            )
        if captured:
            raise StructureRejected(
                "Insertion would move the following line into another subproof",
                context={**context, "following_line": following.line_number},
            )

    def check_remove(self, records: List[SentenceRecord], position: int) -> bool:
        """
        Checks whether a record can be removed on its own.

        Returns:
            True if removing the record requires promoting the first
            surviving member of its subproof

        Raises:
            StructureRejected: The first member is not at the opener's depth
        """
        record = records[position]
        if scope_end(records, position) == position + 1:
            return False
        survivor = records[position + 1]
        if survivor.depth != record.depth or survivor.subproof:
            raise StructureRejected(
                "Cannot remove a subproof opener whose first member is a nested subproof",
                context={
                    "line_number": record.line_number,
                    "member_line": survivor.line_number,
                },
            )
        return True

    # ------------------------------------------------------------------
    # Scope hand-over
    # ------------------------------------------------------------------

    def promote_scope(self, records: List[SentenceRecord], position: int) -> SentenceRecord:
        """
        Makes the record after a departing opener the opener of its subproof.

        The departing opener is still at position; the survivor at
        position + 1 becomes the new opener and every later member's
        boundary slot is rewritten to the survivor's line number.

        Returns:
            The promoted record
        """
        opener = records[position]
        end = scope_end(records, position)
        level = opener.depth - 1
        survivor = records[position + 1]

        for member in records[position + 1 : end]:
            member.indices[level] = survivor.line_number
        survivor.subproof = True

        logger.debug(
            "Subproof promoted",
            extra={
                "old_opener": opener.line_number,
                "new_opener": survivor.line_number,
                "members": end - position - 1,
            },
        )
        return survivor

    def demote_scope(self, records: List[SentenceRecord], position: int) -> None:
        """
        Inverse of promote_scope().

        The restored opener is at position, the previously promoted record at
        position + 1. The promoted record loses its opener flag and every
        member of its subproof is handed back to the restored opener.
        """
        opener = records[position]
        promoted = records[position + 1]
        level = opener.depth - 1
        end = scope_end(records, position + 1)

        for member in records[position + 1 : end]:
            member.indices[level] = opener.line_number
        promoted.subproof = False

        logger.debug(
            "Subproof demoted",
            extra={
                "opener": opener.line_number,
                "demoted": promoted.line_number,
                "members": end - position - 1,
            },
        )
