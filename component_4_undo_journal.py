"""
component_4_undo_journal.py

Undo Journal for the Aris proof document model

Stores one UndoBatch per committed edit. A batch holds deep copies of the
affected records taken when the edit committed; it never aliases live records.

Batch kinds:
    MODIFY  - text, rule or citation change of one record (symmetric swap)
    ADD     - records that were inserted
    REMOVE  - records that were removed, plus the citations and scope
              promotions the removal caused

The journal only stores and orders batches. Replaying them is done by the
document through its normal insert and remove paths; the journal moves a
batch between its undo and redo sides once the replay has succeeded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from aris_exceptions import AllocationFailure, wrap_exception
from common.constants import DEFAULT_UNDO_LIMIT
from component_1_sentence_record import SentenceRecord
from component_10_logging_config import get_logger

logger = get_logger(__name__)


class BatchKind(Enum):
    MODIFY = "modify"
    ADD = "add"
    REMOVE = "remove"


@dataclass
class UndoBatch:
    """
    Snapshot of one committed edit.

    Attributes:
        kind: Kind of edit
        snapshot: Deep copies of the affected records in line order
        timestamp: Commit time
        incoming: REMOVE only. Pre-removal line number of each surviving
            citing record mapped to its pre-removal persisted list
        promoted: REMOVE only. Identity of each removed opener mapped to the
            identity of the record promoted in its place
        description: Short label for logs and menus
    """

    kind: BatchKind
    snapshot: List[SentenceRecord]
    timestamp: datetime = field(default_factory=datetime.now)
    incoming: Dict[int, List[int]] = field(default_factory=dict)
    promoted: Dict[str, str] = field(default_factory=dict)
    description: str = ""

    @property
    def line_numbers(self) -> List[int]:
        return [record.line_number for record in self.snapshot]

    def describe(self) -> str:
        label = self.description or self.kind.value
        lines = ", ".join(str(n) for n in self.line_numbers)
        return f"{label} (lines {lines})"


class UndoJournal:
    """
    Two-sided batch log.

    undo_limit caps the number of batches on the undo side (0 = unlimited).
    """

    def __init__(self, undo_limit: int = DEFAULT_UNDO_LIMIT):
        if undo_limit < 0:
            raise ValueError(f"undo_limit must be >= 0, got {undo_limit}")
        self.undo_limit = undo_limit
        self._undo: List[UndoBatch] = []
        self._redo: List[UndoBatch] = []

    def capture(
        self,
        kind: BatchKind,
        records: List[SentenceRecord],
        description: str = "",
    ) -> UndoBatch:
        """
        Builds a batch from deep copies of records.

        The batch is not stored until commit() is called.

        Raises:
            AllocationFailure: Snapshot could not be allocated
        """
        try:
            snapshot = sorted(
                (record.copy() for record in records), key=lambda r: r.line_number
            )
        except MemoryError as e:
            raise wrap_exception(
                e,
                AllocationFailure,
                "Undo snapshot allocation failed",
                operation="capture",
                kind=kind.value,
            ) from e
        return UndoBatch(kind=kind, snapshot=snapshot, description=description)

    def commit(self, batch: UndoBatch) -> None:
        """Stores a batch for a new edit and clears the redo side."""
        self._undo.append(batch)
        if self._redo:
            logger.debug("Redo history cleared", extra={"batches": len(self._redo)})
        self._redo.clear()

        if self.undo_limit and len(self._undo) > self.undo_limit:
            dropped = self._undo.pop(0)
            logger.debug("Oldest undo batch discarded", extra={"batch": dropped.describe()})

        logger.info("Batch committed", extra={"batch": batch.describe()})

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def peek_undo(self) -> Optional[UndoBatch]:
        return self._undo[-1] if self._undo else None

    def peek_redo(self) -> Optional[UndoBatch]:
        return self._redo[-1] if self._redo else None

    def finish_undo(self) -> UndoBatch:
        """Moves the latest batch to the redo side after a successful undo."""
        batch = self._undo.pop()
        self._redo.append(batch)
        return batch

    def finish_redo(self) -> UndoBatch:
        """Moves the latest redo batch back to the undo side after a redo."""
        batch = self._redo.pop()
        self._undo.append(batch)
        return batch

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
