"""
component_5_proof_document.py

Proof Document for Aris

Owns the ordered record sequence, the focus cursor and the selection, and is
the single entry point for every mutation. Each edit runs as a transaction:
renumbering, citation upkeep and the undo batch either all complete or the
document is restored to its last-good state before the error is raised.

Document kinds:
    PROOF - numbered, undoable proof lines
    GOAL  - unnumbered target lines; never renumbered, never journaled

Error behavior:
    InputRejected       - policy rejection, nothing changed
    AllocationFailure   - edit aborted, nothing changed
    InvariantViolation  - edit aborted, nothing changed, and the document is
                          flagged as corrupted: further structural edits
                          raise DocumentCorruptedError until
                          reset_corruption() is called

Usage:
    from component_5_proof_document import ProofDocument

    doc = ProofDocument()
    p = doc.append("A & B", premise=True)
    q = doc.append("A", rule=Rule.SM, ref_lines=[1])
    doc.undo()
"""

from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Union

from aris_config import ArisConfig, get_config
from aris_exceptions import (
    AllocationFailure,
    DocumentCorruptedError,
    GoalNotEditable,
    InputRejected,
    InvariantViolation,
    ReferenceRejected,
    StructureRejected,
    UndoReplayError,
    wrap_exception,
)
from common.constants import (
    DEFAULT_GOAL_CAPACITY,
    DEFAULT_UNDO_LIMIT,
    FIRST_LINE_NUMBER,
    UNASSIGNED_LINE,
)
from component_1_sentence_record import (
    Highlight,
    Rule,
    SentenceRecord,
    ValueState,
    make_index_path,
    new_record_id,
    parse_ref_lines,
    scope_members,
    serialize_ref_lines,
)
from component_2_renumber_engine import RenumberEngine, RenumberEvent
from component_3_reference_manager import (
    ReferenceManager,
    RuleToggleState,
    SiblingScopePolicy,
    ToggleResult,
)
from component_4_undo_journal import BatchKind, UndoBatch, UndoJournal
from component_6_sentence_text import normalize_text
from component_10_logging_config import PerformanceLogger, get_logger
from infrastructure.interfaces import (
    BaseRuleVerifier,
    CitedLine,
    VerificationRequest,
    VerificationResult,
)

logger = get_logger(__name__)

RecordRef = Union[SentenceRecord, str]
DocumentListener = Callable[[str, List[RenumberEvent]], None]


class DocumentKind(Enum):
    PROOF = "proof"
    GOAL = "goal"


class ProofDocument:
    """
    Ordered proof lines with focus, selection and undo history.

    Records handed out by the document stay valid across failed edits: a
    rollback restores their fields in place. Every operation also accepts a
    record identity instead of a record.
    """

    def __init__(
        self,
        kind: DocumentKind = DocumentKind.PROOF,
        undo_limit: int = DEFAULT_UNDO_LIMIT,
        sibling_policy: SiblingScopePolicy = SiblingScopePolicy.ENTIRE_SUBPROOF,
        goal_capacity: int = DEFAULT_GOAL_CAPACITY,
        boolean_mode: bool = False,
    ):
        self.kind = kind
        self.engine = RenumberEngine()
        self.references = ReferenceManager(sibling_policy)
        self.journal = UndoJournal(undo_limit)
        self.goal_capacity = goal_capacity
        self.boolean_mode = boolean_mode
        self.rule_state = RuleToggleState()
        self.corrupted = False
        self.corruption_reason: Optional[str] = None

        self._records: List[SentenceRecord] = []
        self._focused: Optional[SentenceRecord] = None
        self._goals: List["ProofDocument"] = []
        self._listeners: List[DocumentListener] = []
        self._busy = False
        self._pending_events: List[RenumberEvent] = []

        self.engine.add_listener(self._on_renumber)

    @classmethod
    def from_config(
        cls,
        config: Optional[ArisConfig] = None,
        kind: DocumentKind = DocumentKind.PROOF,
    ) -> "ProofDocument":
        """Builds a document from the process configuration."""
        config = config or get_config()
        return cls(
            kind=kind,
            undo_limit=config.get("undo_limit", DEFAULT_UNDO_LIMIT),
            sibling_policy=SiblingScopePolicy(config.get("sibling_scope_policy")),
            goal_capacity=config.get("goal_capacity", DEFAULT_GOAL_CAPACITY),
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def is_goal(self) -> bool:
        return self.kind is DocumentKind.GOAL

    @property
    def records(self) -> List[SentenceRecord]:
        return list(self._records)

    @property
    def selected(self) -> List[SentenceRecord]:
        return [record for record in self._records if record.selected]

    @property
    def goals(self) -> List["ProofDocument"]:
        return list(self._goals)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SentenceRecord]:
        return iter(list(self._records))

    def line(self, line_number: int) -> Optional[SentenceRecord]:
        """The record at a line number, None if there is none."""
        return self.references.find_line(self._records, line_number)

    def get_focus(self) -> Optional[SentenceRecord]:
        return self._focused

    def snapshot(self) -> List[SentenceRecord]:
        """Deep copies of every record, for collaborators and tests."""
        return [record.copy() for record in self._records]

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: DocumentListener) -> None:
        """
        Registers a callback run after every committed edit.

        The callback receives the operation name and the renumber events the
        edit produced. Listeners may submit new edits.
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: DocumentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _on_renumber(self, event: RenumberEvent) -> None:
        self._pending_events.append(event)

    def _dispatch(self, operation: str, events: List[RenumberEvent]) -> None:
        for listener in list(self._listeners):
            listener(operation, events)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _capture_state(self) -> list:
        state = []
        for doc in [self] + self._goals:
            state.append(
                (
                    doc,
                    list(doc._records),
                    [(record, record.copy()) for record in doc._records],
                    doc._focused,
                    doc.rule_state,
                )
            )
        return state

    @staticmethod
    def _restore_state(state: list) -> None:
        for doc, order, saved, focused, rule_state in state:
            for record, copy in saved:
                record.restore_from(copy)
            doc._records = order
            doc._focused = focused
            doc.rule_state = rule_state

    def _mark_corrupted(self, error: InvariantViolation) -> None:
        self.corrupted = True
        self.corruption_reason = error.message
        logger.error(
            "Invariant violation, structural edits halted",
            extra={"error": type(error).__name__, **error.context},
        )

    def reset_corruption(self) -> None:
        """Lifts the structural edit halt after an operator has intervened."""
        if self.corrupted:
            logger.warning(
                "Corruption flag reset", extra={"reason": self.corruption_reason}
            )
        self.corrupted = False
        self.corruption_reason = None

    @contextmanager
    def _edit(self, operation: str, structural: bool = True):
        """
        Runs an edit atomically.

        Raises:
            InputRejected: Another edit is in progress
            DocumentCorruptedError: Structural edit on a corrupted document
            AllocationFailure: Memory ran out during the edit
        """
        if self._busy:
            raise InputRejected(
                "Another edit is still in progress", context={"operation": operation}
            )
        if structural and self.corrupted:
            raise DocumentCorruptedError(
                "Structural edits are halted on a corrupted document",
                context={"operation": operation, "reason": self.corruption_reason},
            )
        try:
            state = self._capture_state()
        except MemoryError as e:
            raise wrap_exception(
                e, AllocationFailure, "Could not snapshot the document", operation=operation
            ) from e

        self._busy = True
        self._pending_events = []
        try:
            yield
        except InvariantViolation as e:
            self._restore_state(state)
            self._mark_corrupted(e)
            raise
        except MemoryError as e:
            self._restore_state(state)
            raise wrap_exception(
                e, AllocationFailure, "Edit ran out of memory", operation=operation
            ) from e
        except InputRejected as e:
            self._restore_state(state)
            logger.info(
                "Edit rejected", extra={"operation": operation, "reason": e.message}
            )
            raise
        except Exception:
            self._restore_state(state)
            raise
        finally:
            self._busy = False

        events = self._pending_events
        self._pending_events = []
        self._dispatch(operation, events)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _live(self, record: RecordRef) -> SentenceRecord:
        record_id = record if isinstance(record, str) else record.id
        for live in self._records:
            if live.id == record_id:
                return live
        raise InputRejected(
            "Line is not part of this document", context={"record_id": record_id}
        )

    def _at_line(self, line_number: int, batch: UndoBatch) -> SentenceRecord:
        record = self.line(line_number)
        if record is None:
            raise UndoReplayError(
                "No live line matches the undo snapshot",
                batch_kind=batch.kind.value,
                line_number=line_number,
            )
        return record

    def _refresh_highlights(self) -> None:
        for record in self._records:
            record.highlight = Highlight.SELECTED if record.selected else Highlight.DEFAULT
            record.is_reference = False
        if self._focused is not None:
            self.references.set_focus_highlights(self._focused, self._records)

    def _unlink_goal(self, goal: SentenceRecord) -> None:
        goal.line_number = UNASSIGNED_LINE
        goal.value_state = ValueState.BLANK

    def _unlink_goals_from(self, boundary: int) -> None:
        """Unlinks goals met at or after a structural edit."""
        for goal_doc in self._goals:
            for goal in goal_doc._records:
                if goal.line_number >= max(boundary, FIRST_LINE_NUMBER):
                    logger.debug(
                        "Goal unlinked", extra={"met_at": goal.line_number}
                    )
                    self._unlink_goal(goal)

    def _content_changed(self, record: SentenceRecord) -> None:
        """Resets the verdicts that depended on a record's content."""
        record.value_state = ValueState.BLANK
        if self.is_goal:
            self._unlink_goal(record)
            return
        for citer in self.references.citers_of(record, self._records):
            citer.value_state = ValueState.BLANK
        for goal_doc in self._goals:
            for goal in goal_doc._records:
                if goal.line_number == record.line_number:
                    self._unlink_goal(goal)

    def _check_goal_insert(self, record: SentenceRecord) -> None:
        if len(self._records) >= self.goal_capacity:
            raise GoalNotEditable(
                "Goal container is full", context={"capacity": self.goal_capacity}
            )
        if record.depth != 0 or record.subproof or record.premise:
            raise GoalNotEditable("Goal lines sit at depth 0 and open no subproof")
        if record.rule is not Rule.NONE or record.cited_lines:
            raise GoalNotEditable("Goal lines carry no rule and cite no lines")

    def _insert_at(self, record: SentenceRecord, position: int) -> None:
        """The insert path shared by live edits, loading and undo/redo."""
        if self.is_goal:
            self._check_goal_insert(record)
            record.line_number = UNASSIGNED_LINE
            record.indices = make_index_path([])
            self._records.insert(position, record)
            return

        if record.premise and record.rule is not Rule.NONE:
            raise StructureRejected("Premises carry no rule")
        if record.premise and record.cited_lines:
            raise ReferenceRejected("Premises do not cite other lines")

        preceding = self._records[position - 1] if position > 0 else None
        following = self._records[position] if position < len(self._records) else None
        self.engine.check_insert(record, preceding, following)

        line_number = preceding.line_number + 1 if preceding else FIRST_LINE_NUMBER
        self.engine.renumber_from(self._records, line_number, 1)
        self.engine.assign_on_insert(record, preceding, line_number)
        self._records.insert(position, record)

        self.references.resync_record(record, self._records)
        self.references.reserialize_all(self._records)
        self.engine.verify(self._records)

    def _reinsert(self, saved: SentenceRecord, batch: UndoBatch) -> SentenceRecord:
        """Puts a journaled record back before the first line >= its own."""
        record = saved.copy()
        record.value_state = ValueState.BLANK
        record.highlight = Highlight.DEFAULT
        record.is_reference = False
        record.selected = False
        if any(live.id == record.id for live in self._records):
            record.id = new_record_id()

        position = len(self._records)
        for i, live in enumerate(self._records):
            if live.line_number >= saved.line_number:
                position = i
                break

        self._insert_at(record, position)
        if record.line_number != saved.line_number:
            raise UndoReplayError(
                "Restored line did not land on its journaled line number",
                batch_kind=batch.kind.value,
                line_number=saved.line_number,
                context={"landed_at": record.line_number},
            )
        return record

    def _remove_records(self, targets: List[SentenceRecord], batch: UndoBatch) -> None:
        """
        The remove path shared by live edits and undo/redo.

        Records are removed in descending line order. Incoming citations from
        surviving lines and scope promotions are recorded on the batch.
        """
        removed_ids = {target.id for target in targets}
        boundary = min(target.line_number for target in targets)

        for record in self._records:
            if record.id in removed_ids:
                continue
            if any(record_id in removed_ids for record_id in record.references):
                batch.incoming[record.line_number] = list(record.ref_lines)

        new_focus = self._focused
        if self._focused is not None and self._focused.id in removed_ids:
            position = self._records.index(self._focused)
            before = [r for r in self._records[:position] if r.id not in removed_ids]
            after = [r for r in self._records[position:] if r.id not in removed_ids]
            new_focus = before[-1] if before else (after[0] if after else None)

        for target in sorted(targets, key=lambda r: r.line_number, reverse=True):
            position = self._records.index(target)
            if not self.is_goal:
                self.references.clear_incoming(target, self._records)
                if self.engine.check_remove(self._records, position):
                    survivor = self.engine.promote_scope(self._records, position)
                    batch.promoted[target.id] = survivor.id
            del self._records[position]
            if not self.is_goal:
                self.engine.renumber_from(self._records, target.line_number + 1, -1)
                self.references.reserialize_all(self._records)

        self._focused = new_focus
        self.rule_state = RuleToggleState.for_record(new_focus)
        if not self.is_goal:
            self._unlink_goals_from(boundary)
            self.engine.verify(self._records)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def insert(
        self,
        text: str = "",
        rule: Rule = Rule.NONE,
        depth: int = 0,
        subproof: bool = False,
        premise: bool = False,
        after: Optional[RecordRef] = None,
        ref_lines: Optional[Iterable[int]] = None,
    ) -> SentenceRecord:
        """
        Inserts a new line.

        Args:
            text: Typed text, normalized before it is stored
            rule: Justification rule
            depth: Nesting level
            subproof: Whether the line opens a subproof
            premise: Whether the line is a premise
            after: Line to insert after, None for the top of the document
            ref_lines: Cited line numbers (earlier lines only)

        Returns:
            The inserted record

        Raises:
            StructureRejected: The line does not fit the subproof structure
            ReferenceRejected: A premise with citations
            GoalNotEditable: Goal container full or line not goal-shaped
        """
        with self._edit("insert"):
            position = 0 if after is None else self._records.index(self._live(after)) + 1
            record = SentenceRecord(
                depth=depth,
                subproof=subproof,
                premise=premise,
                rule=rule,
                text=normalize_text(text),
                ref_lines=serialize_ref_lines(parse_ref_lines(ref_lines)),
            )
            self._insert_at(record, position)
            batch = None
            if not self.is_goal:
                self._unlink_goals_from(record.line_number)
                batch = self.journal.capture(BatchKind.ADD, [record], description="insert")
            self._refresh_highlights()
            if batch is not None:
                self.journal.commit(batch)

        logger.info(
            "Line inserted",
            extra={"line_number": record.line_number, "depth": depth, "kind": self.kind.value},
        )
        return record

    def append(self, text: str = "", **kwargs) -> SentenceRecord:
        """Inserts a line after the last one."""
        after = self._records[-1] if self._records else None
        return self.insert(text, after=after, **kwargs)

    def remove(self, records: Iterable[RecordRef]) -> int:
        """
        Removes exactly the given lines as one undoable batch.

        An opener whose subproof keeps members hands the subproof over to its
        first surviving member.

        Returns:
            Number of removed lines

        Raises:
            InputRejected: Nothing to remove
            StructureRejected: An opener whose first member is a nested subproof
        """
        with self._edit("remove"):
            targets = []
            for record in records:
                live = self._live(record)
                if live not in targets:
                    targets.append(live)
            self._remove_and_commit(targets)

        logger.info(
            "Lines removed", extra={"count": len(targets), "kind": self.kind.value}
        )
        return len(targets)

    def remove_subproof(self, opener: RecordRef) -> int:
        """
        Removes an opener and every member of its subproof as one batch.

        Raises:
            StructureRejected: The line does not open a subproof
            DocumentCorruptedError: The document is flagged as corrupted
        """
        with self._edit("remove_subproof"):
            opener = self._live(opener)
            if not opener.subproof:
                raise StructureRejected(
                    "Line does not open a subproof",
                    context={"line_number": opener.line_number},
                )
            members = scope_members(self._records, self._records.index(opener))
            with PerformanceLogger(
                logger.logger,
                "remove_subproof",
                opener=opener.line_number,
                lines=len(members),
            ):
                self._remove_and_commit(members)

        logger.info("Subproof removed", extra={"count": len(members)})
        return len(members)

    def _remove_and_commit(self, targets: List[SentenceRecord]) -> None:
        """Removal body shared by remove() and remove_subproof()."""
        if not targets:
            raise InputRejected("No lines to remove")

        batch = None
        if self.is_goal:
            self._remove_records(targets, UndoBatch(BatchKind.REMOVE, []))
        else:
            batch = self.journal.capture(BatchKind.REMOVE, targets, description="remove")
            self._remove_records(targets, batch)
        self._refresh_highlights()
        if batch is not None:
            self.journal.commit(batch)

    def remove_selected(self) -> int:
        selected = self.selected
        if not selected:
            raise InputRejected("No lines are selected")
        return self.remove(selected)

    def clear(self) -> None:
        """Empties the document and its history (new file)."""
        if self._busy:
            raise InputRejected("Another edit is still in progress")
        self._records = []
        self._focused = None
        self.rule_state = RuleToggleState()
        self.journal.clear()
        for goal_doc in self._goals:
            for goal in goal_doc._records:
                self._unlink_goal(goal)
        logger.info("Document cleared", extra={"kind": self.kind.value})

    # ------------------------------------------------------------------
    # Content edits
    # ------------------------------------------------------------------

    def set_text(self, record: RecordRef, text: str) -> bool:
        """
        Replaces a line's text.

        Resets the verdict of the line and of every line citing it, and
        unlinks goals met at the line.

        Returns:
            False if the normalized text did not change
        """
        with self._edit("set_text", structural=False):
            record = self._live(record)
            new_text = normalize_text(text)
            if new_text == record.text:
                return False
            batch = None
            if not self.is_goal:
                batch = self.journal.capture(BatchKind.MODIFY, [record], description="text")
            record.text = new_text
            self._content_changed(record)
            if batch is not None:
                self.journal.commit(batch)

        logger.debug("Text changed", extra={"line_number": record.line_number})
        return True

    def set_rule(self, record: RecordRef, rule: Rule) -> None:
        """
        Sets a line's justification rule.

        Raises:
            GoalNotEditable: Goal lines carry no rule
            StructureRejected: Premises carry no rule
        """
        with self._edit("set_rule", structural=False):
            record = self._live(record)
            if self.is_goal:
                raise GoalNotEditable("Goal lines carry no rule")
            if record.premise and rule is not Rule.NONE:
                raise StructureRejected(
                    "Premises carry no rule", context={"line_number": record.line_number}
                )
            if record.rule is rule:
                return
            batch = self.journal.capture(BatchKind.MODIFY, [record], description="rule")
            record.rule = rule
            self._content_changed(record)
            if self.boolean_mode and not rule.is_boolean_compatible:
                record.value_state = ValueState.BOOL
            if record is self._focused:
                self.rule_state = RuleToggleState.for_record(record)
            self.journal.commit(batch)

        logger.debug(
            "Rule changed", extra={"line_number": record.line_number, "rule": rule.label}
        )

    def toggle_rule(self, rule: Rule) -> RuleToggleState:
        """
        Handles a click on a rule button for the focused line.

        Clicking the active rule clears it, any other rule is applied.

        Raises:
            InputRejected: No line has focus
        """
        focused = self._focused
        if focused is None:
            raise InputRejected("No line has focus")
        new_state = self.rule_state.toggle(rule)
        self.set_rule(focused, new_state.active_rule)
        self.rule_state = new_state
        return new_state

    def toggle_reference(self, candidate: RecordRef) -> ToggleResult:
        """
        Adds or removes the citation of candidate's unit from the focused line.

        Raises:
            InputRejected: No line has focus
            ReferenceRejected: The candidate cannot be cited from there
            GoalNotEditable: Called on a goal container
        """
        with self._edit("toggle_reference", structural=False):
            if self.is_goal:
                raise GoalNotEditable("Goal lines cite no lines")
            focused = self._focused
            if focused is None:
                raise InputRejected("No line has focus")
            candidate = self._live(candidate)

            batch = self.journal.capture(BatchKind.MODIFY, [focused], description="reference")
            result = self.references.toggle_reference(focused, candidate, self._records)
            focused.value_state = ValueState.BLANK
            self._refresh_highlights()
            self.journal.commit(batch)
        return result

    # ------------------------------------------------------------------
    # Focus and selection
    # ------------------------------------------------------------------

    def set_focus(self, record: Optional[RecordRef]) -> RuleToggleState:
        """
        Moves the focus cursor.

        Returns:
            The rule toolbar state for the newly focused line
        """
        with self._edit("set_focus", structural=False):
            new_focus = self._live(record) if record is not None else None
            if self._focused is not None:
                self.references.clear_focus_highlights(self._focused, self._records)
            self._focused = new_focus
            if new_focus is not None:
                self.references.set_focus_highlights(new_focus, self._records)
            self.rule_state = RuleToggleState.for_record(new_focus)
        return self.rule_state

    def move_focus(self, step: int = 1) -> Optional[SentenceRecord]:
        """Moves the focus up (negative) or down (positive), wrapping around."""
        if not self._records:
            return None
        if self._focused is None:
            target = self._records[0] if step >= 0 else self._records[-1]
        else:
            position = self._records.index(self._focused)
            target = self._records[(position + step) % len(self._records)]
        self.set_focus(target)
        return target

    def toggle_selection(self, record: RecordRef) -> bool:
        """
        Selects or deselects a line; an opener takes its subproof with it.

        Returns:
            The new selection state (always False on a goal container)
        """
        if self.is_goal:
            return False
        with self._edit("toggle_selection", structural=False):
            selected = self.references.toggle_selection(self._live(record), self._records)
        return selected

    def clear_selection(self) -> None:
        with self._edit("clear_selection", structural=False):
            for record in self._records:
                record.selected = False
            self._refresh_highlights()

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        """
        Reverts the latest batch.

        Returns:
            False if there was nothing to undo

        Raises:
            UndoReplayError: A journaled line no longer exists
            DocumentCorruptedError: The document is corrupted
        """
        return self._step(undo=True)

    def redo(self) -> bool:
        """Replays the latest undone batch. See undo()."""
        return self._step(undo=False)

    def _step(self, undo: bool) -> bool:
        operation = "undo" if undo else "redo"
        if self.is_goal:
            logger.debug("Goal containers keep no history")
            return False
        batch = self.journal.peek_undo() if undo else self.journal.peek_redo()
        if batch is None:
            return False

        with PerformanceLogger(
            logger.logger, operation, kind=batch.kind.value, lines=len(batch.snapshot)
        ):
            with self._edit(operation):
                finish = self._replay(batch, undo)
                self._refresh_highlights()
                finish()
                if undo:
                    self.journal.finish_undo()
                else:
                    self.journal.finish_redo()

        logger.info(
            f"{operation.capitalize()} applied", extra={"batch": batch.describe()}
        )
        return True

    def _replay(self, batch: UndoBatch, undo: bool) -> Callable[[], None]:
        """
        Applies one batch through the normal edit paths.

        Returns:
            Callback that updates the batch once the whole step succeeded
        """
        if batch.kind is BatchKind.MODIFY:
            saved = batch.snapshot[0]
            live = self._at_line(saved.line_number, batch)
            live_content = live.content()
            live.set_content(saved.content())
            self.references.resync_record(live, self._records)
            self._content_changed(live)
            if live is self._focused:
                self.rule_state = RuleToggleState.for_record(live)

            def finish_modify():
                saved.set_content(live_content)

            return finish_modify

        restoring = (batch.kind is BatchKind.REMOVE) == undo
        if restoring:
            self._restore_batch(batch)
            return lambda: None

        targets = [self._at_line(saved.line_number, batch) for saved in batch.snapshot]
        scratch = UndoBatch(kind=BatchKind.REMOVE, snapshot=[])
        self._remove_records(targets, scratch)

        def finish_remove():
            if batch.kind is BatchKind.REMOVE:
                batch.incoming = scratch.incoming
                batch.promoted = scratch.promoted

        return finish_remove

    def _restore_batch(self, batch: UndoBatch) -> None:
        """Re-inserts journaled records, undoing promotions and citation loss."""
        for saved in batch.snapshot:
            record = self._reinsert(saved, batch)
            promoted_id = batch.promoted.get(saved.id)
            if promoted_id is None:
                continue
            position = self._records.index(record)
            following = (
                self._records[position + 1] if position + 1 < len(self._records) else None
            )
            if following is None or following.id != promoted_id:
                raise UndoReplayError(
                    "Promoted line is no longer next to its restored opener",
                    batch_kind=batch.kind.value,
                    line_number=record.line_number,
                )
            self.engine.demote_scope(self._records, position)
            self.engine.verify(self._records)

        for line_number, ref_lines in sorted(batch.incoming.items()):
            citer = self._at_line(line_number, batch)
            citer.ref_lines = list(ref_lines)
            self.references.resync_record(citer, self._records)

        if batch.snapshot:
            self._unlink_goals_from(batch.snapshot[0].line_number)

    # ------------------------------------------------------------------
    # Verification collaborator
    # ------------------------------------------------------------------

    def set_value_state(self, record: RecordRef, state: ValueState) -> None:
        """Stores a verdict; never touches structural fields."""
        with self._edit("set_value_state", structural=False):
            self._live(record).value_state = state

    def set_boolean_mode(self, enabled: bool) -> None:
        """Switches boolean mode and marks lines whose rule it excludes."""
        with self._edit("set_boolean_mode", structural=False):
            self.boolean_mode = enabled
            for record in self._records:
                if record.rule.is_boolean_compatible:
                    continue
                if enabled:
                    record.value_state = ValueState.BOOL
                elif record.value_state is ValueState.BOOL:
                    record.value_state = ValueState.BLANK

    def build_verification_request(self, record: RecordRef) -> VerificationRequest:
        """Resolves a line's citations into a request for a verifier."""
        record = self._live(record)
        cited = []
        for record_id in record.references:
            target = self.references.resolve(self._records, record_id)
            entire = self.references.is_entire_reference(record, target)
            members = (
                [member.text for member in self.references.unit(self._records, target, True)]
                if entire
                else []
            )
            cited.append(
                CitedLine(
                    line_number=target.line_number,
                    text=target.text,
                    entire_subproof=entire,
                    member_texts=members,
                )
            )
        return VerificationRequest(
            line_number=record.line_number,
            text=record.text,
            rule=record.rule,
            premise=record.premise,
            cited=cited,
            boolean_mode=self.boolean_mode,
        )

    def verify_line(
        self, record: RecordRef, verifier: BaseRuleVerifier
    ) -> VerificationResult:
        """Runs one verifier check and stores the verdict on the line."""
        record = self._live(record)
        if self.boolean_mode and not record.rule.is_boolean_compatible:
            result = VerificationResult(
                value_state=ValueState.BOOL,
                message="Rule is not available in boolean mode",
            )
        else:
            result = verifier.verify(self.build_verification_request(record))
        self.set_value_state(record, result.value_state)
        logger.debug(
            "Line verified",
            extra={"line_number": record.line_number, "verdict": result.value_state.value},
        )
        return result

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def attach_goal(self, goal_document: "ProofDocument") -> None:
        """
        Links a goal container to this proof.

        Raises:
            InputRejected: The document is not a goal container
        """
        if not goal_document.is_goal or self.is_goal:
            raise InputRejected("Only goal containers attach to a proof")
        if goal_document not in self._goals:
            self._goals.append(goal_document)

    def mark_goal_met(self, goal: RecordRef, line_number: int) -> None:
        """
        Records that a proof line meets a goal.

        Raises:
            InputRejected: Unknown goal or line number
        """
        with self._edit("mark_goal_met", structural=False):
            goal_record = None
            for goal_doc in self._goals:
                for candidate in goal_doc._records:
                    goal_id = goal if isinstance(goal, str) else goal.id
                    if candidate.id == goal_id:
                        goal_record = candidate
            if goal_record is None:
                raise InputRejected("Goal is not attached to this proof")
            if self.line(line_number) is None:
                raise InputRejected(
                    "No proof line to meet the goal", context={"line_number": line_number}
                )
            goal_record.line_number = line_number
            goal_record.value_state = ValueState.TRUE

        logger.info("Goal met", extra={"line_number": line_number})
