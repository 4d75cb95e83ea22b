"""
component_8_document_signals.py

Qt presentation adapter for the Aris proof document

ProofDocumentController wraps a ProofDocument in a QObject so views can
submit edits through slots and react to signals. Rejected edits never raise
into the event loop: they are reported through edit_rejected with a short
user-facing message, and corruption through corruption_detected.

Signals:
    document_changed: Any committed edit (operation name)
    lines_renumbered: Every shift of line numbers (boundary, delta)
    focus_changed: New focused record (or None)
    edit_rejected: User-facing message for a rejected edit
    corruption_detected: User-facing message when structural edits halt
"""

from typing import List, Optional

from PySide6.QtCore import QObject, Signal, Slot

from aris_config import ArisConfig, get_config
from aris_exceptions import (
    AllocationFailure,
    InputRejected,
    InvariantViolation,
    get_user_friendly_message,
)
from component_1_sentence_record import Rule, SentenceRecord
from component_2_renumber_engine import RenumberEvent
from component_5_proof_document import ProofDocument
from component_10_logging_config import get_logger
from ui.widgets.proof_line_formatter import ProofLineFormatter

logger = get_logger(__name__)


class ProofDocumentController(QObject):
    """
    Slot/signal front end of a ProofDocument.

    Signals:
        document_changed: Emitted after every committed edit (operation)
        lines_renumbered: Emitted for each renumber shift (boundary, delta)
        focus_changed: Emitted when the focus moves (SentenceRecord or None)
        edit_rejected: Emitted with a message when an edit is refused
        corruption_detected: Emitted with a message on an invariant violation
    """

    document_changed = Signal(str)
    lines_renumbered = Signal(int, int)
    focus_changed = Signal(object)
    edit_rejected = Signal(str)
    corruption_detected = Signal(str)

    def __init__(self, document: Optional[ProofDocument] = None, parent=None):
        super().__init__(parent)
        self.document = document if document is not None else ProofDocument()
        self.document.add_listener(self._on_document_edit)
        self.debug_messages = False
        self.theme = "dark"
        self.menu_labels: List[str] = []
        self.lines_renumbered.connect(self._relabel_menus)

    @classmethod
    def from_config(
        cls, config: Optional[ArisConfig] = None, parent=None
    ) -> "ProofDocumentController":
        """Builds a controller and its document from the process configuration."""
        config = config or get_config()
        controller = cls(ProofDocument.from_config(config), parent)
        controller.debug_messages = config.get("verbose", False)
        controller.theme = config.get("theme", "dark")
        return controller

    def line_color(self, record: SentenceRecord) -> str:
        """Background color of a line in the configured theme."""
        return ProofLineFormatter.background_color(record.highlight, self.theme)

    @Slot(int, int)
    def _relabel_menus(self, boundary: int, delta: int) -> None:
        """Keeps "N - name" menu entries pointing at the same lines."""
        self.menu_labels = ProofLineFormatter.relabel_menu_labels(
            self.menu_labels, boundary, delta
        )

    def _on_document_edit(self, operation: str, events: List[RenumberEvent]) -> None:
        for event in events:
            self.lines_renumbered.emit(event.boundary, event.delta)
        if operation == "set_focus":
            self.focus_changed.emit(self.document.get_focus())
        self.document_changed.emit(operation)

    def _run(self, operation: str, action, *args, **kwargs):
        """Runs a document call, turning model errors into signals."""
        try:
            return action(*args, **kwargs)
        except InputRejected as e:
            self.edit_rejected.emit(
                get_user_friendly_message(e, include_details=self.debug_messages)
            )
        except AllocationFailure as e:
            logger.log_exception(e, f"{operation} aborted")
            self.edit_rejected.emit(get_user_friendly_message(e))
        except InvariantViolation as e:
            logger.log_exception(e, f"{operation} hit an invariant violation")
            self.corruption_detected.emit(
                get_user_friendly_message(e, include_details=self.debug_messages)
            )
        return None

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    @Slot(str, int, bool, object)
    def request_insert(
        self,
        text: str,
        depth: int = 0,
        subproof: bool = False,
        after: Optional[SentenceRecord] = None,
    ) -> Optional[SentenceRecord]:
        """Inserts a line after `after`, or after the focused line."""
        if after is None:
            after = self.document.get_focus()
        if after is None and len(self.document):
            after = self.document.records[-1]
        return self._run(
            "insert",
            self.document.insert,
            text,
            depth=depth,
            subproof=subproof,
            after=after,
        )

    @Slot(object)
    def request_delete(self, record: Optional[SentenceRecord] = None) -> Optional[int]:
        """Deletes the selection, or the given (default: focused) line."""
        if record is None and self.document.selected:
            return self._run("remove", self.document.remove_selected)
        record = record if record is not None else self.document.get_focus()
        if record is None:
            self.edit_rejected.emit("No line to delete.")
            return None
        if record.subproof:
            return self._run("remove", self.document.remove_subproof, record)
        return self._run("remove", self.document.remove, [record])

    @Slot(object, str)
    def request_text_change(self, record: SentenceRecord, text: str) -> Optional[bool]:
        return self._run("set_text", self.document.set_text, record, text)

    @Slot(str)
    def request_rule(self, abbreviation: str) -> None:
        """Handles a rule button click for the focused line."""
        try:
            rule = Rule.from_abbreviation(abbreviation)
        except ValueError:
            self.edit_rejected.emit(f"Unknown rule '{abbreviation}'.")
            return
        self._run("toggle_rule", self.document.toggle_rule, rule)

    @Slot(object)
    def request_toggle_reference(self, candidate: SentenceRecord) -> None:
        self._run("toggle_reference", self.document.toggle_reference, candidate)

    @Slot(object)
    def request_select(self, record: SentenceRecord) -> Optional[bool]:
        return self._run("toggle_selection", self.document.toggle_selection, record)

    @Slot(object)
    def request_focus(self, record: Optional[SentenceRecord]) -> None:
        self._run("set_focus", self.document.set_focus, record)

    @Slot(int)
    def request_move_focus(self, step: int) -> None:
        self._run("move_focus", self.document.move_focus, step)

    @Slot()
    def request_undo(self) -> Optional[bool]:
        return self._run("undo", self.document.undo)

    @Slot()
    def request_redo(self) -> Optional[bool]:
        return self._run("redo", self.document.redo)
