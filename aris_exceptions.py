"""
aris_exceptions.py

Central exception hierarchy for the Aris proof document model.
Defines specialised exception classes for every failure the document model
can report to its collaborators.

Exception hierarchy:
    ArisException (base)
    ├── ProofModelException
    │   ├── AllocationFailure
    │   ├── InvariantViolation
    │   │   ├── IndexPathError
    │   │   ├── StaleReferenceError
    │   │   ├── UndoReplayError
    │   │   └── DocumentCorruptedError
    │   └── InputRejected
    │       ├── ReferenceRejected
    │       ├── StructureRejected
    │       └── GoalNotEditable
    ├── PersistenceException
    │   └── ProofFileError
    └── ConfigurationException
        └── InvalidConfigError

Usage:
    from aris_exceptions import InputRejected, InvariantViolation

    try:
        document.toggle_reference(candidate)
    except InputRejected as e:
        logger.info(f"Edit rejected: {e}")
        logger.info(f"Context: {e.context}")
"""

from typing import Any, Dict, Optional


class ArisException(Exception):
    """
    Base exception for all Aris-specific errors.

    All Aris exceptions support:
    - A detailed error message
    - Contextual information (dict)
    - Chaining of the original exception (via 'from')
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {self.original_exception}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# PROOF MODEL EXCEPTIONS
# ============================================================================


class ProofModelException(ArisException):
    """Base exception for errors raised by the proof document model."""


class AllocationFailure(ProofModelException):
    """
    A buffer or snapshot could not be allocated.

    Fatal to the in-progress operation only. The document stays in its
    last-good state.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        context = kwargs.get("context") or {}
        context.setdefault("operation", operation)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class InvariantViolation(ProofModelException):
    """
    A structural invariant of the document does not hold.

    Causes:
    - An index path does not match its expected prefix
    - Undo cannot locate the line a snapshot refers to
    - A reference resolves to a record that is no longer live

    Never auto-repaired. The owning document is flagged as corrupted.
    """


class IndexPathError(InvariantViolation):
    """
    A stored index path disagrees with the scope structure.

    Causes:
    - Missing or misplaced -1 sentinel
    - Boundary slot pointing at a line that is not an opener
    - Renumbering left a stale boundary value
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        expected: Optional[list] = None,
        actual: Optional[list] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["line_number"] = line_number
        context["expected"] = expected
        context["actual"] = actual
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class StaleReferenceError(InvariantViolation):
    """A reference identity failed the live-identity lookup."""

    def __init__(self, message: str, record_id: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["record_id"] = record_id
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class UndoReplayError(InvariantViolation):
    """
    Undo or redo could not be replayed against the live document.

    Causes:
    - No live record carries the snapshot's line number
    - Journal and document went out of step
    """

    def __init__(
        self,
        message: str,
        batch_kind: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["batch_kind"] = batch_kind
        context["line_number"] = line_number
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class DocumentCorruptedError(InvariantViolation):
    """Structural edits are halted after an earlier invariant violation."""


class InputRejected(ProofModelException):
    """
    Policy rejection of an edit. No state was changed.

    Causes:
    - Citing a later-or-equal line
    - Citing into a still-open outer scope
    - Modifying a non-editable goal slot
    """


class ReferenceRejected(InputRejected):
    """A citation request was refused by the reference policy."""

    def __init__(
        self,
        message: str,
        citing_line: Optional[int] = None,
        cited_line: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["citing_line"] = citing_line
        context["cited_line"] = cited_line
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class StructureRejected(InputRejected):
    """
    An insertion or deletion would break the scope structure.

    Causes:
    - Depth jumps by more than one level
    - Premise placed inside a subproof
    - Insert would capture the following lines into a new scope
    """


class GoalNotEditable(InputRejected):
    """The goal slot does not accept this kind of modification."""


# ============================================================================
# PERSISTENCE EXCEPTIONS
# ============================================================================


class PersistenceException(ArisException):
    """Base exception for load/save errors."""


class ProofFileError(PersistenceException):
    """
    Error reading or writing a proof file.

    Causes:
    - File not found or not readable
    - Malformed JSON
    - Tuple with missing fields or unknown rule
    """

    def __init__(self, message: str, file_path: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["file_path"] = file_path
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(ArisException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid configuration.

    Causes:
    - Malformed YAML
    - Unknown value for an enumerated setting
    - Wrong value type
    """


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def wrap_exception(
    exc: Exception, aris_exception_class: type[ArisException], message: str, **context
) -> ArisException:
    """
    Converts a generic exception into an Aris-specific exception.

    Args:
        exc: Original exception
        aris_exception_class: Target exception class (e.g. AllocationFailure)
        message: Custom error message
        **context: Additional context information

    Returns:
        Aris-specific exception chained to the original one

    Example:
        try:
            snapshot = record.copy()
        except MemoryError as e:
            raise wrap_exception(e, AllocationFailure, "Snapshot failed", line=3)
    """
    return aris_exception_class(
        message=message, context=context, original_exception=exc
    )


def get_user_friendly_message(exc: Exception, include_details: bool = False) -> str:
    """
    Builds a short user-facing message from an exception.

    Args:
        exc: Exception object
        include_details: Append the technical message (debug mode)

    Returns:
        Message suitable for a status bar or dialog
    """
    friendly_messages = {
        AllocationFailure: "[ERROR] Not enough memory to complete the edit. The proof was left unchanged.",
        IndexPathError: "[ERROR] The subproof structure is inconsistent. Further structural edits are disabled.",
        StaleReferenceError: "[ERROR] A citation points at a line that no longer exists.",
        UndoReplayError: "[ERROR] Undo history no longer matches the proof. Further structural edits are disabled.",
        DocumentCorruptedError: "[ERROR] The proof is in an inconsistent state. Save your work and reload it.",
        ReferenceRejected: "That line cannot be cited from here.",
        StructureRejected: "A line cannot be placed there.",
        GoalNotEditable: "Goal lines cannot be changed this way.",
        InputRejected: "The edit was rejected.",
        ProofFileError: "[ERROR] The proof file could not be read or written.",
        InvalidConfigError: "[ERROR] Invalid configuration. Please check the settings.",
    }

    default_message = "[ERROR] An unexpected error occurred."

    user_message = default_message
    for exc_type in type(exc).__mro__:
        if exc_type in friendly_messages:
            user_message = friendly_messages[exc_type]
            break

    if isinstance(exc, ReferenceRejected) and exc.context.get("cited_line"):
        user_message = (
            f"Line {exc.context['cited_line']} cannot be cited from "
            f"line {exc.context.get('citing_line')}."
        )

    if include_details and isinstance(exc, ArisException):
        user_message += f"\n\nDetails: {exc}"
    elif include_details:
        user_message += f"\n\nDetails: {type(exc).__name__}: {exc}"

    return user_message
