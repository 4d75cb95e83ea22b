"""
Centralized constants for the Aris proof document model.

This module provides a single source of truth for sentinels, defaults and
limits used throughout the Aris codebase.

Organization:
    - Sentinels: Marker values shared by records, index paths and references
    - Undo Journal: History limits
    - Goal Container: Capacity limits
    - Sentence Text: Comment handling
    - Reference Policy: Default tie-break policy name

Usage:
    from common.constants import INDEX_SENTINEL, UNASSIGNED_LINE

Note:
    These constants define default values. Some components override them via
    aris_config or constructor parameters.
"""

# =============================================================================
# Sentinels
# =============================================================================

INDEX_SENTINEL: int = -1
"""
Terminator of every index path and of every persisted reference list.

An index path of a record at depth d has d boundary entries followed by this
sentinel, so its length is always d + 1.
"""

UNASSIGNED_LINE: int = -1
"""
Line number of a record that is not part of the numbered proof.

Goal lines carry it until they are linked to the proof line that meets them.
Records with a line number below FIRST_LINE_NUMBER are never shifted by
renumbering.
"""

FIRST_LINE_NUMBER: int = 1
"""Line number of the first record in a proof container."""

# =============================================================================
# Undo Journal
# =============================================================================

DEFAULT_UNDO_LIMIT: int = 0
"""
Maximum number of batches kept on the undo side.

- 0: Unlimited history
- n > 0: Oldest batch is discarded once n batches are stored
"""

# =============================================================================
# Goal Container
# =============================================================================

DEFAULT_GOAL_CAPACITY: int = 1
"""Number of target lines a goal container accepts."""

# =============================================================================
# Sentence Text
# =============================================================================

COMMENT_CHAR: str = ";"
"""Everything from this character on is a comment and is not stored."""

# =============================================================================
# Reference Policy
# =============================================================================

DEFAULT_SIBLING_SCOPE_POLICY: str = "entire_subproof"
"""
How a citation into a closed sibling subproof is resolved when both lines sit
at the same depth at the first index mismatch.

- "entire_subproof": Cite the whole sibling subproof (original behavior)
- "reject": Refuse the citation
"""
