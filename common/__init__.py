"""
Common constants for the Aris project.

This package provides the sentinels and default values shared by the
document model components.
"""

from common.constants import *

__all__ = [
    # Sentinels
    "INDEX_SENTINEL",
    "UNASSIGNED_LINE",
    "FIRST_LINE_NUMBER",
    # Undo Journal
    "DEFAULT_UNDO_LIMIT",
    # Goal Container
    "DEFAULT_GOAL_CAPACITY",
    # Sentence Text
    "COMMENT_CHAR",
    # Reference Policy
    "DEFAULT_SIBLING_SCOPE_POLICY",
]
