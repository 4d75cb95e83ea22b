# ui/__init__.py
"""
UI package for Aris.

Contains presentation helpers that read the proof document model.
"""

from ui.widgets import ProofLineFormatter

__all__ = ["ProofLineFormatter"]
