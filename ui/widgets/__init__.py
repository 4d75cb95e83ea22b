"""
ui.widgets package

Formatting helpers for proof line widgets.
"""

from ui.widgets.proof_line_formatter import ProofLineFormatter

__all__ = ["ProofLineFormatter"]
