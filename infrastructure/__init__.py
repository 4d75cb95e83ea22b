"""
infrastructure package

Shared infrastructure components for Aris.
Provides the interfaces of collaborators that plug into the document model.

Modules:
    - interfaces: Base interface for rule verifiers
"""

from infrastructure.interfaces import (
    BaseRuleVerifier,
    CitedLine,
    VerificationRequest,
    VerificationResult,
)

__all__ = [
    "BaseRuleVerifier",
    "CitedLine",
    "VerificationRequest",
    "VerificationResult",
]
