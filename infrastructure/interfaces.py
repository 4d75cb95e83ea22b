"""
infrastructure/interfaces.py

Base interface for rule verifiers used with the Aris proof document model.

The document model maintains structural validity only. Checking that a rule
application actually justifies a line is delegated to a verifier that reads a
line's text, rule and cited texts and answers with a verdict. The document
stores that verdict through set_value_state() and never lets the verifier
touch structural fields.

Interface Contract:
    Every verifier implements BaseRuleVerifier. This ensures:
    - One request format built by the document
    - One result format consumed by the document
    - Capability discovery (which rules a verifier can check)

Usage:
    from infrastructure.interfaces import BaseRuleVerifier, VerificationResult

    class MyVerifier(BaseRuleVerifier):
        def verify(self, request: VerificationRequest) -> VerificationResult:
            return VerificationResult(value_state=ValueState.TRUE)

        def get_supported_rules(self) -> List[Rule]:
            return [Rule.MP, Rule.AD]
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from component_1_sentence_record import Rule, ValueState


@dataclass(frozen=True)
class CitedLine:
    """
    One citation as seen by a verifier.

    Attributes:
        line_number: Line of the cited record
        text: Text of the cited record
        entire_subproof: Whether the citation stands for a whole subproof
        member_texts: Texts of every line of that subproof, opener first
            (empty for ordinary citations)
    """

    line_number: int
    text: str
    entire_subproof: bool = False
    member_texts: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class VerificationRequest:
    """
    Everything a verifier may read about one line.

    Attributes:
        line_number: Line being checked
        text: Sentence text
        rule: Justification rule
        premise: Whether the line is a premise
        cited: Resolved citations in citation order
        boolean_mode: Whether boolean mode is active
    """

    line_number: int
    text: str
    rule: Rule
    premise: bool = False
    cited: List[CitedLine] = field(default_factory=list)
    boolean_mode: bool = False

    @property
    def cited_texts(self) -> List[str]:
        return [cited.text for cited in self.cited]


@dataclass
class VerificationResult:
    """
    Verdict returned by a verifier.

    Attributes:
        value_state: Verdict marker stored on the line
        message: Explanation shown to the user
        metadata: Verifier-specific information
    """

    value_state: ValueState
    message: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """The REF marker belongs to the presentation, not to verifiers."""
        if self.value_state is ValueState.REF:
            raise ValueError("Verifiers cannot report the REF marker")


class BaseRuleVerifier(ABC):
    """
    Abstract base class for rule verifiers.

    Verifiers are pure readers: they receive a VerificationRequest and return
    a VerificationResult. They never receive live records.

    Example Implementation:
        class PremiseVerifier(BaseRuleVerifier):
            def verify(self, request):
                if request.premise:
                    return VerificationResult(ValueState.TRUE)
                return VerificationResult(ValueState.FALSE, "Not a premise")

            def get_supported_rules(self):
                return [Rule.NONE]
    """

    @abstractmethod
    def verify(self, request: VerificationRequest) -> VerificationResult:
        """
        Checks one line.

        Args:
            request: Text, rule and resolved citations of the line

        Returns:
            VerificationResult with the verdict marker
        """
        pass

    @abstractmethod
    def get_supported_rules(self) -> List[Rule]:
        """
        Return the rules this verifier can check.

        Returns:
            List of Rule members (Rule.NONE for premise checking)
        """
        pass

    def supports(self, rule: Rule) -> bool:
        """Whether this verifier can check the given rule."""
        return rule in self.get_supported_rules()
