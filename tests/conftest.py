# tests/conftest.py
"""
Shared fixtures for the Aris proof document tests.
"""

import pytest

from component_1_sentence_record import Rule
from component_5_proof_document import DocumentKind, ProofDocument


def structure(document):
    """Journaled and structural fields of every record, for comparisons."""
    return [
        (
            record.id,
            record.line_number,
            record.depth,
            list(record.indices),
            record.premise,
            record.subproof,
            record.rule,
            record.text,
            list(record.ref_lines),
            list(record.references),
        )
        for record in document
    ]


@pytest.fixture
def document():
    """Fixture: empty proof document"""
    return ProofDocument()


@pytest.fixture
def goal_document():
    """Fixture: empty goal container"""
    return ProofDocument(kind=DocumentKind.GOAL)


@pytest.fixture
def four_lines(document):
    """
    Fixture: premise, subproof opener, subproof member, closing line.

        1  A            premise
        2  | B          opens subproof
        3  | A & B      cn 1, 2
        4  B -> A & B   sp
    """
    premise = document.append("A", premise=True)
    opener = document.append("B", depth=1, subproof=True)
    member = document.append("A & B", depth=1, rule=Rule.CN, ref_lines=[1, 2])
    closing = document.append("B -> A & B", rule=Rule.SP)
    return document, premise, opener, member, closing
