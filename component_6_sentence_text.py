"""
component_6_sentence_text.py

Sentence text handling for Aris

Sentence text embeds logical connectives. The editor stores the canonical
glyph for each connective; typed input may use an ASCII form, which is
converted on entry. Everything from the comment character on is dropped
before the text is stored.

Functions:
- normalize_text(): Strip the comment and convert ASCII connectives
- strip_comment(): Drop the comment part of a line
- to_ascii(): Render canonical text with ASCII connectives (plain-text export)
- find_matching_paren(): Parenthesis matching for the presentation layer
- connective_for_shortcut(): Control-key shortcuts of the connective toolbar
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from common.constants import COMMENT_CHAR


@dataclass(frozen=True)
class Connective:
    """A logical connective with its canonical glyph and ASCII input form."""

    name: str
    glyph: str
    ascii: str


AND = Connective("and", "∧", "&")
OR = Connective("or", "∨", "|")
NOT = Connective("not", "¬", "~")
CONDITIONAL = Connective("conditional", "→", "->")
BICONDITIONAL = Connective("biconditional", "↔", "<->")
UNIVERSAL = Connective("universal", "∀", "@")
EXISTENTIAL = Connective("existential", "∃", "$")
TAUTOLOGY = Connective("tautology", "⊤", "^T")
CONTRADICTION = Connective("contradiction", "⊥", "^F")
ELEMENT_OF = Connective("element_of", "∈", "%")
EMPTY_SET = Connective("empty_set", "∅", "{}")

CONNECTIVES: List[Connective] = [
    AND,
    OR,
    NOT,
    CONDITIONAL,
    BICONDITIONAL,
    UNIVERSAL,
    EXISTENTIAL,
    TAUTOLOGY,
    CONTRADICTION,
    ELEMENT_OF,
    EMPTY_SET,
]

# Longest ASCII form first so "<->" wins over "->"
_ASCII_ORDER: List[Connective] = sorted(
    CONNECTIVES, key=lambda conn: len(conn.ascii), reverse=True
)

# Control-key shortcuts of the connective toolbar
SHORTCUT_KEYS: Dict[str, Connective] = {
    "7": AND,
    "backslash": OR,
    "grave": NOT,
    "4": CONDITIONAL,
    "5": BICONDITIONAL,
    "2": UNIVERSAL,
    "3": EXISTENTIAL,
    "1": TAUTOLOGY,
    "6": CONTRADICTION,
    "semicolon": ELEMENT_OF,
    "period": EMPTY_SET,
}


def strip_comment(text: str) -> str:
    """Drops everything from the comment character on."""
    position = text.find(COMMENT_CHAR)
    if position == -1:
        return text
    return text[:position]


def normalize_text(text: Optional[str]) -> str:
    """
    Converts typed text into stored sentence text.

    The comment is stripped first, then every ASCII connective is replaced
    by its glyph. Canonical glyphs already present are kept.

    Args:
        text: Raw typed text (None is treated as empty)

    Returns:
        Stored sentence text
    """
    if not text:
        return ""

    text = strip_comment(text)
    result = []
    i = 0
    while i < len(text):
        for conn in _ASCII_ORDER:
            if text.startswith(conn.ascii, i):
                result.append(conn.glyph)
                i += len(conn.ascii)
                break
        else:
            result.append(text[i])
            i += 1
    return "".join(result)


def to_ascii(text: str) -> str:
    """Replaces every canonical glyph with its ASCII form."""
    for conn in CONNECTIVES:
        text = text.replace(conn.glyph, conn.ascii)
    return text


def connective_for_shortcut(key: str) -> Optional[Connective]:
    """Connective inserted by Control + key, None if the key is not bound."""
    return SHORTCUT_KEYS.get(key)


def find_matching_paren(text: str, offset: int) -> int:
    """
    Finds the parenthesis matching the one at offset.

    Args:
        text: Sentence text
        offset: Position of an opening or closing parenthesis

    Returns:
        Position of the match, -1 if it is unbalanced

    Raises:
        ValueError: No parenthesis at offset
    """
    if offset < 0 or offset >= len(text) or text[offset] not in "()":
        raise ValueError(f"No parenthesis at offset {offset}")

    step, opening, closing = (1, "(", ")") if text[offset] == "(" else (-1, ")", "(")
    depth = 0
    i = offset
    while 0 <= i < len(text):
        if text[i] == opening:
            depth += 1
        elif text[i] == closing:
            depth -= 1
            if depth == 0:
                return i
        i += step
    return -1
