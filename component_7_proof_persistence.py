"""
component_7_proof_persistence.py

Proof persistence for Aris

Feeds a document from raw line tuples and serializes it back to the same
shape. Citations are written as ordered, sentinel-terminated lists of line
numbers, never as identities.

Functions:
- ProofLineTuple: (text, rule, depth, subproof, cited_lines, premise)
- load_proof(): Insert tuples one at a time through ProofDocument.insert
- save_proof(): Serialize a document to tuples
- export_proof_to_json() / import_proof_from_json(): JSON file round trip
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from aris_exceptions import InputRejected, ProofFileError
from component_1_sentence_record import Rule, parse_ref_lines, serialize_ref_lines
from component_5_proof_document import DocumentKind, ProofDocument
from component_10_logging_config import PerformanceLogger, get_logger

logger = get_logger(__name__)

FORMAT_VERSION = 1


class ProofLineTuple(NamedTuple):
    """One persisted proof line."""

    text: str
    rule: str
    depth: int
    subproof: bool
    cited_lines: Tuple[int, ...]
    premise: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "rule": self.rule,
            "depth": self.depth,
            "subproof": self.subproof,
            "cited_lines": list(self.cited_lines),
            "premise": self.premise,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofLineTuple":
        return cls(
            text=data["text"],
            rule=data.get("rule", ""),
            depth=int(data.get("depth", 0)),
            subproof=bool(data.get("subproof", False)),
            cited_lines=tuple(data.get("cited_lines", ())),
            premise=bool(data.get("premise", False)),
        )


def load_proof(
    document: ProofDocument,
    lines: Iterable[ProofLineTuple],
    source: Optional[str] = None,
) -> int:
    """
    Loads tuples into an empty document.

    Each tuple goes through ProofDocument.insert; the journal is cleared
    afterwards so loading cannot be undone. On any failure the document is
    emptied again.

    Args:
        document: Empty target document
        lines: Tuples in proof order
        source: File name used in error context

    Returns:
        Number of loaded lines

    Raises:
        ProofFileError: Empty document required, malformed tuple, or a line
            the document rejected
    """
    if len(document):
        raise ProofFileError("Proofs load into an empty document", file_path=source)

    count = 0
    with PerformanceLogger(logger.logger, "load_proof", source=source or "<memory>"):
        try:
            for entry in lines:
                line = ProofLineTuple(*entry)
                try:
                    rule = Rule.from_abbreviation(line.rule)
                except ValueError as e:
                    raise ProofFileError(
                        f"Unknown rule '{line.rule}'",
                        file_path=source,
                        context={"line": count + 1},
                        original_exception=e,
                    ) from e
                document.append(
                    line.text,
                    rule=rule,
                    depth=line.depth,
                    subproof=line.subproof,
                    premise=line.premise,
                    ref_lines=parse_ref_lines(line.cited_lines),
                )
                count += 1
        except InputRejected as e:
            document.clear()
            raise ProofFileError(
                "Proof line was rejected while loading",
                file_path=source,
                context={"line": count + 1},
                original_exception=e,
            ) from e
        except (TypeError, ValueError) as e:
            document.clear()
            raise ProofFileError(
                "Malformed proof line",
                file_path=source,
                context={"line": count + 1},
                original_exception=e,
            ) from e
        except ProofFileError:
            document.clear()
            raise

    document.journal.clear()
    logger.info("Proof loaded", extra={"lines": count, "source": source or "<memory>"})
    return count


def save_proof(document: ProofDocument) -> List[ProofLineTuple]:
    """Serializes a document to tuples with sentinel-terminated citations."""
    return [
        ProofLineTuple(
            text=record.text,
            rule=record.rule.label,
            depth=record.depth,
            subproof=record.subproof,
            cited_lines=tuple(serialize_ref_lines(record.cited_lines)),
            premise=record.premise,
        )
        for record in document
    ]


def export_proof_to_json(
    document: ProofDocument,
    filepath: str,
    goals: Optional[ProofDocument] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Export a proof (and optionally its goals) to a JSON file.

    Raises:
        ProofFileError: File could not be written
    """
    data = {
        "version": FORMAT_VERSION,
        "created_at": datetime.now().isoformat(),
        "metadata": metadata or {},
        "lines": [line.to_dict() for line in save_proof(document)],
        "goals": [record.text for record in goals] if goals is not None else [],
    }
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ProofFileError(
            "Could not write proof file", file_path=str(filepath), original_exception=e
        ) from e
    logger.info(
        "Proof exported", extra={"file_path": str(filepath), "lines": len(data["lines"])}
    )


def import_proof_from_json(
    filepath: str,
    document: Optional[ProofDocument] = None,
    goals: Optional[ProofDocument] = None,
) -> ProofDocument:
    """
    Import a proof from a JSON file.

    Args:
        filepath: JSON file written by export_proof_to_json()
        document: Empty document to load into (a new one by default)
        goals: Goal container to fill with the stored goals

    Returns:
        The loaded document

    Raises:
        ProofFileError: Missing file, malformed JSON or rejected lines
    """
    path = Path(filepath)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ProofFileError(
            "Could not read proof file", file_path=str(path), original_exception=e
        ) from e
    except json.JSONDecodeError as e:
        raise ProofFileError(
            "Proof file is not valid JSON", file_path=str(path), original_exception=e
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("lines"), list):
        raise ProofFileError("Proof file has no line list", file_path=str(path))

    try:
        lines = [ProofLineTuple.from_dict(entry) for entry in data["lines"]]
    except (KeyError, TypeError, ValueError) as e:
        raise ProofFileError(
            "Malformed proof line", file_path=str(path), original_exception=e
        ) from e

    document = document if document is not None else ProofDocument()
    load_proof(document, lines, source=str(path))

    if goals is not None:
        if goals.kind is not DocumentKind.GOAL:
            raise ProofFileError("Goals load into a goal container", file_path=str(path))
        try:
            for text in data.get("goals", []):
                goals.append(text)
        except InputRejected as e:
            raise ProofFileError(
                "Goal was rejected while loading",
                file_path=str(path),
                original_exception=e,
            ) from e
        document.attach_goal(goals)

    return document
