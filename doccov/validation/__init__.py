"""JSON Schema validation of specs and coverage reports."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, List, Sequence

from jsonschema import Draft202012Validator

SCHEMA_FILES = {
    "openpkg": "openpkg.schema.json",
    "doccov": "doccov.schema.json",
}


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


class SpecValidationError(RuntimeError):
    """Raised when a spec or report does not match its JSON schema."""

    def __init__(self, kind: str, issues: Sequence[ValidationIssue]) -> None:
        self.kind = kind
        self.issues: List[ValidationIssue] = list(issues)
        first = self.issues[0] if self.issues else None
        detail = f": {first.path}: {first.message}" if first else ""
        more = f" (+{len(self.issues) - 1} more)" if len(self.issues) > 1 else ""
        super().__init__(f"Invalid {kind} document{detail}{more}")


@lru_cache(maxsize=None)
def load_schema(kind: str) -> Dict[str, Any]:
    try:
        filename = SCHEMA_FILES[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown schema: {kind}") from exc
    text = resources.files(__package__).joinpath("schemas", filename).read_text(encoding="utf-8")
    return json.loads(text)


def collect_issues(document: Any, kind: str) -> List[ValidationIssue]:
    validator = Draft202012Validator(load_schema(kind))
    issues = [
        ValidationIssue(path=_format_path(error.absolute_path), message=error.message)
        for error in validator.iter_errors(document)
    ]
    return sorted(issues, key=lambda issue: issue.path)


def validate_spec(document: Any) -> None:
    issues = collect_issues(document, "openpkg")
    if issues:
        raise SpecValidationError("openpkg", issues)


def validate_report(document: Any) -> None:
    issues = collect_issues(document, "doccov")
    if issues:
        raise SpecValidationError("doccov", issues)


def _format_path(path: Sequence[Any]) -> str:
    text = "$"
    for part in path:
        text += f"[{part}]" if isinstance(part, int) else f".{part}"
    return text


__all__ = [
    "SpecValidationError",
    "ValidationIssue",
    "collect_issues",
    "load_schema",
    "validate_report",
    "validate_spec",
]
