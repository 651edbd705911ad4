"""Documentation coverage scoring.

Each export is scored against up to five rules. A rule either applies to the
export or not; the score is the rounded share of applicable rules that are
satisfied, and 100 when no rule applies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..models import OpenPkgSpec, SpecExport, SpecParameter, SpecSignature
from .utils import declared_return_type

COVERAGE_RULES = ("description", "params", "returns", "examples", "throws")

_CALLABLE_KINDS = ("function", "class")
_VOID_RETURNS = {"void", "undefined", "never", "Promise<void>"}


@dataclass
class ExportCoverage:
    score: int
    applicable: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)


def compute_export_coverage(entry: SpecExport) -> ExportCoverage:
    applicable: List[str] = []
    missing: List[str] = []

    def check(rule: str, applies: bool, satisfied: Callable[[], bool]) -> None:
        if not applies:
            return
        applicable.append(rule)
        if not satisfied():
            missing.append(rule)

    parameters = _parameters(entry)
    returning = [signature for signature in entry.signatures if _has_meaningful_return(signature)]
    throwing = [item for signature in entry.signatures for item in signature.throws]

    check("description", True, lambda: bool((entry.description or "").strip()))
    check(
        "params",
        entry.kind in _CALLABLE_KINDS and bool(parameters),
        lambda: all((param.description or "").strip() for param in parameters),
    )
    check(
        "returns",
        entry.kind == "function" and bool(returning),
        lambda: all(
            signature.returns is not None and (signature.returns.description or "").strip()
            for signature in returning
        ),
    )
    check("examples", entry.kind in _CALLABLE_KINDS, lambda: any(e.strip() for e in entry.examples))
    check("throws", bool(throwing), lambda: all((item.description or "").strip() for item in throwing))

    if not applicable:
        return ExportCoverage(score=100)
    satisfied = len(applicable) - len(missing)
    return ExportCoverage(
        score=round(100 * satisfied / len(applicable)),
        applicable=applicable,
        missing=missing,
    )


def calculate_aggregate_coverage(spec: OpenPkgSpec) -> int:
    """Mean export score, using computed coverage where ``docs`` is absent."""
    if not spec.exports:
        return 100
    total = 0
    for entry in spec.exports:
        total += export_score(entry)
    return round(total / len(spec.exports))


def export_score(entry: SpecExport) -> int:
    if entry.docs is not None:
        return entry.docs.coverage_score
    return compute_export_coverage(entry).score


def _parameters(entry: SpecExport) -> List[SpecParameter]:
    signatures: Sequence[SpecSignature] = entry.signatures
    if entry.kind == "class" and not signatures:
        signatures = [
            signature
            for member in entry.members
            if member.kind == "constructor"
            for signature in member.signatures
        ]
    seen: set[str] = set()
    params: List[SpecParameter] = []
    for signature in signatures:
        for param in signature.parameters:
            if param.name in seen:
                continue
            seen.add(param.name)
            params.append(param)
    return params


def _has_meaningful_return(signature: SpecSignature) -> bool:
    returns = signature.returns
    if returns is None:
        return False
    rendered: Optional[str] = declared_return_type(returns)
    if rendered is None:
        return bool((returns.description or "").strip())
    return rendered.replace(" ", "") not in _VOID_RETURNS


__all__ = [
    "COVERAGE_RULES",
    "ExportCoverage",
    "calculate_aggregate_coverage",
    "compute_export_coverage",
    "export_score",
]
