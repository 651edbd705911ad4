"""Drift vocabulary: finding types, categories and the export registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Set

from ..models import Drift


class DriftType(str, Enum):
    PARAM_MISMATCH = "param-mismatch"
    PARAM_TYPE_MISMATCH = "param-type-mismatch"
    RETURN_TYPE_MISMATCH = "return-type-mismatch"
    GENERIC_CONSTRAINT_MISMATCH = "generic-constraint-mismatch"
    OPTIONALITY_MISMATCH = "optionality-mismatch"
    DEPRECATED_MISMATCH = "deprecated-mismatch"
    VISIBILITY_MISMATCH = "visibility-mismatch"
    ASYNC_MISMATCH = "async-mismatch"
    PROPERTY_TYPE_DRIFT = "property-type-drift"
    EXAMPLE_DRIFT = "example-drift"
    EXAMPLE_SYNTAX_ERROR = "example-syntax-error"
    EXAMPLE_RUNTIME_ERROR = "example-runtime-error"
    EXAMPLE_ASSERTION_FAILED = "example-assertion-failed"
    BROKEN_LINK = "broken-link"


class DriftCategory(str, Enum):
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    EXAMPLE = "example"


DRIFT_CATEGORIES: Dict[DriftType, DriftCategory] = {
    DriftType.PARAM_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.PARAM_TYPE_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.RETURN_TYPE_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.GENERIC_CONSTRAINT_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.OPTIONALITY_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.ASYNC_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.PROPERTY_TYPE_DRIFT: DriftCategory.STRUCTURAL,
    DriftType.DEPRECATED_MISMATCH: DriftCategory.SEMANTIC,
    DriftType.VISIBILITY_MISMATCH: DriftCategory.SEMANTIC,
    DriftType.BROKEN_LINK: DriftCategory.SEMANTIC,
    DriftType.EXAMPLE_DRIFT: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_SYNTAX_ERROR: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_RUNTIME_ERROR: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_ASSERTION_FAILED: DriftCategory.EXAMPLE,
}

FIXABLE_DRIFT_TYPES = frozenset(
    {
        DriftType.PARAM_MISMATCH,
        DriftType.PARAM_TYPE_MISMATCH,
        DriftType.OPTIONALITY_MISMATCH,
        DriftType.RETURN_TYPE_MISMATCH,
        DriftType.GENERIC_CONSTRAINT_MISMATCH,
        DriftType.EXAMPLE_ASSERTION_FAILED,
        DriftType.DEPRECATED_MISMATCH,
        DriftType.ASYNC_MISMATCH,
        DriftType.PROPERTY_TYPE_DRIFT,
    }
)


def make_drift(
    drift_type: DriftType,
    issue: str,
    *,
    target: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> Drift:
    """Build a finding with its category and fixability filled in."""
    return Drift(
        type=drift_type.value,
        issue=issue,
        category=DRIFT_CATEGORIES[drift_type].value,
        target=target,
        suggestion=suggestion,
        fixable=drift_type in FIXABLE_DRIFT_TYPES,
    )


@dataclass(frozen=True)
class ExportInfo:
    name: str
    kind: str
    is_callable: bool


@dataclass
class ExportRegistry:
    """Names known to a spec, used to validate links and example references."""

    exports: Dict[str, ExportInfo] = field(default_factory=dict)
    types: Set[str] = field(default_factory=set)
    all: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class ClosestMatch:
    value: str
    distance: int


@dataclass
class DriftSummary:
    total: int
    by_category: Dict[str, int]
    fixable: int

    def to_dict(self) -> Dict[str, object]:
        return {"total": self.total, "byCategory": dict(self.by_category), "fixable": self.fixable}


__all__ = [
    "ClosestMatch",
    "DRIFT_CATEGORIES",
    "Drift",
    "DriftCategory",
    "DriftSummary",
    "DriftType",
    "ExportInfo",
    "ExportRegistry",
    "FIXABLE_DRIFT_TYPES",
    "make_drift",
]
