"""Grouping and summarizing of drift findings."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List

from ..models import Drift
from .types import DRIFT_CATEGORIES, FIXABLE_DRIFT_TYPES, DriftCategory, DriftSummary, DriftType


def categorize_drift(drift: Drift) -> Drift:
    """Return ``drift`` with its category and fixability derived from its type."""
    drift_type = DriftType(drift.type)
    return replace(
        drift,
        category=DRIFT_CATEGORIES[drift_type].value,
        fixable=drift_type in FIXABLE_DRIFT_TYPES,
    )


def group_drifts_by_category(drifts: Iterable[Drift]) -> Dict[str, List[Drift]]:
    grouped: Dict[str, List[Drift]] = {category.value: [] for category in DriftCategory}
    for drift in drifts:
        categorized = categorize_drift(drift)
        grouped[categorized.category].append(categorized)
    return grouped


def get_drift_summary(drifts: Iterable[Drift]) -> DriftSummary:
    items = list(drifts)
    grouped = group_drifts_by_category(items)
    return DriftSummary(
        total=len(items),
        by_category={category: len(found) for category, found in grouped.items()},
        fixable=sum(1 for found in grouped.values() for drift in found if drift.fixable),
    )


def format_drift_summary_line(summary: DriftSummary) -> str:
    if summary.total == 0:
        return "No drift detected"
    parts = [
        f"{summary.by_category.get(category.value, 0)} {category.value}"
        for category in DriftCategory
        if summary.by_category.get(category.value, 0) > 0
    ]
    fixable_note = f" ({summary.fixable} auto-fixable)" if summary.fixable > 0 else ""
    return f"{summary.total} issues ({', '.join(parts)}){fixable_note}"


__all__ = [
    "categorize_drift",
    "format_drift_summary_line",
    "get_drift_summary",
    "group_drifts_by_category",
]
