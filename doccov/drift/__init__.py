"""Documentation drift detection and coverage scoring."""

from .categorize import (
    categorize_drift,
    format_drift_summary_line,
    get_drift_summary,
    group_drifts_by_category,
)
from .coverage import (
    COVERAGE_RULES,
    ExportCoverage,
    calculate_aggregate_coverage,
    compute_export_coverage,
)
from .detector import (
    build_doccov_report,
    build_export_registry,
    compute_drift,
    compute_export_drift,
    enrich_spec,
)
from .types import (
    DRIFT_CATEGORIES,
    FIXABLE_DRIFT_TYPES,
    DriftCategory,
    DriftSummary,
    DriftType,
    ExportInfo,
    ExportRegistry,
)
from .utils import find_closest_match

__all__ = [
    "COVERAGE_RULES",
    "DRIFT_CATEGORIES",
    "DriftCategory",
    "DriftSummary",
    "DriftType",
    "ExportCoverage",
    "ExportInfo",
    "ExportRegistry",
    "FIXABLE_DRIFT_TYPES",
    "build_doccov_report",
    "build_export_registry",
    "calculate_aggregate_coverage",
    "categorize_drift",
    "compute_drift",
    "compute_export_coverage",
    "compute_export_drift",
    "enrich_spec",
    "find_closest_match",
    "format_drift_summary_line",
    "get_drift_summary",
    "group_drifts_by_category",
]
