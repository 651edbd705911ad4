"""Drift detection across a spec, export enrichment and the coverage report."""

from __future__ import annotations

import copy
from datetime import UTC, datetime
from typing import Any, Dict, List, Mapping, Optional

from ..extract.parser import SourceParser
from ..logging import get_logger
from ..models import DocsMetadata, Drift, OpenPkgSpec, SpecExport
from .categorize import get_drift_summary
from .coverage import COVERAGE_RULES, compute_export_coverage
from .examples import (
    ExampleResults,
    detect_example_assertion_failures,
    detect_example_drift,
    detect_example_runtime_errors,
    detect_example_syntax_errors,
)
from .semantic import detect_broken_links, detect_deprecated_drift, detect_visibility_drift
from .structural import (
    detect_async_mismatch,
    detect_generic_constraint_drift,
    detect_optionality_drift,
    detect_param_drift,
    detect_param_type_drift,
    detect_property_type_drift,
    detect_return_type_drift,
)
from .types import ExportInfo, ExportRegistry

DOCCOV_REPORT_VERSION = "1.0.0"

_LOGGER = get_logger("drift")


def build_export_registry(spec: OpenPkgSpec) -> ExportRegistry:
    registry = ExportRegistry()
    for entry in spec.exports:
        info = ExportInfo(
            name=entry.name,
            kind=entry.kind or "unknown",
            is_callable=entry.kind in ("function", "class"),
        )
        registry.exports[entry.name] = info
        registry.all.add(entry.name)
        if entry.id:
            registry.exports[entry.id] = info
            registry.all.add(entry.id)
    for spec_type in spec.types:
        registry.types.add(spec_type.name)
        registry.all.add(spec_type.name)
        if spec_type.id:
            registry.types.add(spec_type.id)
            registry.all.add(spec_type.id)
    return registry


def compute_export_drift(
    entry: SpecExport,
    registry: Optional[ExportRegistry] = None,
    example_results: Optional[ExampleResults] = None,
    *,
    parser: Optional[SourceParser] = None,
) -> List[Drift]:
    """Run every drift rule against one export, in a fixed order."""
    parser = parser or SourceParser()
    drifts: List[Drift] = [
        *detect_param_drift(entry),
        *detect_optionality_drift(entry),
        *detect_param_type_drift(entry),
        *detect_return_type_drift(entry),
        *detect_generic_constraint_drift(entry),
        *detect_deprecated_drift(entry),
        *detect_visibility_drift(entry),
        *detect_example_drift(entry, registry, parser=parser),
        *detect_broken_links(entry, registry),
        *detect_example_syntax_errors(entry, parser=parser),
        *detect_async_mismatch(entry),
        *detect_property_type_drift(entry),
    ]
    if example_results:
        drifts.extend(detect_example_runtime_errors(entry, example_results))
        drifts.extend(detect_example_assertion_failures(entry, example_results))
    return drifts


def compute_drift(
    spec: OpenPkgSpec,
    example_results: Optional[Mapping[str, ExampleResults]] = None,
) -> Dict[str, List[Drift]]:
    """Drift findings for every export, keyed by export id."""
    registry = build_export_registry(spec)
    parser = SourceParser()
    results = example_results or {}
    return {
        entry.id or entry.name: compute_export_drift(
            entry, registry, results.get(entry.id), parser=parser
        )
        for entry in spec.exports
    }


def enrich_spec(
    spec: OpenPkgSpec,
    example_results: Optional[Mapping[str, ExampleResults]] = None,
    *,
    keep_existing: bool = False,
) -> OpenPkgSpec:
    """Return a copy of ``spec`` with coverage and drift attached to every export.

    With ``keep_existing``, exports that already carry ``docs`` are left alone.
    """
    enriched = copy.deepcopy(spec)
    drift_by_export = compute_drift(enriched, example_results)
    for entry in enriched.exports:
        if keep_existing and entry.docs is not None:
            continue
        coverage = compute_export_coverage(entry)
        entry.docs = DocsMetadata(
            coverage_score=coverage.score,
            missing=list(coverage.missing),
            drift=drift_by_export.get(entry.id or entry.name, []),
        )
    _LOGGER.debug("Enriched %d export(s) with coverage and drift", len(enriched.exports))
    return enriched


def build_doccov_report(
    spec: OpenPkgSpec,
    spec_path: str = "openpkg.json",
    example_results: Optional[Mapping[str, ExampleResults]] = None,
) -> Dict[str, Any]:
    """Build the ``doccov.json`` artifact for ``spec``.

    Exports that already carry ``docs`` are reported as-is; the rest are
    enriched first.
    """
    if any(entry.docs is None for entry in spec.exports):
        spec = enrich_spec(spec, example_results, keep_existing=True)

    missing_by_rule = {rule: 0 for rule in COVERAGE_RULES}
    all_drift: List[Drift] = []
    exports: Dict[str, Any] = {}
    total_score = 0
    documented = 0
    for entry in spec.exports:
        docs = entry.docs or DocsMetadata()
        total_score += docs.coverage_score
        if docs.coverage_score == 100:
            documented += 1
        for rule in docs.missing:
            missing_by_rule[rule] = missing_by_rule.get(rule, 0) + 1
        all_drift.extend(docs.drift)
        item: Dict[str, Any] = {"coverageScore": docs.coverage_score}
        if docs.missing:
            item["missing"] = list(docs.missing)
        if docs.drift:
            item["drift"] = [drift.to_dict() for drift in docs.drift]
        exports[entry.id or entry.name] = item

    drift_summary = get_drift_summary(all_drift)
    summary: Dict[str, Any] = {
        "score": round(total_score / len(spec.exports)) if spec.exports else 100,
        "totalExports": len(spec.exports),
        "documentedExports": documented,
        "missingByRule": missing_by_rule,
        "drift": {
            "total": drift_summary.total,
            "fixable": drift_summary.fixable,
            "byCategory": dict(drift_summary.by_category),
        },
    }
    if example_results:
        runs = [result for per_export in example_results.values() for result in per_export.values()]
        passed = sum(1 for result in runs if result.success)
        summary["examples"] = {"total": len(runs), "passed": passed, "failed": len(runs) - passed}

    return {
        "doccov": DOCCOV_REPORT_VERSION,
        "source": {
            "file": spec_path,
            "specVersion": spec.openpkg,
            "packageName": spec.meta.name,
            "packageVersion": spec.meta.version,
        },
        "generatedAt": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        "summary": summary,
        "exports": exports,
    }


__all__ = [
    "DOCCOV_REPORT_VERSION",
    "build_doccov_report",
    "build_export_registry",
    "compute_drift",
    "compute_export_drift",
    "enrich_spec",
]
