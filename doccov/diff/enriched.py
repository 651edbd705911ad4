"""Spec diff enriched with coverage, drift, member and documentation impact."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..drift import enrich_spec
from ..logging import get_logger
from ..models import Drift, OpenPkgSpec, SpecExport
from ..validation import validate_spec
from .docs_impact import DocsImpactResult, MarkdownDocFile, analyze_docs_impact, parse_markdown_files
from .members import MemberChange, diff_member_changes
from .semver import CategorizedBreaking, VersionBump, categorize_breaking_changes, recommend_semver_bump
from .spec_diff import SpecDiff, diff_spec

SpecInput = Union[OpenPkgSpec, Mapping[str, Any]]
MarkdownInput = Union[MarkdownDocFile, Mapping[str, str]]

_LOGGER = get_logger("diff")


@dataclass
class DriftChange:
    export_id: str
    type: str
    issue: str
    target: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"exportId": self.export_id, "type": self.type, "issue": self.issue}
        if self.target is not None:
            data["target"] = self.target
        return data


@dataclass
class SpecDiffWithDocs:
    breaking: List[str] = field(default_factory=list)
    non_breaking: List[str] = field(default_factory=list)
    docs_only: List[str] = field(default_factory=list)
    coverage_delta: float = 0.0
    old_coverage: float = 0.0
    new_coverage: float = 0.0
    drift_introduced: List[DriftChange] = field(default_factory=list)
    drift_resolved: List[DriftChange] = field(default_factory=list)
    new_undocumented: List[str] = field(default_factory=list)
    improved_exports: List[str] = field(default_factory=list)
    regressed_exports: List[str] = field(default_factory=list)
    member_changes: List[MemberChange] = field(default_factory=list)
    categorized_breaking: List[CategorizedBreaking] = field(default_factory=list)
    docs_impact: Optional[DocsImpactResult] = None
    recommended_bump: Optional[VersionBump] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "breaking": list(self.breaking),
            "nonBreaking": list(self.non_breaking),
            "docsOnly": list(self.docs_only),
            "coverageDelta": self.coverage_delta,
            "oldCoverage": self.old_coverage,
            "newCoverage": self.new_coverage,
            "driftIntroduced": [item.to_dict() for item in self.drift_introduced],
            "driftResolved": [item.to_dict() for item in self.drift_resolved],
            "newUndocumented": list(self.new_undocumented),
            "improvedExports": list(self.improved_exports),
            "regressedExports": list(self.regressed_exports),
            "memberChanges": [change.to_dict() for change in self.member_changes],
            "categorizedBreaking": [item.to_dict() for item in self.categorized_breaking],
        }
        if self.docs_impact is not None:
            data["docsImpact"] = self.docs_impact.to_dict()
        if self.recommended_bump is not None:
            data["recommendedBump"] = self.recommended_bump.to_dict()
        return data


def load_spec(value: SpecInput) -> OpenPkgSpec:
    """Validate a spec document (or model) and return the model."""
    if isinstance(value, OpenPkgSpec):
        validate_spec(value.to_dict())
        return value
    validate_spec(value)
    return OpenPkgSpec.from_dict(value)


def diff_spec_with_docs(
    base: SpecInput,
    head: SpecInput,
    *,
    markdown_files: Optional[Sequence[MarkdownInput]] = None,
) -> SpecDiffWithDocs:
    """Full comparison of two specs; raises ``SpecValidationError`` on invalid input."""
    base_spec = enrich_spec(load_spec(base), keep_existing=True)
    head_spec = enrich_spec(load_spec(head), keep_existing=True)

    structural = diff_spec(base_spec, head_spec)
    member_changes = diff_member_changes(base_spec, head_spec, structural.breaking)
    result = SpecDiffWithDocs(
        breaking=list(structural.breaking),
        non_breaking=list(structural.non_breaking),
        docs_only=list(structural.docs_only),
        member_changes=member_changes,
        categorized_breaking=categorize_breaking_changes(
            structural.breaking, base_spec, head_spec, member_changes
        ),
        recommended_bump=recommend_semver_bump(structural),
    )
    _apply_coverage(result, base_spec, head_spec)

    if markdown_files:
        files = _markdown_files(markdown_files)
        result.docs_impact = analyze_docs_impact(
            structural,
            files,
            [entry.name for entry in head_spec.exports],
            member_changes,
        )
    _LOGGER.debug(
        "Diff: %d breaking, %d non-breaking, %d docs-only",
        len(result.breaking),
        len(result.non_breaking),
        len(result.docs_only),
    )
    return result


def _apply_coverage(result: SpecDiffWithDocs, base: OpenPkgSpec, head: OpenPkgSpec) -> None:
    base_by_id = {entry.id: entry for entry in base.exports}
    head_entries = head.exports

    result.old_coverage = _mean_score(base.exports)
    result.new_coverage = _mean_score(head_entries)
    result.coverage_delta = round(result.new_coverage - result.old_coverage, 1)

    for entry in head_entries:
        new_score = _score(entry)
        old_entry = base_by_id.get(entry.id)
        new_findings = _finding_keys(entry)
        if old_entry is None:
            if new_score < 100:
                result.new_undocumented.append(entry.id)
            result.drift_introduced.extend(_changes(entry.id, new_findings))
            continue
        old_score = _score(old_entry)
        if new_score > old_score:
            result.improved_exports.append(entry.id)
        elif new_score < old_score:
            result.regressed_exports.append(entry.id)
        old_findings = _finding_keys(old_entry)
        result.drift_introduced.extend(
            _changes(entry.id, [key for key in new_findings if key not in old_findings])
        )
        result.drift_resolved.extend(
            _changes(entry.id, [key for key in old_findings if key not in new_findings])
        )


def _score(entry: SpecExport) -> int:
    return entry.docs.coverage_score if entry.docs is not None else 0


def _mean_score(entries: Sequence[SpecExport]) -> float:
    if not entries:
        return 100.0
    return round(sum(_score(entry) for entry in entries) / len(entries), 1)


def _finding_keys(entry: SpecExport) -> List[Tuple[str, Optional[str], str]]:
    drifts: List[Drift] = entry.docs.drift if entry.docs is not None else []
    keys: List[Tuple[str, Optional[str], str]] = []
    for drift in drifts:
        key = (drift.type, drift.target, drift.issue)
        if key not in keys:
            keys.append(key)
    return keys


def _changes(export_id: str, keys: Sequence[Tuple[str, Optional[str], str]]) -> List[DriftChange]:
    return [
        DriftChange(export_id=export_id, type=drift_type, issue=issue, target=target)
        for drift_type, target, issue in keys
    ]


def _markdown_files(files: Sequence[MarkdownInput]) -> List[MarkdownDocFile]:
    parsed: List[MarkdownDocFile] = []
    raw: List[Mapping[str, str]] = []
    for item in files:
        if isinstance(item, MarkdownDocFile):
            parsed.append(item)
        else:
            raw.append(item)
    return parsed + parse_markdown_files(raw)


__all__ = ["DriftChange", "SpecDiffWithDocs", "diff_spec_with_docs", "load_spec"]
