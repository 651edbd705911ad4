"""Comparison of two spec snapshots."""

from .docs_impact import (
    DocsImpactResult,
    MarkdownDocFile,
    analyze_docs_impact,
    parse_markdown_file,
    parse_markdown_files,
)
from .enriched import DriftChange, SpecDiffWithDocs, diff_spec_with_docs, load_spec
from .members import MemberChange, diff_member_changes
from .semver import (
    CategorizedBreaking,
    VersionBump,
    calculate_next_version,
    categorize_breaking_changes,
    recommend_semver_bump,
)
from .spec_diff import SpecDiff, diff_spec

__all__ = [
    "CategorizedBreaking",
    "DocsImpactResult",
    "DriftChange",
    "MarkdownDocFile",
    "MemberChange",
    "SpecDiff",
    "SpecDiffWithDocs",
    "VersionBump",
    "analyze_docs_impact",
    "calculate_next_version",
    "categorize_breaking_changes",
    "diff_member_changes",
    "diff_spec",
    "diff_spec_with_docs",
    "load_spec",
    "parse_markdown_file",
    "parse_markdown_files",
    "recommend_semver_bump",
]
