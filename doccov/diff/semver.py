"""Breaking-change severity and semantic version recommendations."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..models import OpenPkgSpec
from .members import MemberChange
from .spec_diff import SpecDiff

_SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}
_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")


@dataclass
class CategorizedBreaking:
    id: str
    name: str
    kind: str
    severity: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "severity": self.severity,
            "reason": self.reason,
        }


@dataclass
class VersionBump:
    bump: str
    reason: str
    breaking_count: int = 0
    addition_count: int = 0
    docs_only_changes: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bump": self.bump,
            "reason": self.reason,
            "breakingCount": self.breaking_count,
            "additionCount": self.addition_count,
            "docsOnlyChanges": self.docs_only_changes,
        }


def categorize_breaking_changes(
    breaking: Sequence[str],
    base: OpenPkgSpec,
    head: OpenPkgSpec,
    member_changes: Optional[Sequence[MemberChange]] = None,
) -> List[CategorizedBreaking]:
    base_exports = {item.id: item for item in base.exports}
    head_exports = {item.id: item for item in head.exports}
    base_types = {item.id: item for item in base.types}
    member_changes = member_changes or []

    categorized: List[CategorizedBreaking] = []
    for item_id in breaking:
        old = base_exports.get(item_id)
        if old is None:
            old_type = base_types.get(item_id)
            kind = old_type.kind if old_type else "type"
            name = old_type.name if old_type else item_id
            removed = not any(t.id == item_id for t in head.types)
            categorized.append(
                CategorizedBreaking(
                    item_id, name, kind, "medium", "removed" if removed else "type definition changed"
                )
            )
            continue

        if item_id not in head_exports:
            severity = "high" if old.kind in ("function", "class") else "medium"
            categorized.append(CategorizedBreaking(item_id, old.name, old.kind, severity, "removed"))
            continue

        class_changes = [change for change in member_changes if change.class_name == item_id]
        if old.kind == "class" and class_changes:
            constructor_changed = any(change.member_kind == "constructor" for change in class_changes)
            method_removed = any(
                change.change_type == "removed" and change.member_kind == "method" for change in class_changes
            )
            if constructor_changed:
                reason = "constructor changed"
            elif method_removed:
                reason = "methods removed"
            else:
                reason = "methods changed"
            severity = "high" if constructor_changed or method_removed else "medium"
            categorized.append(CategorizedBreaking(item_id, old.name, "class", severity, reason))
            continue

        if old.kind in ("interface", "type"):
            categorized.append(
                CategorizedBreaking(item_id, old.name, old.kind, "medium", "type definition changed")
            )
        elif old.kind == "function":
            categorized.append(CategorizedBreaking(item_id, old.name, "function", "high", "signature changed"))
        else:
            categorized.append(CategorizedBreaking(item_id, old.name, old.kind, "low", "changed"))

    return sorted(categorized, key=lambda item: _SEVERITY_ORDER[item.severity])


def recommend_semver_bump(diff: SpecDiff) -> VersionBump:
    breaking = len(diff.breaking)
    additions = len(diff.non_breaking)
    docs_only = len(diff.docs_only)
    if breaking:
        return VersionBump(
            "major",
            f"{breaking} breaking change{'' if breaking == 1 else 's'} detected",
            breaking_count=breaking,
            addition_count=additions,
        )
    if additions:
        return VersionBump(
            "minor",
            f"{additions} non-breaking change{'' if additions == 1 else 's'} or addition{'' if additions == 1 else 's'}",
            addition_count=additions,
        )
    if docs_only:
        return VersionBump(
            "patch",
            f"{docs_only} documentation-only change{'' if docs_only == 1 else 's'}",
            docs_only_changes=True,
        )
    return VersionBump("none", "No changes detected")


def calculate_next_version(current: str, bump: str) -> str:
    """Apply ``bump`` to ``current``; on 0.x a major bump increments the minor."""
    if bump == "none":
        return current
    prefix = "v" if current.startswith("v") else ""
    match = _VERSION_PATTERN.match(current[len(prefix) :])
    if match is None:
        return current
    major, minor, patch = (int(part) for part in match.groups())
    if bump == "major" and major == 0:
        bump = "minor"
    if bump == "major":
        major, minor, patch = major + 1, 0, 0
    elif bump == "minor":
        minor, patch = minor + 1, 0
    elif bump == "patch":
        patch += 1
    else:
        raise ValueError(f"Unknown version bump: {bump}")
    return f"{prefix}{major}.{minor}.{patch}"


__all__ = [
    "CategorizedBreaking",
    "VersionBump",
    "calculate_next_version",
    "categorize_breaking_changes",
    "recommend_semver_bump",
]
