"""Member-level changes for classes and interfaces marked breaking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..drift.utils import levenshtein, split_camel_case
from ..models import OpenPkgSpec, SpecMember
from .spec_diff import member_signature_changed

_MEMBER_KINDS = ("method", "property", "accessor", "constructor")


@dataclass
class MemberChange:
    class_name: str
    member_name: str
    member_kind: str
    change_type: str
    old_signature: Optional[str] = None
    new_signature: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "className": self.class_name,
            "memberName": self.member_name,
            "memberKind": self.member_kind,
            "changeType": self.change_type,
        }
        if self.old_signature is not None:
            data["oldSignature"] = self.old_signature
        if self.new_signature is not None:
            data["newSignature"] = self.new_signature
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


def diff_member_changes(base: OpenPkgSpec, head: OpenPkgSpec, changed_ids: Sequence[str]) -> List[MemberChange]:
    """Added, removed and re-signatured members of the given exports."""
    base_exports = {item.id: item for item in base.exports}
    head_exports = {item.id: item for item in head.exports}
    changes: List[MemberChange] = []
    seen: set[tuple[str, str, str]] = set()

    def record(change: MemberChange) -> None:
        key = (change.class_name, change.member_name, change.change_type)
        if key not in seen:
            seen.add(key)
            changes.append(change)

    for export_id in changed_ids:
        old_export = base_exports.get(export_id)
        new_export = head_exports.get(export_id)
        if old_export is None or new_export is None:
            continue
        if not old_export.members and not new_export.members:
            continue
        old_members = _member_map(old_export.members)
        new_members = _member_map(new_export.members)

        added = [name for name in new_members if name not in old_members]
        for name in added:
            member = new_members[name]
            record(
                MemberChange(
                    class_name=export_id,
                    member_name=name,
                    member_kind=_member_kind(member),
                    change_type="added",
                    new_signature=format_member_signature(member),
                )
            )
        for name, member in old_members.items():
            if name in new_members:
                continue
            record(
                MemberChange(
                    class_name=export_id,
                    member_name=name,
                    member_kind=_member_kind(member),
                    change_type="removed",
                    old_signature=format_member_signature(member),
                    suggestion=find_similar_member(name, list(new_members), added),
                )
            )
        for name, member in old_members.items():
            replacement = new_members.get(name)
            if replacement is not None and member_signature_changed(member, replacement):
                record(
                    MemberChange(
                        class_name=export_id,
                        member_name=name,
                        member_kind=_member_kind(replacement),
                        change_type="signature-changed",
                        old_signature=format_member_signature(member),
                        new_signature=format_member_signature(replacement),
                    )
                )
    return changes


def format_member_signature(member: SpecMember) -> str:
    if not member.signatures:
        return member.name
    params = []
    for param in member.signatures[0].parameters:
        optional = "" if param.required else "?"
        type_name = _short_type_name(param.schema)
        params.append(f"{param.name}{optional}: {type_name}" if type_name else f"{param.name}{optional}")
    return f"{member.name}({', '.join(params)})"


def find_similar_member(removed: str, current: Sequence[str], added: Sequence[str]) -> Optional[str]:
    """Suggest a likely replacement, preferring members added in the same change."""
    candidates = added or current
    removed_words = split_camel_case(removed)
    best: Optional[str] = None
    best_score = 0.0
    for name in candidates:
        if name == removed:
            continue
        words = split_camel_case(name)
        matching = 0
        suffix_match = bool(removed_words and words and removed_words[-1] == words[-1])
        if suffix_match:
            matching += 2
        matching += sum(1 for word in removed_words if word in words)
        word_score = matching / max(len(removed_words), len(words), 1)
        max_len = max(len(removed), len(name))
        lev_score = 1 - levenshtein(removed.lower(), name.lower()) / max_len
        total = word_score * 1.5 + lev_score if suffix_match else word_score + lev_score * 0.5
        if total > best_score and total >= 0.5:
            best_score = total
            best = name
    return f"Use {best} instead" if best else None


def _member_map(members: Sequence[SpecMember]) -> Dict[str, SpecMember]:
    mapped: Dict[str, SpecMember] = {}
    for member in members:
        name = member.name or member.id
        if name and name not in mapped:
            mapped[name] = member
    return mapped


def _member_kind(member: SpecMember) -> str:
    return member.kind if member.kind in _MEMBER_KINDS else "method"


def _short_type_name(schema: Mapping[str, Any] | None) -> Optional[str]:
    if not isinstance(schema, Mapping):
        return None
    ref = schema.get("$ref")
    if isinstance(ref, str):
        return ref.rsplit("/", 1)[-1]
    schema_type = schema.get("type")
    if isinstance(schema_type, str):
        return f"{schema_type[:27]}..." if len(schema_type) > 30 else schema_type
    return None


__all__ = ["MemberChange", "diff_member_changes", "find_similar_member", "format_member_signature"]
