"""Structural comparison of two spec snapshots."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from ..models import OpenPkgSpec, SpecExport, SpecMember, SpecParameter, SpecSignature, SpecType

BREAKING = "breaking"
NON_BREAKING = "nonBreaking"

# Keys whose changes never affect consumers of the API.
DOC_KEYS = frozenset({"description", "examples", "tags", "source", "docs", "rawComments", "deprecated"})


@dataclass
class SpecDiff:
    breaking: List[str] = field(default_factory=list)
    non_breaking: List[str] = field(default_factory=list)
    docs_only: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.breaking or self.non_breaking or self.docs_only)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "breaking": list(self.breaking),
            "nonBreaking": list(self.non_breaking),
            "docsOnly": list(self.docs_only),
        }


def diff_spec(base: OpenPkgSpec, head: OpenPkgSpec) -> SpecDiff:
    """Classify every export and type id as breaking, non-breaking or docs-only."""
    result = SpecDiff()
    base_exports = {item.id: item for item in base.exports if item.id}
    head_exports = {item.id: item for item in head.exports if item.id}
    _diff_collection(result, base_exports, head_exports, _classify_export_change)

    base_types = {item.id: item for item in base.types if item.id}
    head_types = {item.id: item for item in head.types if item.id}
    classified = set(result.breaking) | set(result.non_breaking) | set(result.docs_only)
    _diff_collection(result, base_types, head_types, _classify_type_change, skip=classified)
    return result


def strip_doc_fields(value: Any, *, in_properties: bool = False) -> Any:
    """Drop documentation-only keys recursively.

    Keys of a ``properties`` mapping are property names, not doc keys, so
    they are kept.
    """
    if isinstance(value, list):
        return [strip_doc_fields(item) for item in value]
    if not isinstance(value, Mapping):
        return value
    cleaned: Dict[str, Any] = {}
    for key, item in value.items():
        if not in_properties and key in DOC_KEYS:
            continue
        cleaned[key] = strip_doc_fields(item, in_properties=(key == "properties" and not in_properties))
    return cleaned


def canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def signatures_equal(a: SpecSignature, b: SpecSignature) -> bool:
    if len(a.parameters) != len(b.parameters):
        return False
    for left, right in zip(a.parameters, b.parameters):
        if left.name != right.name or left.required != right.required:
            return False
        if canonical(strip_doc_fields(left.schema)) != canonical(strip_doc_fields(right.schema)):
            return False
    return _returns_key(a) == _returns_key(b)


def member_signature_changed(old: SpecMember, new: SpecMember) -> bool:
    if len(old.signatures) != len(new.signatures):
        return True
    if any(not signatures_equal(a, b) for a, b in zip(old.signatures, new.signatures)):
        return True
    return canonical(strip_doc_fields(old.schema)) != canonical(strip_doc_fields(new.schema))


# ----------------------------------------------------------------------
# Internal helpers


def _diff_collection(
    result: SpecDiff,
    base: Mapping[str, Any],
    head: Mapping[str, Any],
    classify: Callable[[Any, Any], str],
    *,
    skip: Set[str] = frozenset(),
) -> None:
    for item_id, old in base.items():
        if item_id in skip:
            continue
        new = head.get(item_id)
        if new is None:
            result.breaking.append(item_id)
            continue
        old_data, new_data = old.to_dict(), new.to_dict()
        if canonical(old_data) == canonical(new_data):
            continue
        if canonical(strip_doc_fields(old_data)) == canonical(strip_doc_fields(new_data)):
            result.docs_only.append(item_id)
            continue
        if classify(old, new) == BREAKING:
            result.breaking.append(item_id)
        else:
            result.non_breaking.append(item_id)
    for item_id in head:
        if item_id not in base and item_id not in skip:
            result.non_breaking.append(item_id)


def _classify_export_change(old: SpecExport, new: SpecExport) -> str:
    if old.kind != new.kind:
        return BREAKING
    verdicts = [
        _compare_signature_lists(old.signatures, new.signatures),
        _compare_members(old.members, new.members),
        _compare_schema(old.schema, new.schema),
    ]
    if canonical([tp.to_dict() for tp in old.type_parameters]) != canonical(
        [tp.to_dict() for tp in new.type_parameters]
    ):
        verdicts.append(BREAKING)
    if canonical(old.flags) != canonical(new.flags):
        verdicts.append(BREAKING)
    return BREAKING if BREAKING in verdicts else NON_BREAKING


def _classify_type_change(old: SpecType, new: SpecType) -> str:
    if old.kind != new.kind:
        return BREAKING
    if canonical([tp.to_dict() for tp in old.type_parameters]) != canonical(
        [tp.to_dict() for tp in new.type_parameters]
    ):
        return BREAKING
    verdicts = [_compare_members(old.members, new.members), _compare_schema(old.schema, new.schema)]
    return BREAKING if BREAKING in verdicts else NON_BREAKING


def _compare_signature_lists(old: List[SpecSignature], new: List[SpecSignature]) -> Optional[str]:
    if len(new) < len(old):
        return BREAKING
    verdicts = [_compare_signature(a, b) for a, b in zip(old, new)]
    if BREAKING in verdicts:
        return BREAKING
    if len(new) > len(old) or NON_BREAKING in verdicts:
        return NON_BREAKING
    return None


def _compare_signature(old: SpecSignature, new: SpecSignature) -> Optional[str]:
    verdict: Optional[str] = None
    if _returns_key(old) != _returns_key(new):
        return BREAKING
    if canonical([tp.to_dict() for tp in old.type_parameters]) != canonical(
        [tp.to_dict() for tp in new.type_parameters]
    ):
        return BREAKING
    for index, old_param in enumerate(old.parameters):
        if index >= len(new.parameters):
            return BREAKING
        param_verdict = _compare_parameter(old_param, new.parameters[index])
        if param_verdict == BREAKING:
            return BREAKING
        verdict = verdict or param_verdict
    for added in new.parameters[len(old.parameters) :]:
        if added.required and not added.rest:
            return BREAKING
        verdict = NON_BREAKING
    return verdict


def _compare_parameter(old: SpecParameter, new: SpecParameter) -> Optional[str]:
    verdict: Optional[str] = None
    if not old.required and new.required:
        return BREAKING
    if old.required and not new.required:
        verdict = NON_BREAKING
    if old.rest != new.rest:
        return BREAKING
    old_schema = strip_doc_fields(old.schema)
    new_schema = strip_doc_fields(new.schema)
    if canonical(old_schema) != canonical(new_schema):
        if not _is_widening(old_schema, new_schema):
            return BREAKING
        verdict = NON_BREAKING
    if old.name != new.name:
        verdict = verdict or NON_BREAKING
    return verdict


def _compare_members(old: List[SpecMember], new: List[SpecMember]) -> Optional[str]:
    old_by_name = {_member_key(member): member for member in old}
    new_by_name = {_member_key(member): member for member in new}
    verdict: Optional[str] = None
    for key, member in old_by_name.items():
        replacement = new_by_name.get(key)
        if replacement is None:
            return BREAKING
        if member_signature_changed(member, replacement):
            changed = _compare_signature_lists(member.signatures, replacement.signatures)
            schema_change = _compare_schema(member.schema, replacement.schema)
            if changed == BREAKING or schema_change == BREAKING:
                return BREAKING
            verdict = NON_BREAKING
        elif member.optional != replacement.optional or member.visibility != replacement.visibility:
            return BREAKING
    if any(key not in old_by_name for key in new_by_name):
        verdict = NON_BREAKING
    return verdict


def _compare_schema(old: Optional[Mapping[str, Any]], new: Optional[Mapping[str, Any]]) -> Optional[str]:
    old_schema = strip_doc_fields(old) if old is not None else None
    new_schema = strip_doc_fields(new) if new is not None else None
    if canonical(old_schema) == canonical(new_schema):
        return None
    if old_schema is None or new_schema is None:
        return BREAKING
    if _adds_optional_properties(old_schema, new_schema) or _is_widening(old_schema, new_schema):
        return NON_BREAKING
    return BREAKING


def _adds_optional_properties(old: Mapping[str, Any], new: Mapping[str, Any]) -> bool:
    old_props, new_props = old.get("properties"), new.get("properties")
    if not isinstance(old_props, Mapping) or not isinstance(new_props, Mapping):
        return False
    for name, schema in old_props.items():
        if name not in new_props or canonical(schema) != canonical(new_props[name]):
            return False
    if set(new.get("required") or []) - set(old.get("required") or []):
        return False
    rest_old = {key: value for key, value in old.items() if key not in ("properties", "required")}
    rest_new = {key: value for key, value in new.items() if key not in ("properties", "required")}
    return canonical(rest_old) == canonical(rest_new)


def _is_widening(old: Any, new: Any) -> bool:
    """True when ``new`` is a union accepting every alternative of ``old``."""
    new_alternatives = _alternatives(new)
    if len(new_alternatives) < 2:
        return False
    accepted = {canonical(item) for item in new_alternatives}
    return all(canonical(item) in accepted for item in _alternatives(old))


def _alternatives(schema: Any) -> List[Any]:
    if isinstance(schema, Mapping):
        any_of = schema.get("anyOf")
        if isinstance(any_of, list):
            return list(any_of)
        enum = schema.get("enum")
        if isinstance(enum, list) and len(enum) > 1:
            base = {key: value for key, value in schema.items() if key != "enum"}
            return [{**base, "enum": [value]} for value in enum]
    return [schema]


def _returns_key(signature: SpecSignature) -> str:
    if signature.returns is None:
        return canonical(None)
    return canonical(strip_doc_fields(signature.returns.to_dict()))


def _member_key(member: SpecMember) -> Tuple[str, bool]:
    return (member.name or member.id, member.static)


__all__ = [
    "BREAKING",
    "DOC_KEYS",
    "NON_BREAKING",
    "SpecDiff",
    "canonical",
    "diff_spec",
    "member_signature_changed",
    "signatures_equal",
    "strip_doc_fields",
]
