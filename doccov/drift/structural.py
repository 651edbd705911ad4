"""Structural drift: documented signatures versus declared ones."""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from ..extract.jsdoc import split_type_expression
from ..models import Drift, SpecExport
from .types import DriftType, make_drift
from .utils import (
    build_generic_constraint_issue,
    build_generic_constraint_suggestion,
    build_return_type_mismatch_issue,
    collect_type_parameter_constraints,
    declared_return_type,
    documented_params,
    documented_templates,
    find_closest_match,
    normalize_type,
    render_schema,
    returns_tag_type,
    suggestion_list,
    types_equivalent,
)


def detect_param_drift(entry: SpecExport) -> List[Drift]:
    """Documented @param names that do not exist in any signature."""
    actual: List[str] = []
    properties: Dict[str, Set[str]] = {}
    for signature in entry.signatures:
        for param in signature.parameters:
            if not param.name or param.name in actual:
                continue
            actual.append(param.name)
            schema_properties = param.schema.get("properties") if isinstance(param.schema, dict) else None
            if isinstance(schema_properties, dict):
                properties[param.name] = set(schema_properties)
    if not actual:
        return []

    drifts: List[Drift] = []
    for documented in documented_params(entry):
        name = documented.name
        if name in actual:
            continue
        if "." in name:
            prefix, _, path = name.partition(".")
            if prefix in actual:
                known = properties.get(prefix)
                if known is None:
                    # Properties of external or unresolved types cannot be checked.
                    continue
                first = path.split(".")[0]
                if first in known:
                    continue
                ordered = sorted(known)
                match = find_closest_match(first, ordered)
                if match is not None:
                    suggestion: Optional[str] = f'Did you mean "{prefix}.{match.value}"?'
                elif 0 < len(ordered) <= 8:
                    listed = ", ".join(f"{prefix}.{p}" for p in ordered[:5])
                    suggestion = (
                        f"Available: {listed}... ({len(ordered)} total)" if len(ordered) > 5 else f"Available: {listed}"
                    )
                else:
                    suggestion = None
                drifts.append(
                    make_drift(
                        DriftType.PARAM_MISMATCH,
                        f'JSDoc documents property "{path}" on parameter "{prefix}" which does not exist.',
                        target=name,
                        suggestion=suggestion,
                    )
                )
                continue

        match = find_closest_match(name, actual)
        if match is not None:
            suggestion = f'Did you mean "{match.value}"?'
        else:
            suggestion = suggestion_list("Available parameters: ", actual, limit=6)
        drifts.append(
            make_drift(
                DriftType.PARAM_MISMATCH,
                f'JSDoc documents parameter "{name}" which is not present in the signature.',
                target=name,
                suggestion=suggestion,
            )
        )
    return drifts


def detect_optionality_drift(entry: SpecExport) -> List[Drift]:
    optional: Dict[str, bool] = {}
    for signature in entry.signatures:
        for param in signature.parameters:
            if param.name and param.name not in optional:
                optional[param.name] = not param.required
    if not optional:
        return []

    drifts: List[Drift] = []
    for documented in documented_params(entry):
        actual_optional = optional.get(documented.name)
        if actual_optional is None or actual_optional == documented.optional:
            continue
        name = documented.name
        if documented.optional:
            issue = f'JSDoc marks parameter "{name}" optional but the signature requires it.'
            suggestion = f"Remove brackets around {name} or mark the parameter optional in the signature."
        else:
            issue = f'JSDoc omits optional brackets for parameter "{name}" but the signature marks it optional.'
            suggestion = f"Document {name} as [{name}] or make it required in the signature."
        drifts.append(make_drift(DriftType.OPTIONALITY_MISMATCH, issue, target=name, suggestion=suggestion))
    return drifts


def detect_param_type_drift(entry: SpecExport) -> List[Drift]:
    declared: Dict[str, str] = {}
    for signature in entry.signatures:
        for param in signature.parameters:
            if not param.name or param.name in declared:
                continue
            rendered = render_schema(param.schema)
            if rendered:
                declared[param.name] = rendered
    if not declared:
        return []

    drifts: List[Drift] = []
    for documented in documented_params(entry):
        declared_type = declared.get(documented.name)
        if not declared_type or not documented.type:
            continue
        documented_normalized = normalize_type(documented.type)
        declared_normalized = normalize_type(declared_type)
        if not documented_normalized or not declared_normalized:
            continue
        if types_equivalent(documented_normalized, declared_normalized):
            continue
        drifts.append(
            make_drift(
                DriftType.PARAM_TYPE_MISMATCH,
                f'JSDoc documents {documented.type} for parameter "{documented.name}" '
                f"but the signature declares {declared_type}.",
                target=documented.name,
                suggestion=f"Update @param {{{declared_type}}} {documented.name} to match the signature.",
            )
        )
    return drifts


def detect_return_type_drift(entry: SpecExport) -> List[Drift]:
    returns_text = next((text for text in entry.tag_values("returns") if text), None)
    if returns_text is None:
        returns_text = next((text for text in entry.tag_values("return") if text), None)
    if returns_text is None:
        return []
    documented = returns_tag_type(returns_text)
    if not documented:
        return []
    signature = next((s for s in entry.signatures if s.returns is not None), None)
    if signature is None:
        return []
    declared = normalize_type(declared_return_type(signature.returns))
    documented_normalized = normalize_type(documented)
    if not declared or not documented_normalized:
        return []
    if types_equivalent(documented_normalized, declared):
        return []
    return [
        make_drift(
            DriftType.RETURN_TYPE_MISMATCH,
            build_return_type_mismatch_issue(documented, documented_normalized, declared),
            target="returns",
            suggestion=f"Update @returns to {declared}.",
        )
    ]


def detect_generic_constraint_drift(entry: SpecExport) -> List[Drift]:
    templates = documented_templates(entry)
    if not templates:
        return []
    actual_constraints = collect_type_parameter_constraints(entry)
    if not actual_constraints:
        return []

    drifts: List[Drift] = []
    for name, documented in templates:
        if name not in actual_constraints:
            continue
        actual = actual_constraints[name]
        normalized_actual = normalize_type(actual)
        normalized_documented = normalize_type(documented)
        if normalized_actual == normalized_documented:
            continue
        drifts.append(
            make_drift(
                DriftType.GENERIC_CONSTRAINT_MISMATCH,
                build_generic_constraint_issue(name, documented, actual),
                target=name,
                suggestion=build_generic_constraint_suggestion(name, actual),
            )
        )
    return drifts


def detect_property_type_drift(entry: SpecExport) -> List[Drift]:
    drifts: List[Drift] = []
    for member in entry.members:
        if member.kind != "property":
            continue
        type_tag = next((tag.text for tag in member.tags if tag.name == "type" and tag.text), None)
        if type_tag is None:
            continue
        documented, _ = split_type_expression(type_tag)
        actual = render_schema(member.schema)
        if not documented or not actual:
            continue
        normalized_documented = normalize_type(documented)
        normalized_actual = normalize_type(actual)
        if not normalized_documented or not normalized_actual:
            continue
        if types_equivalent(normalized_documented, normalized_actual):
            continue
        name = member.name or member.id
        drifts.append(
            make_drift(
                DriftType.PROPERTY_TYPE_DRIFT,
                f'Property "{name}" documented as {{{documented}}} but actual type is {actual}.',
                target=name,
                suggestion=f"Update @type {{{actual}}} to match the declaration.",
            )
        )
    return drifts


def detect_async_mismatch(entry: SpecExport) -> List[Drift]:
    if not entry.signatures:
        return []
    returns_promise = False
    for signature in entry.signatures:
        rendered = declared_return_type(signature.returns) or ""
        if rendered.startswith("Promise<") or rendered == "Promise":
            returns_promise = True
            break
    returns_text = next(iter(entry.tag_values("returns") + entry.tag_values("return")), "")
    documented_as_promise = "Promise" in returns_text
    has_async_tag = entry.has_tag("async")
    is_async_function = entry.flags.get("async") is True

    drifts: List[Drift] = []
    if returns_promise and not documented_as_promise and not has_async_tag:
        drifts.append(
            make_drift(
                DriftType.ASYNC_MISMATCH,
                "Function returns Promise but documentation does not indicate async behavior.",
                target="returns",
                suggestion="Add @async tag or document @returns {Promise<...>}.",
            )
        )
    if not returns_promise and (documented_as_promise or has_async_tag) and not is_async_function:
        drifts.append(
            make_drift(
                DriftType.ASYNC_MISMATCH,
                "Documentation indicates async but function does not return Promise.",
                target="returns",
                suggestion="Remove @async tag or update @returns type.",
            )
        )
    return drifts


__all__ = [
    "detect_async_mismatch",
    "detect_generic_constraint_drift",
    "detect_optionality_drift",
    "detect_param_drift",
    "detect_param_type_drift",
    "detect_property_type_drift",
    "detect_return_type_drift",
]
