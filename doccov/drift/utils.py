"""Shared helpers for drift rules: type rendering, normalization, fuzzy matching."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..extract.jsdoc import ParamTag, parse_param_tag, parse_template_tag, split_type_expression
from ..models import SpecExport, SpecReturns
from .types import ClosestMatch

_REF_PREFIX = "#/types/"
_VOID_EQUIVALENTS = {"void", "undefined"}


def documented_params(entry: SpecExport) -> List[ParamTag]:
    params: List[ParamTag] = []
    for text in entry.tag_values("param"):
        if not text.strip():
            continue
        parsed = parse_param_tag(text)
        if parsed is not None:
            params.append(parsed)
    return params


def returns_tag_type(text: str) -> Optional[str]:
    """Type from ``@returns {T}``; bare text is a description, never a type."""
    type_text, _ = split_type_expression(text.strip())
    return type_text


def render_schema(schema: Any) -> Optional[str]:
    """Render a schema back to TypeScript-like type text."""
    if not schema:
        return None
    if isinstance(schema, str):
        return schema
    if not isinstance(schema, Mapping):
        return None
    if "enum" in schema and isinstance(schema["enum"], list) and schema["enum"]:
        return " | ".join(json.dumps(value) for value in schema["enum"])
    if "const" in schema:
        return json.dumps(schema["const"])
    ref = schema.get("$ref")
    if isinstance(ref, str):
        name = ref[len(_REF_PREFIX) :] if ref.startswith(_REF_PREFIX) else ref
        arguments = [render_schema(arg) or "unknown" for arg in schema.get("typeArguments") or []]
        return f"{name}<{', '.join(arguments)}>" if arguments else name
    for key, separator in (("anyOf", " | "), ("allOf", " & ")):
        members = schema.get(key)
        if isinstance(members, list) and members:
            rendered = [render_schema(member) or "unknown" for member in members]
            if len(rendered) == 1:
                return rendered[0]
            return separator.join(rendered)
    schema_type = schema.get("type")
    if schema_type == "array" and isinstance(schema.get("prefixItems"), list):
        return "[" + ", ".join(render_schema(item) or "unknown" for item in schema["prefixItems"]) + "]"
    if schema_type == "array" and schema.get("items"):
        item = render_schema(schema["items"]) or "unknown"
        if " " in item:
            item = f"({item})"
        return f"{item}[]"
    if isinstance(schema_type, str):
        return schema_type
    return None


def declared_return_type(returns: Optional[SpecReturns]) -> Optional[str]:
    if returns is None:
        return None
    return returns.ts_type or render_schema(returns.schema)


def normalize_type(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    text = re.sub(r"\s+", " ", value)
    text = re.sub(r"\s*<\s*", "<", text)
    text = re.sub(r"\s*>\s*", ">", text)
    text = re.sub(r"\s*\|\s*", " | ", text)
    text = re.sub(r"\s*,\s*", ", ", text)
    text = _array_generic_to_suffix(text.strip())
    return text or None


def types_equivalent(a: str, b: str) -> bool:
    if a == b:
        return True
    return a.lower() in _VOID_EQUIVALENTS and b.lower() in _VOID_EQUIVALENTS


def unwrap_promise(type_text: str) -> Optional[str]:
    match = re.match(r"^promise<(.+)>$", type_text, flags=re.IGNORECASE)
    return match.group(1).strip() if match else None


def collect_type_parameter_constraints(entry: SpecExport) -> Dict[str, Optional[str]]:
    constraints: Dict[str, Optional[str]] = {}
    for parameter in entry.type_parameters:
        if parameter.name and parameter.name not in constraints:
            constraints[parameter.name] = parameter.constraint
    for signature in entry.signatures:
        for parameter in signature.type_parameters:
            if parameter.name and parameter.name not in constraints:
                constraints[parameter.name] = parameter.constraint
    return constraints


def documented_templates(entry: SpecExport) -> List[tuple[str, Optional[str]]]:
    templates = []
    for text in entry.tag_values("template"):
        parsed = parse_template_tag(text) if text.strip() else None
        if parsed is not None:
            templates.append(parsed)
    return templates


# ----------------------------------------------------------------------
# Fuzzy matching


def split_camel_case(value: str) -> List[str]:
    spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", value)
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    return [word for word in re.split(r"[\s_-]+", spaced.lower()) if word]


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j - 1] + cost, current[j - 1] + 1, previous[j] + 1))
        previous = current
    return previous[-1]


def find_closest_match(source: str, candidates: Iterable[str]) -> Optional[ClosestMatch]:
    """Best candidate by shared camelCase words and edit similarity.

    A shared final word counts 1.5; at least two shared "words" are needed
    before a candidate is scored, and scores below 0.5 are discarded.
    """
    source_words = split_camel_case(source)
    best: Optional[str] = None
    best_score = 0.0
    for candidate in candidates:
        if candidate == source:
            continue
        candidate_words = split_camel_case(candidate)
        matching = 0.0
        suffix_match = False
        if source_words and candidate_words and source_words[-1] == candidate_words[-1]:
            suffix_match = True
            matching += 1.5
        suffix_word = source_words[-1] if suffix_match else None
        for word in source_words:
            if word != suffix_word and word in candidate_words:
                matching += 1
        if matching < 2:
            continue
        word_score = matching / max(len(source_words), len(candidate_words))
        max_len = max(len(source), len(candidate))
        lev_score = 1 - levenshtein(source.lower(), candidate.lower()) / max_len
        total = word_score * 1.5 + lev_score if suffix_match else word_score + lev_score * 0.5
        if total > best_score and total >= 0.5:
            best_score = total
            best = candidate
    if best is None:
        return None
    return ClosestMatch(value=best, distance=round((1 - best_score) * 10))


# ----------------------------------------------------------------------
# Message builders


def build_return_type_mismatch_issue(documented_raw: str, documented: str, declared: str) -> str:
    documented_inner = unwrap_promise(documented)
    declared_inner = unwrap_promise(declared)
    if documented_inner and not declared_inner and documented_inner == declared:
        return f"JSDoc documents Promise<{documented_inner}> but the function returns {declared}."
    if not documented_inner and declared_inner and documented == declared_inner:
        return f"JSDoc documents {documented} but the function returns Promise<{declared_inner}>."
    return f"JSDoc documents {documented_raw} but the function returns {declared}."


def build_generic_constraint_issue(name: str, documented: Optional[str], actual: Optional[str]) -> str:
    if actual and documented:
        return (
            f'JSDoc constrains template "{name}" to {documented} '
            f"but the declaration constrains it to {actual}."
        )
    if actual:
        return f'JSDoc omits the constraint for template "{name}" but the declaration constrains it to {actual}.'
    if documented:
        return f'JSDoc constrains template "{name}" to {documented} but the declaration has no constraint.'
    return f'Template "{name}" has inconsistent constraints between JSDoc and the declaration.'


def build_generic_constraint_suggestion(name: str, actual: Optional[str]) -> str:
    if actual:
        return f"Update @template to {{{actual}}} {name} to reflect the declaration."
    return f"Remove the constraint from @template {name} to match the declaration."


def suggestion_list(prefix: str, values: Sequence[str], *, limit: int) -> Optional[str]:
    if not values or len(values) > limit:
        return None
    return f"{prefix}{', '.join(values)}"


def _array_generic_to_suffix(text: str) -> str:
    pattern = re.compile(r"\bArray<([^<>]+)>")
    while True:
        replaced = pattern.sub(lambda m: _array_suffix(m.group(1)), text)
        if replaced == text:
            return text
        text = replaced


def _array_suffix(inner: str) -> str:
    inner = inner.strip()
    return f"({inner})[]" if " " in inner else f"{inner}[]"


__all__ = [
    "build_generic_constraint_issue",
    "build_generic_constraint_suggestion",
    "build_return_type_mismatch_issue",
    "collect_type_parameter_constraints",
    "declared_return_type",
    "documented_params",
    "documented_templates",
    "find_closest_match",
    "levenshtein",
    "normalize_type",
    "render_schema",
    "returns_tag_type",
    "split_camel_case",
    "suggestion_list",
    "types_equivalent",
    "unwrap_promise",
]
