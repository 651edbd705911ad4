"""Semantic drift: deprecation, visibility tags and cross-reference links."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..models import Drift, SpecExport, SpecTag
from .types import DriftType, ExportRegistry, make_drift
from .utils import find_closest_match

_VISIBILITY_TAG_MAP = {
    "internal": "internal",
    "alpha": "internal",
    "private": "private",
    "protected": "protected",
    "public": "public",
}

_LINK_PATTERNS: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\{@link\s+([^}\s|]+)(?:\s*\|[^}]*)?\}"), "@link"),
    (re.compile(r"\{@see\s+([^}\s]+)\}"), "@see"),
    (re.compile(r"\{@inheritDoc\s+([^}\s]+)\}"), "@inheritDoc"),
)
_FENCED_CODE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]+`")


def detect_deprecated_drift(entry: SpecExport) -> List[Drift]:
    code_deprecated = bool(entry.deprecated)
    docs_deprecated = any(tag.name.lower() == "deprecated" for tag in entry.tags)
    if code_deprecated == docs_deprecated:
        return []
    target = entry.name or entry.id
    if code_deprecated:
        return [
            make_drift(
                DriftType.DEPRECATED_MISMATCH,
                f'Declaration for "{target}" is marked deprecated but @deprecated is missing from the docs.',
                target=target,
                suggestion="Add an @deprecated tag explaining the replacement or removal timeline.",
            )
        ]
    return [
        make_drift(
            DriftType.DEPRECATED_MISMATCH,
            f'JSDoc marks "{target}" as deprecated but the TypeScript declaration is not.',
            target=target,
            suggestion="Remove the @deprecated tag or deprecate the declaration.",
        )
    ]


def detect_visibility_drift(entry: SpecExport) -> List[Drift]:
    drifts: List[Drift] = []
    target = entry.name or entry.id
    signal = _doc_visibility(entry.tags)
    if signal is not None and not _visibility_matches(signal[0], "public"):
        drifts.append(_visibility_drift(target, signal, "public"))

    for member in entry.members:
        member_signal = _doc_visibility(member.tags)
        if member_signal is None:
            continue
        actual = member.visibility or "public"
        if _visibility_matches(member_signal[0], actual):
            continue
        qualified = f"{target}#{member.name or member.id or member.kind}"
        drifts.append(_visibility_drift(qualified, member_signal, actual))
    return drifts


def detect_broken_links(entry: SpecExport, registry: Optional[ExportRegistry]) -> List[Drift]:
    if registry is None:
        return []
    text = " ".join(
        [entry.description or ""] + [tag.text for tag in entry.tags if tag.name != "example"]
    )
    text = _INLINE_CODE.sub("", _FENCED_CODE.sub("", text))
    candidates = sorted(registry.all)

    drifts: List[Drift] = []
    for pattern, label in _LINK_PATTERNS:
        for match in pattern.finditer(text):
            target = match.group(1)
            if target.startswith(("http://", "https://")):
                continue
            if "/" in target or "@" in target:
                continue
            root = target.split(".")[0]
            if root in registry.all or target in registry.all:
                continue
            suggestion = find_closest_match(root, candidates)
            drifts.append(
                make_drift(
                    DriftType.BROKEN_LINK,
                    f"{{{label} {target}}} references a symbol that does not exist.",
                    target=target,
                    suggestion=f'Did you mean "{suggestion.value}"?' if suggestion else None,
                )
            )
    return drifts


# ----------------------------------------------------------------------
# Internal helpers


def _doc_visibility(tags: Sequence[SpecTag]) -> Optional[Tuple[str, str]]:
    for tag in tags:
        mapped = _VISIBILITY_TAG_MAP.get(tag.name.lower())
        if mapped:
            return mapped, tag.name
    return None


def _visibility_matches(documented: str, actual: str) -> bool:
    if documented == "internal":
        return actual != "public"
    if documented == "public":
        return actual == "public"
    return documented == actual


def _visibility_drift(target: str, signal: Tuple[str, str], actual: str) -> Drift:
    value, tag_name = signal
    label = tag_name if tag_name.startswith("@") else f"@{tag_name}"
    if value == "internal":
        suggestion = f"Remove {label} or mark the declaration protected/private."
    elif value == "public":
        suggestion = f"Remove {label} or mark the declaration public."
    elif value == "protected" and actual == "private":
        suggestion = f"Promote the declaration to protected or replace {label} with @private."
    elif value == "protected":
        suggestion = f"Remove {label} or mark the declaration protected."
    elif actual == "protected":
        suggestion = f"Downgrade the declaration to private or replace {label} with @protected/@internal."
    else:
        suggestion = f"Remove {label} or mark the declaration private."
    return make_drift(
        DriftType.VISIBILITY_MISMATCH,
        f'JSDoc marks "{target}" as {label} but the declaration is {actual}.',
        target=target,
        suggestion=suggestion,
    )


__all__ = ["detect_broken_links", "detect_deprecated_drift", "detect_visibility_drift"]
