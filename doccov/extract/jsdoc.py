"""Parsing of JSDoc/TSDoc block comments attached to declarations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tree_sitter import Node

from .parser import node_text

_FENCE_PATTERN = re.compile(r"^\s*```")
_TAG_LINE_PATTERN = re.compile(r"^@([A-Za-z][\w-]*)\s?(.*)$")

VISIBILITY_TAGS = ("internal", "alpha", "private", "protected", "public")


@dataclass
class DocTag:
    name: str
    text: str = ""


@dataclass
class DocComment:
    """A parsed ``/** ... */`` block: free-form description plus block tags."""

    description: Optional[str] = None
    tags: List[DocTag] = field(default_factory=list)

    def tags_named(self, *names: str) -> List[DocTag]:
        return [tag for tag in self.tags if tag.name in names]

    def first(self, *names: str) -> Optional[DocTag]:
        matches = self.tags_named(*names)
        return matches[0] if matches else None

    def has(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)

    @property
    def examples(self) -> List[str]:
        return [tag.text for tag in self.tags_named("example") if tag.text.strip()]

    @property
    def deprecated(self) -> bool:
        return self.has("deprecated")


@dataclass(frozen=True)
class ParamTag:
    name: str
    type: Optional[str] = None
    optional: bool = False
    default: Optional[str] = None
    description: Optional[str] = None


def parse_doc_comment(raw: str) -> DocComment:
    """Split a raw block comment into description and tags.

    Lines inside fenced code blocks never start a new tag, so examples may
    contain decorators or ``@`` characters at line start.
    """
    lines = _comment_lines(raw)
    description_lines: List[str] = []
    tags: List[DocTag] = []
    current_name: Optional[str] = None
    current_lines: List[str] = []
    in_fence = False

    def _flush() -> None:
        if current_name is not None:
            tags.append(DocTag(name=current_name, text=_trim_block("\n".join(current_lines))))

    for line in lines:
        stripped = line.strip()
        if not in_fence:
            match = _TAG_LINE_PATTERN.match(stripped)
            if match:
                _flush()
                current_name = match.group(1)
                current_lines = [match.group(2)]
                continue
        if _FENCE_PATTERN.match(line):
            in_fence = not in_fence
        if current_name is None:
            description_lines.append(line)
        else:
            current_lines.append(line)
    _flush()

    description = _trim_block("\n".join(description_lines)) or None
    return DocComment(description=description, tags=tags)


def leading_doc_comment(node: Node, source_bytes: bytes) -> Optional[str]:
    """Return the closest ``/**`` comment directly preceding ``node``."""
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        text = node_text(sibling, source_bytes)
        if text.startswith("/**") and not text.startswith("/***"):
            return text
        sibling = sibling.prev_sibling
    return None


def split_type_expression(text: str) -> Tuple[Optional[str], str]:
    """Split a leading ``{type}`` off tag text, honoring nested braces."""
    stripped = text.lstrip()
    if not stripped.startswith("{"):
        return None, stripped
    depth = 0
    for index, char in enumerate(stripped):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                type_text = stripped[1:index].strip()
                return (type_text or None), stripped[index + 1 :].lstrip()
    return None, stripped


def normalize_param_name(raw: str) -> Optional[str]:
    name = raw.strip()
    if not name:
        return None
    if name.startswith("[") and name.endswith("]"):
        name = name[1:-1]
    if "=" in name:
        name = name.split("=", 1)[0]
    if name.endswith(","):
        name = name[:-1]
    return name.strip() or None


def parse_param_tag(text: str) -> Optional[ParamTag]:
    """Parse ``{type} [name=default] - description`` style @param text."""
    type_text, remainder = split_type_expression(text.strip())
    if not remainder:
        return None
    if remainder.startswith("["):
        closing = remainder.find("]")
        raw_name = remainder[: closing + 1] if closing >= 0 else remainder.split()[0]
    else:
        raw_name = remainder.split()[0]
    rest = remainder[len(raw_name) :].strip()
    optional = raw_name.startswith("[") and raw_name.endswith("]")
    default = None
    if optional and "=" in raw_name:
        default = raw_name[1:-1].split("=", 1)[1].strip() or None
    name = normalize_param_name(raw_name)
    if not name:
        return None
    if rest.startswith("-") or rest.startswith("–"):
        rest = rest[1:].strip()
    return ParamTag(
        name=name,
        type=type_text,
        optional=optional,
        default=default,
        description=rest or None,
    )


def parse_returns_tag(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(type, description)``; the type is only read from braces."""
    type_text, remainder = split_type_expression(text.strip())
    if remainder.startswith("- "):
        remainder = remainder[2:]
    return type_text, remainder.strip() or None


def parse_template_tag(text: str) -> Optional[Tuple[str, Optional[str]]]:
    """Parse ``{Constraint} T`` or ``T extends Constraint - description``."""
    constraint, remaining = split_type_expression(text.strip())
    if not remaining:
        return None
    parts = remaining.split()
    name = re.sub(r"[.,;:]+$", "", parts[0])
    if not name:
        return None
    if constraint is None and len(parts) > 1 and parts[1] == "extends":
        tokens = parts[2:]
        for marker in ("-", "–"):
            if marker in tokens:
                tokens = tokens[: tokens.index(marker)]
        constraint = " ".join(tokens).strip() or None
    return name, constraint


# ----------------------------------------------------------------------
# Internal helpers


def _comment_lines(raw: str) -> List[str]:
    body = raw.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines: List[str] = []
    for line in body.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
            lines.append(stripped.rstrip())
        else:
            lines.append(line.strip())
    return lines


def _trim_block(text: str) -> str:
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines).strip()


__all__ = [
    "DocComment",
    "DocTag",
    "ParamTag",
    "VISIBILITY_TAGS",
    "leading_doc_comment",
    "normalize_param_name",
    "parse_doc_comment",
    "parse_param_tag",
    "parse_returns_tag",
    "parse_template_tag",
    "split_type_expression",
]
