"""Tree-sitter helpers for parsing TypeScript sources."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

_LANGUAGES: Dict[str, Language] = {}

TYPESCRIPT_SUFFIXES = (".d.ts", ".d.mts", ".d.cts", ".ts", ".tsx", ".mts", ".cts")


def get_language(dialect: str = "typescript") -> Language:
    """Return the cached tree-sitter language for ``typescript`` or ``tsx``."""
    language = _LANGUAGES.get(dialect)
    if language is None:
        if dialect == "tsx":
            language = Language(tree_sitter_typescript.language_tsx())
        elif dialect == "typescript":
            language = Language(tree_sitter_typescript.language_typescript())
        else:
            raise ValueError(f"Unsupported dialect: {dialect}")
        _LANGUAGES[dialect] = language
    return language


class SourceParser:
    """Owns one tree-sitter parser per dialect.

    Parsers carry mutable state, so every extraction run builds its own
    instance instead of sharing a module-level one.
    """

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def parse(self, source: bytes, *, dialect: str = "typescript") -> Tree:
        parser = self._parsers.get(dialect)
        if parser is None:
            parser = Parser(get_language(dialect))
            self._parsers[dialect] = parser
        return parser.parse(source)

    def parse_path(self, path: Path) -> tuple[bytes, Tree]:
        source = path.read_bytes()
        return source, self.parse(source, dialect=dialect_for(path))


def dialect_for(path: Path | str) -> str:
    return "tsx" if str(path).endswith((".tsx", ".jsx")) else "typescript"


def node_text(node: Optional[Node], source_bytes: bytes) -> str:
    if node is None:
        return ""
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def has_token(node: Node, token: str) -> bool:
    """Return True when ``node`` has a direct anonymous child spelled ``token``."""
    return any(child.type == token for child in node.children)


def named_children_of(node: Optional[Node], *types: str) -> Iterator[Node]:
    if node is None:
        return
    for child in node.named_children:
        if not types or child.type in types:
            yield child


def first_error(node: Node) -> Optional[Node]:
    """Return the first ERROR or MISSING node in document order."""
    if not node.has_error:
        return None
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def describe_error(node: Node, source_bytes: bytes) -> str:
    line, column = node.start_point[0] + 1, node.start_point[1] + 1
    if node.is_missing:
        return f"Expected '{node.type}' at line {line}, column {column}"
    snippet = node_text(node, source_bytes).strip().splitlines()
    near = snippet[0][:40] if snippet else ""
    if near:
        return f"Unexpected token near '{near}' at line {line}, column {column}"
    return f"Unexpected token at line {line}, column {column}"


__all__ = [
    "SourceParser",
    "TYPESCRIPT_SUFFIXES",
    "describe_error",
    "dialect_for",
    "first_error",
    "get_language",
    "has_token",
    "named_children_of",
    "node_text",
]
