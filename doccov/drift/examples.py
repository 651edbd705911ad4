"""Example drift: unknown identifiers, syntax errors, runtime failures and assertions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional

from tree_sitter import Node

from ..extract.parser import SourceParser, describe_error, first_error, node_text
from ..models import Drift, SpecExport
from ..sandbox.models import ExampleExecutionResult, strip_code_block_markers
from .types import DriftType, ExportRegistry, make_drift
from .utils import find_closest_match

BUILTIN_GLOBALS = frozenset(
    {
        # primitives and special types
        "string", "number", "boolean", "bigint", "symbol", "undefined", "null",
        "true", "false", "any", "unknown", "never", "void", "object",
        # constructors
        "Array", "Promise", "Map", "Set", "WeakMap", "WeakSet", "WeakRef", "Date",
        "RegExp", "Error", "TypeError", "ReferenceError", "SyntaxError", "RangeError",
        "EvalError", "URIError", "AggregateError", "Function", "Object", "String",
        "Number", "Boolean", "BigInt", "Symbol",
        # binary data
        "Int8Array", "Uint8Array", "Uint8ClampedArray", "Int16Array", "Uint16Array",
        "Int32Array", "Uint32Array", "Float32Array", "Float64Array", "BigInt64Array",
        "BigUint64Array", "ArrayBuffer", "ArrayBufferLike", "SharedArrayBuffer",
        "DataView", "Atomics",
        # iteration
        "Iterator", "AsyncIterator", "IterableIterator", "AsyncIterableIterator",
        "Generator", "AsyncGenerator",
        "JSON", "Math", "Reflect", "Proxy", "Intl", "globalThis", "FinalizationRegistry",
        # web platform
        "URL", "URLSearchParams", "Headers", "Request", "Response", "Blob", "File",
        "FormData", "ReadableStream", "WritableStream", "TransformStream",
        "AbortController", "AbortSignal", "TextEncoder", "TextDecoder", "EventTarget",
        "Event", "CustomEvent", "Element", "Document", "Window", "Node", "HTMLElement",
        "Console", "Buffer", "EventEmitter",
        # utility types
        "Record", "Partial", "Required", "Readonly", "ReadonlyArray", "Pick", "Omit",
        "Exclude", "Extract", "NonNullable", "ReturnType", "Parameters", "InstanceType",
        "ConstructorParameters", "Awaited", "ThisType", "Uppercase", "Lowercase",
        "Capitalize", "Uncapitalize", "NoInfer", "ThisParameterType", "OmitThisParameter",
        "__type",
        # runtime globals
        "console", "process", "global", "window", "document", "navigator", "location",
        "history", "localStorage", "sessionStorage", "fetch", "setTimeout", "setInterval",
        "clearTimeout", "clearInterval", "requestAnimationFrame", "cancelAnimationFrame",
        "queueMicrotask", "structuredClone", "atob", "btoa", "encodeURIComponent",
        "decodeURIComponent", "encodeURI", "decodeURI", "parseInt", "parseFloat",
        "isNaN", "isFinite", "eval",
        # test runners
        "describe", "it", "test", "expect", "jest", "vi", "beforeEach", "afterEach",
        "beforeAll", "afterAll",
        # module system
        "require", "module", "exports", "__dirname", "__filename", "import",
    }
)

_IDENTIFIER_TYPES = ("identifier", "type_identifier")
_LOCAL_DECLARATION_PARENTS = (
    "class_declaration",
    "abstract_class_declaration",
    "class",
    "function_declaration",
    "generator_function_declaration",
    "variable_declarator",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
)
_TYPE_LIKE_KINDS = ("class", "interface", "type", "enum")
_ASSERTION_PATTERN = re.compile(r"//\s*=>\s*(.+?)\s*$")
_ERROR_LINE_PATTERN = re.compile(r"^(?:Error|TypeError|ReferenceError|SyntaxError):\s*(.+)")

ExampleResults = Mapping[int, ExampleExecutionResult]


@dataclass(frozen=True)
class Assertion:
    line_number: int
    expected: str


def is_builtin_identifier(name: str) -> bool:
    return name in BUILTIN_GLOBALS


def detect_example_drift(
    entry: SpecExport,
    registry: Optional[ExportRegistry],
    *,
    parser: Optional[SourceParser] = None,
) -> List[Drift]:
    """Flag identifiers used in examples that the package does not export."""
    if registry is None or not entry.examples:
        return []
    parser = parser or SourceParser()
    drifts: List[Drift] = []
    for example in entry.examples:
        code = strip_code_block_markers(example)
        if not code:
            continue
        source = code.encode("utf-8")
        tree = parser.parse(source)
        local: set[str] = set()
        referenced: Dict[str, str] = {}
        for node in _iter_identifiers(tree.root_node):
            text = node_text(node, source)
            if len(text) <= 1:
                continue
            if _is_local_declaration(node):
                local.add(text)
                continue
            if is_builtin_identifier(text):
                continue
            context = _identifier_context(node)
            if text not in referenced or context == "call":
                referenced[text] = context

        for identifier, context in referenced.items():
            if identifier in local or identifier in registry.all:
                continue
            match = find_closest_match(identifier, _candidates(registry, context))
            close = match is not None and match.distance <= 5
            if not close and not identifier[:1].isupper():
                continue
            drifts.append(
                make_drift(
                    DriftType.EXAMPLE_DRIFT,
                    f'@example references "{identifier}" which does not exist in this package.',
                    target=identifier,
                    suggestion=f'Did you mean "{match.value}"?' if close and match else None,
                )
            )
    return drifts


def detect_example_syntax_errors(
    entry: SpecExport, *, parser: Optional[SourceParser] = None
) -> List[Drift]:
    if not entry.examples:
        return []
    parser = parser or SourceParser()
    drifts: List[Drift] = []
    for index, example in enumerate(entry.examples):
        code = strip_code_block_markers(example)
        if not code:
            continue
        source = code.encode("utf-8")
        error = first_error(parser.parse(source).root_node)
        if error is None:
            continue
        drifts.append(
            make_drift(
                DriftType.EXAMPLE_SYNTAX_ERROR,
                f"@example contains invalid syntax: {describe_error(error, source)}",
                target=f"example[{index}]",
                suggestion="Check for missing brackets, semicolons, or typos.",
            )
        )
    return drifts


def detect_example_runtime_errors(entry: SpecExport, results: ExampleResults) -> List[Drift]:
    if not entry.examples or not results:
        return []
    drifts: List[Drift] = []
    for index in range(len(entry.examples)):
        result = results.get(index)
        if result is None or result.success:
            continue
        if "timed out" in result.stderr:
            issue = f"@example timed out after {result.duration}ms."
            suggestion = "Check for infinite loops or long-running operations."
        else:
            issue = f"@example throws at runtime: {extract_error_message(result.stderr)}"
            suggestion = "Fix the example code or update it to match the current API."
        drifts.append(
            make_drift(
                DriftType.EXAMPLE_RUNTIME_ERROR,
                issue,
                target=f"example[{index}]",
                suggestion=suggestion,
            )
        )
    return drifts


def detect_example_assertion_failures(entry: SpecExport, results: ExampleResults) -> List[Drift]:
    """Compare ``// => value`` comments against stdout lines, in order."""
    if not entry.examples or not results:
        return []
    drifts: List[Drift] = []
    for index, example in enumerate(entry.examples):
        result = results.get(index)
        if result is None or not result.success:
            continue
        assertions = parse_assertions(example)
        if not assertions:
            continue
        output = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        for position, assertion in enumerate(assertions):
            target = f"example[{index}]:line{assertion.line_number}"
            if position >= len(output):
                drifts.append(
                    make_drift(
                        DriftType.EXAMPLE_ASSERTION_FAILED,
                        f'Assertion expected "{assertion.expected}" but no output was produced',
                        target=target,
                        suggestion="Ensure the example produces output for each assertion",
                    )
                )
                continue
            actual = output[position]
            if assertion.expected.strip() != actual:
                drifts.append(
                    make_drift(
                        DriftType.EXAMPLE_ASSERTION_FAILED,
                        f'Assertion failed: expected "{assertion.expected}" but got "{actual}"',
                        target=target,
                        suggestion=f"Update assertion to: // => {actual}",
                    )
                )
    return drifts


def parse_assertions(code: str) -> List[Assertion]:
    assertions: List[Assertion] = []
    for line_number, line in enumerate(strip_code_block_markers(code).split("\n"), start=1):
        match = _ASSERTION_PATTERN.search(line)
        if match and match.group(1).strip():
            assertions.append(Assertion(line_number=line_number, expected=match.group(1).strip()))
    return assertions


def extract_error_message(stderr: str) -> str:
    lines = [line for line in stderr.split("\n") if line.strip()]
    if not lines:
        return "Unknown error"
    for line in lines:
        match = _ERROR_LINE_PATTERN.match(line)
        if match:
            return match.group(0)
    first = lines[0]
    return f"{first[:100]}..." if len(first) > 100 else first


# ----------------------------------------------------------------------
# Tree helpers


def _iter_identifiers(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _IDENTIFIER_TYPES:
            yield node
        stack.extend(reversed(node.children))


def _is_local_declaration(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type not in _LOCAL_DECLARATION_PARENTS:
        return False
    return parent.child_by_field_name("name") == node


def _identifier_context(node: Node) -> str:
    parent = node.parent
    if parent is not None:
        if parent.type == "call_expression" and parent.child_by_field_name("function") == node:
            return "call"
        if parent.type == "new_expression" and parent.child_by_field_name("constructor") == node:
            return "call"
        if parent.type == "extends_clause":
            return "type"
    if node.type == "type_identifier":
        return "type"
    return "value"


def _candidates(registry: ExportRegistry, context: str) -> List[str]:
    if context == "call":
        return [info.name for info in registry.exports.values() if info.is_callable]
    if context == "type":
        return sorted(registry.types) + [
            info.name for info in registry.exports.values() if info.kind in _TYPE_LIKE_KINDS
        ]
    return list(registry.exports)


__all__ = [
    "Assertion",
    "BUILTIN_GLOBALS",
    "ExampleResults",
    "detect_example_assertion_failures",
    "detect_example_drift",
    "detect_example_runtime_errors",
    "detect_example_syntax_errors",
    "extract_error_message",
    "is_builtin_identifier",
    "parse_assertions",
]
