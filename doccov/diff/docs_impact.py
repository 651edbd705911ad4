"""Impact of API changes on markdown documentation code samples."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..extract.parser import SourceParser, node_text
from .members import MemberChange
from .spec_diff import SpecDiff

EXECUTABLE_LANGS = frozenset({"ts", "typescript", "js", "javascript", "tsx", "jsx"})

_IMPORT_PATTERN = re.compile(r"import\s+\{([^}]+)\}\s+from\s+['\"]([^'\"]+)['\"]")
_CALL_PATTERN = re.compile(r"\b([A-Za-z_$][\w$]*)\s*[(<]")
_CALL_KEYWORDS = frozenset(
    {
        "if", "for", "while", "switch", "catch", "function", "class", "interface", "type",
        "import", "export", "return", "throw", "new", "typeof", "instanceof",
    }
)


@dataclass
class MarkdownCodeBlock:
    lang: str
    code: str
    line_start: int
    line_end: int
    meta: Optional[str] = None


@dataclass
class MarkdownDocFile:
    path: str
    code_blocks: List[MarkdownCodeBlock] = field(default_factory=list)


@dataclass
class ExportReference:
    export_name: str
    file: str
    line: int
    context: str
    block_index: int


@dataclass
class MethodCall:
    method_name: str
    object_name: Optional[str]
    line: int
    context: str


@dataclass
class DocsImpactReference:
    export_name: str
    line: int
    change_type: str
    context: Optional[str] = None
    member_name: Optional[str] = None
    member_change_type: Optional[str] = None
    replacement_suggestion: Optional[str] = None
    is_instantiation: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "exportName": self.export_name,
            "line": self.line,
            "changeType": self.change_type,
        }
        optional = {
            "context": self.context,
            "memberName": self.member_name,
            "memberChangeType": self.member_change_type,
            "replacementSuggestion": self.replacement_suggestion,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.is_instantiation:
            data["isInstantiation"] = True
        return data


@dataclass
class DocsImpact:
    file: str
    references: List[DocsImpactReference] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.file, "references": [ref.to_dict() for ref in self.references]}


@dataclass
class DocsImpactResult:
    impacted_files: List[DocsImpact] = field(default_factory=list)
    missing_docs: List[str] = field(default_factory=list)
    all_undocumented: List[str] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "impactedFiles": [impact.to_dict() for impact in self.impacted_files],
            "missingDocs": list(self.missing_docs),
            "allUndocumented": list(self.all_undocumented),
            "stats": dict(self.stats),
        }


# ----------------------------------------------------------------------
# Markdown parsing


def parse_markdown_file(content: str, path: str) -> MarkdownDocFile:
    """Collect fenced code blocks in executable languages."""
    lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    blocks: List[MarkdownCodeBlock] = []
    fence: Optional[str] = None
    lang = ""
    meta: Optional[str] = None
    start = 0
    body: List[str] = []
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if fence is None:
            if stripped.startswith("```") or stripped.startswith("~~~"):
                fence = stripped[:3]
                info = stripped[3:].strip().split(None, 1)
                lang = info[0].lower() if info else ""
                meta = info[1] if len(info) > 1 else None
                start = number
                body = []
            continue
        if stripped.startswith(fence) and not stripped[3:].strip():
            if lang in EXECUTABLE_LANGS:
                blocks.append(
                    MarkdownCodeBlock(lang=lang, code="\n".join(body), line_start=start, line_end=number, meta=meta)
                )
            fence = None
            continue
        body.append(line)
    return MarkdownDocFile(path=path, code_blocks=blocks)


def parse_markdown_files(files: Iterable[Mapping[str, str]]) -> List[MarkdownDocFile]:
    return [parse_markdown_file(str(item.get("content", "")), str(item.get("path", ""))) for item in files]


def extract_imports(code: str) -> List[tuple[str, str]]:
    imports: List[tuple[str, str]] = []
    for match in _IMPORT_PATTERN.finditer(code):
        source = match.group(2)
        for part in match.group(1).split(","):
            name = re.split(r"\s+as\s+", part.strip())[0].strip()
            if name.startswith("type "):
                name = name[len("type ") :].strip()
            if name:
                imports.append((name, source))
    return imports


def extract_function_calls(code: str) -> List[str]:
    calls: List[str] = []
    for match in _CALL_PATTERN.finditer(code):
        name = match.group(1)
        if name not in _CALL_KEYWORDS and name not in calls:
            calls.append(name)
    return calls


def extract_method_calls(code: str, parser: Optional[SourceParser] = None) -> List[MethodCall]:
    """``obj.method(...)`` calls, with 0-based line numbers inside the block."""
    parser = parser or SourceParser()
    source = code.encode("utf-8")
    tree = parser.parse(source, dialect="tsx")
    lines = code.split("\n")
    calls: List[MethodCall] = []
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        stack.extend(reversed(node.children))
        if node.type != "call_expression":
            continue
        function = node.child_by_field_name("function")
        if function is None or function.type != "member_expression":
            continue
        prop = function.child_by_field_name("property")
        target = function.child_by_field_name("object")
        if prop is None:
            continue
        object_name: Optional[str] = None
        if target is not None and target.type == "identifier":
            object_name = node_text(target, source)
        elif target is not None and target.type == "member_expression":
            inner = target.child_by_field_name("object")
            if inner is not None and inner.type == "identifier":
                object_name = node_text(inner, source)
        line = node.start_point[0]
        calls.append(
            MethodCall(
                method_name=node_text(prop, source),
                object_name=object_name,
                line=line,
                context=lines[line].strip() if line < len(lines) else "",
            )
        )
    return calls


def has_instantiation(code: str, class_name: str, parser: Optional[SourceParser] = None) -> bool:
    parser = parser or SourceParser()
    source = code.encode("utf-8")
    stack = [parser.parse(source, dialect="tsx").root_node]
    while stack:
        node = stack.pop()
        if node.type == "new_expression":
            constructor = node.child_by_field_name("constructor")
            if constructor is not None and constructor.type == "identifier" and node_text(constructor, source) == class_name:
                return True
        stack.extend(node.children)
    return False


def find_export_references(files: Sequence[MarkdownDocFile], export_names: Iterable[str]) -> List[ExportReference]:
    names = set(export_names)
    references: List[ExportReference] = []
    for doc in files:
        for index, block in enumerate(doc.code_blocks):
            found: List[str] = []
            for name, _ in extract_imports(block.code):
                if name in names and name not in found:
                    found.append(name)
            for name in extract_function_calls(block.code):
                if name in names and name not in found:
                    found.append(name)
            for name in found:
                references.append(
                    ExportReference(
                        export_name=name,
                        file=doc.path,
                        line=block.line_start,
                        context=_context_for(block.code, name),
                        block_index=index,
                    )
                )
    return references


# ----------------------------------------------------------------------
# Impact analysis


def analyze_docs_impact(
    diff: SpecDiff,
    files: Sequence[MarkdownDocFile],
    new_export_names: Sequence[str] = (),
    member_changes: Optional[Sequence[MemberChange]] = None,
) -> DocsImpactResult:
    """Find samples that use removed or changed API and new exports with no samples."""
    member_changes = list(member_changes or [])
    parser = SourceParser()
    changes_by_member = {change.member_name: change for change in member_changes}
    classes_with_member_changes = {change.class_name for change in member_changes}
    fallback_exports = [name for name in diff.breaking if name not in classes_with_member_changes]
    head_names = set(new_export_names)
    impacts: Dict[str, DocsImpact] = {}

    def add(file: str, reference: DocsImpactReference) -> None:
        impacts.setdefault(file, DocsImpact(file=file)).references.append(reference)

    for doc in files:
        for block in doc.code_blocks:
            reported: set[str] = set()
            method_classes: set[str] = set()
            if member_changes:
                for call in extract_method_calls(block.code, parser):
                    change = changes_by_member.get(call.method_name)
                    if change is None:
                        continue
                    line = block.line_start + 1 + call.line
                    key = f"{line}:{call.method_name}"
                    if key in reported:
                        continue
                    reported.add(key)
                    method_classes.add(change.class_name)
                    add(
                        doc.path,
                        DocsImpactReference(
                            export_name=change.class_name,
                            line=line,
                            change_type="method-removed" if change.change_type == "removed" else "method-changed",
                            context=call.context,
                            member_name=call.method_name,
                            member_change_type=change.change_type,
                            replacement_suggestion=change.suggestion,
                        ),
                    )
                for class_name in sorted(classes_with_member_changes - method_classes):
                    if has_instantiation(block.code, class_name, parser):
                        add(
                            doc.path,
                            DocsImpactReference(
                                export_name=class_name,
                                line=block.line_start,
                                change_type="signature-changed",
                                context=f"new {class_name}(...)",
                                is_instantiation=True,
                            ),
                        )

            if fallback_exports:
                single = MarkdownDocFile(path=doc.path, code_blocks=[block])
                for ref in find_export_references([single], fallback_exports):
                    key = f"{ref.line}:{ref.export_name}"
                    if key in reported:
                        continue
                    reported.add(key)
                    add(
                        doc.path,
                        DocsImpactReference(
                            export_name=ref.export_name,
                            line=ref.line,
                            change_type="signature-changed" if ref.export_name in head_names else "removed",
                            context=ref.context,
                        ),
                    )

    documented = {
        name
        for doc in files
        for block in doc.code_blocks
        for name in new_export_names
        if name in block.code
    }
    all_references = find_export_references(files, list(diff.breaking) + list(diff.non_breaking))
    impacted_files = list(impacts.values())
    return DocsImpactResult(
        impacted_files=impacted_files,
        missing_docs=[name for name in diff.non_breaking if name in head_names and name not in documented],
        all_undocumented=[name for name in new_export_names if name not in documented],
        stats={
            "filesScanned": len(files),
            "codeBlocksFound": sum(len(doc.code_blocks) for doc in files),
            "referencesFound": len(all_references),
            "impactedReferences": sum(len(impact.references) for impact in impacted_files),
            "totalExports": len(new_export_names),
            "documentedExports": len(documented),
        },
    )


def _context_for(code: str, name: str) -> str:
    lines = code.split("\n")
    for index, line in enumerate(lines):
        if name in line:
            return "\n".join(lines[max(0, index - 1) : index + 2])
    return code[:100]


__all__ = [
    "DocsImpact",
    "DocsImpactReference",
    "DocsImpactResult",
    "EXECUTABLE_LANGS",
    "ExportReference",
    "MarkdownCodeBlock",
    "MarkdownDocFile",
    "MethodCall",
    "analyze_docs_impact",
    "extract_function_calls",
    "extract_imports",
    "extract_method_calls",
    "find_export_references",
    "has_instantiation",
    "parse_markdown_file",
    "parse_markdown_files",
]
