"""Module graph and symbol resolution over tree-sitter TypeScript trees.

``Program`` plays the role of a lightweight type checker: it loads the entry
module, follows relative imports and re-exports, and answers name lookups
("what does ``Options`` refer to in this file?") and structural queries
("what is the type of property ``_output`` on this reference?").  One
instance is created per extraction and is never shared.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node, Tree

from ..logging import get_logger
from ..models import Diagnostic
from .parser import SourceParser, describe_error, first_error, has_token, node_text

_RELATIVE_SUFFIXES = (
    ".ts",
    ".tsx",
    ".d.ts",
    ".mts",
    ".d.mts",
    ".cts",
    ".d.cts",
    "/index.ts",
    "/index.tsx",
    "/index.d.ts",
)
_JS_EXTENSIONS = (".js", ".mjs", ".cjs", ".jsx")

_DECLARATION_KINDS = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "function_signature": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
    "internal_module": "namespace",
    "module": "namespace",
}

TYPE_KINDS = ("interface", "type", "enum", "class")
VALUE_KINDS = ("function", "class", "variable", "enum")


@dataclass(eq=False)
class SourceModule:
    """A parsed source file plus its top-level bindings."""

    path: Path
    source: bytes
    tree: Tree
    external: bool = False
    declarations: Dict[str, List["Declaration"]] = field(default_factory=dict)
    imports: Dict[str, "ImportBinding"] = field(default_factory=dict)
    exports: List["ExportEntry"] = field(default_factory=list)

    def text(self, node: Optional[Node]) -> str:
        return node_text(node, self.source)


@dataclass(eq=False)
class Declaration:
    """A named declaration; ``anchor`` is the statement its doc comment precedes."""

    name: str
    kind: str
    node: Node
    anchor: Node
    module: SourceModule

    @property
    def identity(self) -> Tuple[str, str]:
        return (str(self.module.path), self.name)

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1

    @property
    def column(self) -> int:
        return self.node.start_point[1] + 1


@dataclass(frozen=True)
class ImportBinding:
    local: str
    imported: str
    specifier: str


@dataclass(frozen=True)
class ExportEntry:
    """One name in a module's export list.

    ``form`` is ``local`` (``export function f``, ``export { f }``),
    ``reexport`` (``export { f } from``), ``star`` (``export * from``),
    ``namespace`` (``export * as ns from``) or ``default`` (``export default
    <expression>``).
    """

    exported: str
    form: str
    node: Node
    local: Optional[str] = None
    specifier: Optional[str] = None


@dataclass
class Resolved:
    """Result of a name lookup."""

    declarations: List[Declaration] = field(default_factory=list)
    namespace: Optional[SourceModule] = None
    external: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.declarations) or self.namespace is not None

    def first(self, kinds: Iterable[str]) -> Optional[Declaration]:
        wanted = tuple(kinds)
        for declaration in self.declarations:
            if declaration.kind in wanted:
                return declaration
        return None


@dataclass(eq=False)
class TypeRef:
    """A type node in the context of its module and generic substitutions."""

    program: "Program"
    node: Node
    module: SourceModule
    substitutions: Dict[str, "TypeRef"] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return " ".join(self.module.text(self.node).split())

    @property
    def name(self) -> Optional[str]:
        return self.program.reference_name(self)

    def property(self, name: str) -> Optional["TypeRef"]:
        return self.program.get_property(self, name)

    def has_property(self, name: str) -> bool:
        return self.program.get_property(self, name) is not None

    def type_arguments(self) -> List["TypeRef"]:
        return self.program.type_arguments(self)

    def without_nullish(self) -> "TypeRef":
        return self.program.strip_nullish(self)


class Program:
    """Per-invocation symbol table for a TypeScript entry file."""

    def __init__(
        self,
        entry_file: Path,
        *,
        resolve_external_types: bool = False,
        package_dir: Path | None = None,
        parser: SourceParser | None = None,
    ) -> None:
        self.entry_file = entry_file.resolve()
        if not self.entry_file.is_file():
            raise FileNotFoundError(f"Entry file not found: {entry_file}")
        self.package_dir = (package_dir or self.entry_file.parent).resolve()
        self.resolve_external_types = resolve_external_types
        self.parser = parser or SourceParser()
        self.diagnostics: List[Diagnostic] = []
        self.logger = get_logger("extract.program")
        self._modules: Dict[Path, SourceModule] = {}
        self._resolution_cache: Dict[Tuple[Path, str], Optional[Path]] = {}
        self.entry_module = self.load_module(self.entry_file)

    # ------------------------------------------------------------------
    # Module loading

    @property
    def modules(self) -> List[SourceModule]:
        return list(self._modules.values())

    def source_files(self) -> List[Path]:
        """Loaded source files that belong to the package (not node_modules)."""
        return sorted(module.path for module in self._modules.values() if not module.external)

    def relative_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.package_dir).as_posix()
        except ValueError:
            return path.as_posix()

    def load_module(self, path: Path) -> SourceModule:
        path = path.resolve()
        cached = self._modules.get(path)
        if cached is not None:
            return cached
        source, tree = self.parser.parse_path(path)
        module = SourceModule(
            path=path,
            source=source,
            tree=tree,
            external="node_modules" in path.parts,
        )
        self._modules[path] = module
        self.logger.debug("Parsed %s", self.relative_path(path))
        error = first_error(tree.root_node)
        if error is not None:
            self.diagnostics.append(
                Diagnostic(
                    message=f"Syntax error in {self.relative_path(path)}: {describe_error(error, source)}",
                    severity="warning",
                    file=self.relative_path(path),
                    line=error.start_point[0] + 1,
                    column=error.start_point[1] + 1,
                )
            )
        self._index_module(module)
        return module

    def resolve_module(self, specifier: str, from_module: SourceModule) -> Optional[SourceModule]:
        key = (from_module.path, specifier)
        if key not in self._resolution_cache:
            self._resolution_cache[key] = self._resolve_specifier(specifier, from_module.path.parent)
        target = self._resolution_cache[key]
        if target is None:
            return None
        return self.load_module(target)

    def _resolve_specifier(self, specifier: str, base_dir: Path) -> Optional[Path]:
        if specifier.startswith("."):
            return _resolve_relative(base_dir / specifier)
        if not self.resolve_external_types:
            return None
        return self._resolve_package(specifier, base_dir)

    def _resolve_package(self, specifier: str, base_dir: Path) -> Optional[Path]:
        parts = specifier.split("/")
        package_name = "/".join(parts[:2]) if specifier.startswith("@") else parts[0]
        subpath = specifier[len(package_name) :].lstrip("/")
        candidates = [package_name]
        if not package_name.startswith("@types/"):
            candidates.append("@types/" + package_name.lstrip("@").replace("/", "__"))
        for directory in [base_dir, *base_dir.parents]:
            for name in candidates:
                package_root = directory / "node_modules" / name
                if not package_root.is_dir():
                    continue
                if subpath:
                    resolved = _resolve_relative(package_root / subpath)
                else:
                    resolved = _package_types_entry(package_root)
                if resolved is not None:
                    return resolved
        return None

    # ------------------------------------------------------------------
    # Indexing

    def _index_module(self, module: SourceModule) -> None:
        for statement in module.tree.root_node.named_children:
            if statement.type == "import_statement":
                self._index_import(module, statement)
            elif statement.type == "export_statement":
                self._index_export(module, statement)
            else:
                for declaration in self._declarations_in(module, statement, anchor=statement):
                    module.declarations.setdefault(declaration.name, []).append(declaration)

    def _index_import(self, module: SourceModule, statement: Node) -> None:
        source_node = statement.child_by_field_name("source")
        if source_node is None:
            return
        specifier = _string_value(module.text(source_node))
        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            for child in clause.named_children:
                if child.type == "identifier":
                    local = module.text(child)
                    module.imports[local] = ImportBinding(local, "default", specifier)
                elif child.type == "namespace_import":
                    identifiers = [c for c in child.named_children if c.type == "identifier"]
                    if identifiers:
                        local = module.text(identifiers[-1])
                        module.imports[local] = ImportBinding(local, "*", specifier)
                elif child.type == "named_imports":
                    for spec in child.named_children:
                        if spec.type != "import_specifier":
                            continue
                        name_node = spec.child_by_field_name("name")
                        alias_node = spec.child_by_field_name("alias")
                        imported = _string_value(module.text(name_node))
                        local = module.text(alias_node) if alias_node is not None else imported
                        module.imports[local] = ImportBinding(local, imported, specifier)

    def _index_export(self, module: SourceModule, statement: Node) -> None:
        source_node = statement.child_by_field_name("source")
        specifier = _string_value(module.text(source_node)) if source_node is not None else None
        declaration_node = statement.child_by_field_name("declaration")
        is_default = has_token(statement, "default")

        if declaration_node is not None:
            declarations = list(self._declarations_in(module, declaration_node, anchor=statement))
            for declaration in declarations:
                if is_default:
                    default_declaration = Declaration(
                        name="default",
                        kind=declaration.kind,
                        node=declaration.node,
                        anchor=statement,
                        module=module,
                    )
                    if declaration.name != "default":
                        module.declarations.setdefault(declaration.name, []).append(declaration)
                    module.declarations.setdefault("default", []).append(default_declaration)
                    _append_export(module, ExportEntry("default", "local", statement, local="default"))
                else:
                    module.declarations.setdefault(declaration.name, []).append(declaration)
                    _append_export(
                        module, ExportEntry(declaration.name, "local", statement, local=declaration.name)
                    )
            if is_default and not declarations:
                self._index_default_expression(module, statement, declaration_node)
            return

        value_node = statement.child_by_field_name("value")
        if is_default and value_node is not None:
            self._index_default_expression(module, statement, value_node)
            return

        for child in statement.named_children:
            if child.type == "export_clause":
                for spec in child.named_children:
                    if spec.type != "export_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    alias_node = spec.child_by_field_name("alias")
                    local = _string_value(module.text(name_node))
                    exported = _string_value(module.text(alias_node)) if alias_node is not None else local
                    if specifier is not None:
                        entry = ExportEntry(exported, "reexport", statement, local=local, specifier=specifier)
                    else:
                        entry = ExportEntry(exported, "local", statement, local=local)
                    _append_export(module, entry)
                return
            if child.type == "namespace_export":
                names = [c for c in child.named_children if c.type in ("identifier", "string")]
                if names and specifier is not None:
                    exported = _string_value(module.text(names[-1]))
                    _append_export(
                        module, ExportEntry(exported, "namespace", statement, specifier=specifier)
                    )
                return
        if specifier is not None and has_token(statement, "*"):
            _append_export(module, ExportEntry("*", "star", statement, specifier=specifier))

    def _index_default_expression(self, module: SourceModule, statement: Node, value: Node) -> None:
        if value.type == "identifier":
            _append_export(module, ExportEntry("default", "local", statement, local=module.text(value)))
            return
        declaration = Declaration(
            name="default", kind="variable", node=value, anchor=statement, module=module
        )
        module.declarations.setdefault("default", []).append(declaration)
        _append_export(module, ExportEntry("default", "default", statement, local="default"))

    def _declarations_in(self, module: SourceModule, node: Node, *, anchor: Node) -> Iterable[Declaration]:
        if node.type == "ambient_declaration":
            for child in node.named_children:
                yield from self._declarations_in(module, child, anchor=anchor)
            return
        if node.type in ("lexical_declaration", "variable_declaration"):
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                yield Declaration(
                    name=module.text(name_node),
                    kind="variable",
                    node=declarator,
                    anchor=anchor,
                    module=module,
                )
            return
        kind = _DECLARATION_KINDS.get(node.type)
        if kind is None:
            return
        name_node = node.child_by_field_name("name")
        if name_node is None:
            if kind in ("function", "class"):
                yield Declaration(name="default", kind=kind, node=node, anchor=anchor, module=module)
            return
        if kind == "namespace" and name_node.type == "string":
            return
        yield Declaration(
            name=module.text(name_node), kind=kind, node=node, anchor=anchor, module=module
        )

    # ------------------------------------------------------------------
    # Name resolution

    def exported_names(self, module: SourceModule, _visiting: Set[Path] | None = None) -> List[str]:
        """All names exported by ``module`` in source order, star exports expanded."""
        visiting = _visiting if _visiting is not None else set()
        if module.path in visiting:
            return []
        visiting.add(module.path)
        names: List[str] = []
        for entry in module.exports:
            if entry.form != "star":
                if entry.exported not in names:
                    names.append(entry.exported)
                continue
            target = self.resolve_module(entry.specifier or "", module)
            if target is None:
                self._warn_unresolved(module, entry)
                continue
            for name in self.exported_names(target, visiting):
                if name != "default" and name not in names:
                    names.append(name)
        return names

    def export_lookup(
        self,
        module: SourceModule,
        exported: str,
        _visiting: Set[Tuple[Path, str]] | None = None,
    ) -> Resolved:
        visiting = _visiting if _visiting is not None else set()
        key = (module.path, exported)
        if key in visiting:
            return Resolved()
        visiting.add(key)

        for entry in module.exports:
            if entry.exported != exported:
                continue
            if entry.form in ("local", "default"):
                return self.lookup(entry.local or exported, module, visiting)
            if entry.form == "reexport":
                target = self.resolve_module(entry.specifier or "", module)
                if target is None:
                    return Resolved(external=entry.specifier)
                return self.export_lookup(target, entry.local or exported, visiting)
            if entry.form == "namespace":
                target = self.resolve_module(entry.specifier or "", module)
                if target is None:
                    return Resolved(external=entry.specifier)
                return Resolved(namespace=target)

        if exported == "default":
            return Resolved()
        for entry in module.exports:
            if entry.form != "star":
                continue
            target = self.resolve_module(entry.specifier or "", module)
            if target is None:
                continue
            resolved = self.export_lookup(target, exported, visiting)
            if resolved.found:
                return resolved
        return Resolved()

    def lookup(
        self,
        name: str,
        module: SourceModule,
        _visiting: Set[Tuple[Path, str]] | None = None,
    ) -> Resolved:
        """Resolve an unqualified name as seen from inside ``module``."""
        declarations = module.declarations.get(name)
        if declarations:
            return Resolved(declarations=list(declarations))
        binding = module.imports.get(name)
        if binding is None:
            return Resolved()
        target = self.resolve_module(binding.specifier, module)
        if target is None:
            return Resolved(external=binding.specifier)
        if binding.imported == "*":
            return Resolved(namespace=target)
        return self.export_lookup(target, binding.imported, _visiting)

    def lookup_qualified(self, qualified: str, module: SourceModule) -> Resolved:
        parts = qualified.split(".")
        resolved = self.lookup(parts[0], module)
        for part in parts[1:]:
            if resolved.namespace is None:
                return Resolved(external=resolved.external)
            resolved = self.export_lookup(resolved.namespace, part)
        return resolved

    def _warn_unresolved(self, module: SourceModule, entry: ExportEntry) -> None:
        message = f"Cannot resolve module '{entry.specifier}' from {self.relative_path(module.path)}"
        if any(d.message == message for d in self.diagnostics):
            return
        self.diagnostics.append(
            Diagnostic(
                message=message,
                severity="warning",
                file=self.relative_path(module.path),
                line=entry.node.start_point[0] + 1,
                column=entry.node.start_point[1] + 1,
            )
        )

    # ------------------------------------------------------------------
    # Type queries

    def type_ref(
        self, node: Node, module: SourceModule, substitutions: Dict[str, TypeRef] | None = None
    ) -> TypeRef:
        return TypeRef(self, node, module, dict(substitutions or {}))

    def resolve_substitution(self, ref: TypeRef) -> TypeRef:
        """Follow generic substitutions until a concrete type node is reached."""
        seen = 0
        current = ref
        while seen < 32:
            node = unwrap_type(current.node)
            if node.type != "type_identifier":
                return current
            replacement = current.substitutions.get(current.module.text(node))
            if replacement is None:
                return current
            current = replacement
            seen += 1
        return current

    def reference_name(self, ref: TypeRef) -> Optional[str]:
        ref = self.resolve_substitution(ref)
        node = unwrap_type(ref.node)
        if node.type == "generic_type":
            node = node.child_by_field_name("name") or node
        if node.type in ("type_identifier", "nested_type_identifier", "identifier", "member_expression"):
            return ref.module.text(node)
        return None

    def type_arguments(self, ref: TypeRef) -> List[TypeRef]:
        ref = self.resolve_substitution(ref)
        node = unwrap_type(ref.node)
        if node.type != "generic_type":
            return []
        arguments = node.child_by_field_name("type_arguments")
        if arguments is None:
            return []
        return [TypeRef(self, arg, ref.module, ref.substitutions) for arg in arguments.named_children]

    def resolve_reference(self, ref: TypeRef) -> Optional[Tuple[Declaration, Dict[str, TypeRef]]]:
        """Return the declaration a reference points to plus its generic bindings."""
        ref = self.resolve_substitution(ref)
        name = self.reference_name(ref)
        if not name or name in ref.substitutions:
            return None
        declaration = self.lookup_qualified(name, ref.module).first(TYPE_KINDS)
        if declaration is None:
            return None
        bindings = self.bind_type_parameters(declaration, self.type_arguments(ref))
        return declaration, bindings

    def bind_type_parameters(
        self, declaration: Declaration, arguments: List[TypeRef]
    ) -> Dict[str, TypeRef]:
        bindings: Dict[str, TypeRef] = {}
        parameters = declaration.node.child_by_field_name("type_parameters")
        if parameters is None:
            return bindings
        index = 0
        for parameter in parameters.named_children:
            if parameter.type != "type_parameter":
                continue
            name = declaration.module.text(parameter.child_by_field_name("name"))
            if index < len(arguments):
                bindings[name] = arguments[index]
            else:
                default = parameter.child_by_field_name("value")
                default_type = default.named_children[0] if default is not None and default.named_children else None
                if default_type is not None:
                    bindings[name] = TypeRef(self, default_type, declaration.module, dict(bindings))
            index += 1
        return bindings

    def get_property(self, ref: TypeRef, name: str, _depth: int = 0) -> Optional[TypeRef]:
        """Return the declared type of property ``name`` on ``ref``, if any."""
        if _depth > 16:
            return None
        ref = self.resolve_substitution(ref)
        node = unwrap_type(ref.node)
        if node.type in ("union_type", "intersection_type"):
            for member in flatten_type_list(node):
                if is_nullish(member, ref.module):
                    continue
                found = self.get_property(TypeRef(self, member, ref.module, ref.substitutions), name, _depth + 1)
                if found is not None:
                    return found
            return None
        if node.type in ("object_type", "interface_body"):
            return self._member_type(node, ref.module, ref.substitutions, name)
        target = self.resolve_reference(ref)
        if target is None:
            return None
        declaration, bindings = target
        return self._declaration_property(declaration, bindings, name, _depth + 1)

    def strip_nullish(self, ref: TypeRef) -> TypeRef:
        ref = self.resolve_substitution(ref)
        node = unwrap_type(ref.node)
        if node.type != "union_type":
            return ref
        members = [m for m in flatten_type_list(node) if not is_nullish(m, ref.module)]
        if len(members) == 1:
            return TypeRef(self, members[0], ref.module, ref.substitutions)
        return ref

    def _declaration_property(
        self, declaration: Declaration, bindings: Dict[str, TypeRef], name: str, depth: int
    ) -> Optional[TypeRef]:
        node = declaration.node
        module = declaration.module
        if declaration.kind == "type":
            value = node.child_by_field_name("value")
            if value is None:
                return None
            return self.get_property(TypeRef(self, value, module, bindings), name, depth)
        if declaration.kind not in ("interface", "class"):
            return None
        body = node.child_by_field_name("body")
        if body is not None:
            found = self._member_type(body, module, bindings, name)
            if found is not None:
                return found
        for heritage in self.heritage(declaration, bindings):
            found = self.get_property(heritage, name, depth)
            if found is not None:
                return found
        return None

    def heritage(self, declaration: Declaration, bindings: Dict[str, TypeRef]) -> List[TypeRef]:
        """Type references a class or interface extends, bound to ``bindings``."""
        refs: List[TypeRef] = []
        module = declaration.module
        for child in declaration.node.named_children:
            if child.type == "extends_type_clause":
                for base in child.named_children:
                    refs.append(TypeRef(self, base, module, bindings))
            elif child.type == "class_heritage":
                for clause in child.named_children:
                    if clause.type != "extends_clause":
                        continue
                    value = clause.child_by_field_name("value")
                    if value is None:
                        continue
                    arguments = clause.child_by_field_name("type_arguments")
                    refs.append(_HeritageRef(self, value, module, bindings, arguments))
        return refs

    def _member_type(
        self, body: Node, module: SourceModule, bindings: Dict[str, TypeRef], name: str
    ) -> Optional[TypeRef]:
        for member in body.named_children:
            if member.type not in ("property_signature", "public_field_definition"):
                continue
            if member_name(member, module) != name:
                continue
            annotation = member.child_by_field_name("type")
            if annotation is None or not annotation.named_children:
                return None
            return TypeRef(self, annotation.named_children[0], module, bindings)
        return None


class _HeritageRef(TypeRef):
    """``extends Base<Args>`` in a class, where the base is an expression node."""

    def __init__(
        self,
        program: Program,
        node: Node,
        module: SourceModule,
        substitutions: Dict[str, TypeRef],
        arguments: Optional[Node],
    ) -> None:
        super().__init__(program, node, module, substitutions)
        self._arguments = arguments

    def type_arguments(self) -> List[TypeRef]:
        if self._arguments is None:
            return []
        return [TypeRef(self.program, arg, self.module, self.substitutions) for arg in self._arguments.named_children]


# ----------------------------------------------------------------------
# Node helpers shared by the walker


def unwrap_type(node: Node) -> Node:
    while node.type in ("parenthesized_type", "type_annotation") and node.named_children:
        node = node.named_children[0]
    return node


def flatten_type_list(node: Node) -> List[Node]:
    """Flatten nested union or intersection nodes of the same operator."""
    members: List[Node] = []
    for child in node.named_children:
        inner = unwrap_type(child)
        if inner.type == node.type:
            members.extend(flatten_type_list(inner))
        else:
            members.append(inner)
    return members


def is_nullish(node: Node, module: SourceModule) -> bool:
    return module.text(unwrap_type(node)).strip() in ("undefined", "null", "void")


def member_name(member: Node, module: SourceModule) -> Optional[str]:
    name_node = member.child_by_field_name("name")
    if name_node is None:
        return None
    text = module.text(name_node)
    if name_node.type == "computed_property_name":
        text = text.strip()[1:-1]
    return _string_value(text)


def _string_value(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"', "`"):
        return text[1:-1]
    return text


def _append_export(module: SourceModule, entry: ExportEntry) -> None:
    if entry.form != "star" and any(
        existing.exported == entry.exported and existing.form == entry.form and existing.local == entry.local
        for existing in module.exports
    ):
        return
    module.exports.append(entry)


def _resolve_relative(base: Path) -> Optional[Path]:
    text = str(base)
    for extension in _JS_EXTENSIONS:
        if text.endswith(extension):
            text = text[: -len(extension)]
            break
    plain = Path(text)
    if plain.is_file() and plain.suffix in (".ts", ".tsx", ".mts", ".cts"):
        return plain.resolve()
    for suffix in _RELATIVE_SUFFIXES:
        candidate = Path(text + suffix)
        if candidate.is_file():
            return candidate.resolve()
    return None


def _package_types_entry(package_root: Path) -> Optional[Path]:
    manifest = package_root / "package.json"
    if manifest.is_file():
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            data = {}
        for key in ("types", "typings"):
            value = data.get(key) if isinstance(data, dict) else None
            if isinstance(value, str):
                candidate = (package_root / value).resolve()
                if candidate.is_file():
                    return candidate
                resolved = _resolve_relative(package_root / value)
                if resolved is not None:
                    return resolved
    for name in ("index.d.ts", "index.ts"):
        candidate = package_root / name
        if candidate.is_file():
            return candidate.resolve()
    return None


__all__ = [
    "Declaration",
    "ExportEntry",
    "ImportBinding",
    "Program",
    "Resolved",
    "SourceModule",
    "TYPE_KINDS",
    "TypeRef",
    "VALUE_KINDS",
    "flatten_type_list",
    "is_nullish",
    "member_name",
    "unwrap_type",
]
