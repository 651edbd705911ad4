"""Per-kind serialization of resolved exports into ``SpecExport`` records."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import SpecExport, SpecSignature
from .jsdoc import DocComment
from .parser import has_token
from .program import Declaration, Program, Resolved, TypeRef, VALUE_KINDS
from .schema import TypeWalker, doc_for, infer_value_schema, is_function_node, spec_tags

_TYPE_ONLY_KINDS = ("interface", "type")


class ExportSerializer:
    """Builds one ``SpecExport`` per exported name."""

    def __init__(self, program: Program, walker: TypeWalker) -> None:
        self.program = program
        self.walker = walker

    def primary_declaration(self, resolved: Resolved) -> Optional[Declaration]:
        """Pick the declaration that determines the export's kind.

        Value declarations win over type declarations sharing the same name
        (``const User = ...`` next to ``type User = ...``).
        """
        for declaration in resolved.declarations:
            if declaration.kind in VALUE_KINDS:
                return declaration
        for declaration in resolved.declarations:
            if declaration.kind in _TYPE_ONLY_KINDS:
                return declaration
        return None

    def serialize(self, name: str, resolved: Resolved, *, statement_doc: DocComment | None = None) -> Optional[SpecExport]:
        primary = self.primary_declaration(resolved)
        if primary is None:
            return None
        if primary.kind == "function":
            export = self._function(name, [d for d in resolved.declarations if d.kind == "function"])
        elif primary.kind == "variable":
            export = self._variable(name, primary)
        else:
            export = self._typed(name, primary)
        for declaration in resolved.declarations:
            if declaration is not primary and declaration.kind in _TYPE_ONLY_KINDS:
                self.walker.register(declaration, 0)
        if statement_doc is not None and statement_doc.deprecated:
            export.deprecated = True
        return export

    # ------------------------------------------------------------------
    # Kinds

    def _function(self, name: str, declarations: List[Declaration]) -> SpecExport:
        overloads = [d for d in declarations if d.node.type == "function_signature"]
        implementations = [d for d in declarations if d.node.type != "function_signature"]
        # Implementation signatures are hidden when overloads are declared.
        signature_decls = overloads if overloads and implementations else declarations
        docs = [(d, doc_for(d.anchor, d.module)) for d in declarations]
        primary, doc = next(((d, c) for d, c in docs if c.description or c.tags), docs[0])
        signatures = [
            self.walker.signature(d.node, d.module, doc=self._doc_or(d, doc))
            for d in signature_decls
        ]
        flags: Dict[str, Any] = {}
        if any(has_token(d.node, "async") for d in declarations):
            flags["async"] = True
        return self._base(name, "function", primary, doc, signatures=signatures, flags=flags)

    def _variable(self, name: str, declaration: Declaration) -> SpecExport:
        doc = doc_for(declaration.anchor, declaration.module)
        module = declaration.module
        node = declaration.node
        if node.type == "variable_declarator":
            value = node.child_by_field_name("value")
            annotation = node.child_by_field_name("type")
        else:
            value, annotation = node, None
        type_node = annotation.named_children[0] if annotation is not None and annotation.named_children else None

        if type_node is None and is_function_node(value):
            flags = {"async": True} if has_token(value, "async") else {}
            signature = self.walker.signature(value, module, doc=doc)
            return self._base(name, "function", declaration, doc, signatures=[signature], flags=flags)
        if type_node is not None and type_node.type == "function_type":
            signature = self.walker.signature(type_node, module, doc=doc)
            return self._base(name, "function", declaration, doc, signatures=[signature])
        if type_node is None and value is not None and value.type == "class":
            shape = self.walker.describe_declaration(
                Declaration(name=name, kind="class", node=value, anchor=declaration.anchor, module=module)
            )
            return self._base(
                name,
                "class",
                declaration,
                doc,
                signatures=shape.signatures,
                members=shape.members,
                type_parameters=shape.type_parameters,
            )

        flags = {}
        if type_node is not None:
            ref = TypeRef(self.program, type_node, module)
            extraction = self.walker.adapter_extraction(ref)
            schema = self.walker.schema_for(ref)
            if extraction is not None:
                flags["schemaLibrary"] = extraction.adapter_id
                if extraction.input is not None:
                    input_schema = self.walker.schema_for(extraction.input)
                    if input_schema != schema:
                        flags["inputSchema"] = input_schema
        else:
            schema = infer_value_schema(value, module)
        if _is_const(declaration):
            flags["const"] = True
        return self._base(name, "variable", declaration, doc, schema=schema, flags=flags)

    def _typed(self, name: str, declaration: Declaration) -> SpecExport:
        doc = doc_for(declaration.anchor, declaration.module)
        shape = self.walker.describe_declaration(declaration)
        flags: Dict[str, Any] = {}
        if declaration.kind == "class" and declaration.node.type == "abstract_class_declaration":
            flags["abstract"] = True
        if declaration.kind == "enum" and has_token(declaration.node, "const"):
            flags["const"] = True
        return self._base(
            name,
            declaration.kind,
            declaration,
            doc,
            signatures=shape.signatures,
            members=shape.members,
            schema=shape.schema if declaration.kind != "class" else None,
            type_parameters=shape.type_parameters,
            flags=flags,
        )

    # ------------------------------------------------------------------
    # Helpers

    def _base(
        self,
        name: str,
        kind: str,
        declaration: Declaration,
        doc: DocComment,
        *,
        signatures: Optional[List[SpecSignature]] = None,
        members=None,
        schema=None,
        type_parameters=None,
        flags: Optional[Dict[str, Any]] = None,
    ) -> SpecExport:
        if type_parameters is None and signatures:
            type_parameters = signatures[0].type_parameters
        return SpecExport(
            id=name,
            name=name,
            kind=kind,
            description=doc.description,
            signatures=list(signatures or []),
            members=list(members or []),
            examples=doc.examples,
            deprecated=doc.deprecated,
            tags=spec_tags(doc),
            source=self.walker.source_location(declaration),
            type_parameters=list(type_parameters or []),
            schema=schema,
            flags=dict(flags or {}),
        )

    @staticmethod
    def _doc_or(declaration: Declaration, fallback: DocComment) -> DocComment:
        own = doc_for(declaration.anchor, declaration.module)
        return own if own.tags or own.description else fallback


def _is_const(declaration: Declaration) -> bool:
    parent = declaration.node.parent
    return parent is not None and parent.type == "lexical_declaration" and has_token(parent, "const")


__all__ = ["ExportSerializer"]
