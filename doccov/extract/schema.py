"""Walks TypeScript type nodes and turns them into JSON-schema-like dicts."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from ..config import DEFAULT_MAX_DEPTH
from ..models import (
    Schema,
    SourceLocation,
    SpecMember,
    SpecParameter,
    SpecReturns,
    SpecSignature,
    SpecTag,
    SpecThrows,
    SpecType,
    TypeParameter,
)
from .jsdoc import DocComment, ParamTag, leading_doc_comment, parse_doc_comment, parse_param_tag, parse_returns_tag, split_type_expression
from .parser import has_token
from .program import Declaration, Program, SourceModule, TypeRef, flatten_type_list, member_name, unwrap_type

if TYPE_CHECKING:
    from ..adapters import SchemaAdapterRegistry, SchemaExtraction

PRIMITIVE_SCHEMAS: Dict[str, Schema] = {
    "string": {"type": "string"},
    "number": {"type": "number"},
    "boolean": {"type": "boolean"},
    "bigint": {"type": "bigint"},
    "symbol": {"type": "symbol"},
    "undefined": {"type": "undefined"},
    "null": {"type": "null"},
    "void": {"type": "void"},
    "any": {"type": "any"},
    "unknown": {"type": "unknown"},
    "never": {"type": "never"},
    "object": {"type": "object"},
}

BUILTIN_TYPE_SCHEMAS: Dict[str, Schema] = {
    "Date": {"type": "string", "format": "date-time"},
    "RegExp": {"type": "object", "description": "RegExp"},
    "Error": {"type": "object"},
    "Map": {"type": "object"},
    "Set": {"type": "object"},
    "WeakMap": {"type": "object"},
    "WeakSet": {"type": "object"},
    "Function": {"type": "object"},
    "ArrayBuffer": {"type": "string", "format": "binary"},
    "ArrayBufferLike": {"type": "string", "format": "binary"},
    "DataView": {"type": "string", "format": "binary"},
    "Uint8Array": {"type": "string", "format": "byte"},
    "Uint16Array": {"type": "string", "format": "byte"},
    "Uint32Array": {"type": "string", "format": "byte"},
    "Int8Array": {"type": "string", "format": "byte"},
    "Int16Array": {"type": "string", "format": "byte"},
    "Int32Array": {"type": "string", "format": "byte"},
    "Float32Array": {"type": "string", "format": "byte"},
    "Float64Array": {"type": "string", "format": "byte"},
    "BigInt64Array": {"type": "string", "format": "byte"},
    "BigUint64Array": {"type": "string", "format": "byte"},
}

_FUNCTION_NODES = (
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "function_expression",
    "function",
    "arrow_function",
    "method_definition",
    "method_signature",
    "abstract_method_signature",
    "call_signature",
    "construct_signature",
    "function_type",
    "constructor_type",
)


@dataclass
class DeclarationShape:
    """Schema, members and signatures derived from one declaration."""

    schema: Optional[Schema] = None
    members: List[SpecMember] = field(default_factory=list)
    signatures: List[SpecSignature] = field(default_factory=list)
    type_parameters: List[TypeParameter] = field(default_factory=list)


def doc_for(node: Node, module: SourceModule) -> DocComment:
    raw = leading_doc_comment(node, module.source)
    return parse_doc_comment(raw) if raw else DocComment()


def spec_tags(doc: DocComment) -> List[SpecTag]:
    return [SpecTag(name=tag.name, text=tag.text) for tag in doc.tags]


class TypeWalker:
    """Converts type nodes into schemas, registering named types as it goes.

    Named references are expanded once into ``types`` and emitted as
    ``$ref``.  Expansion is bounded by ``max_depth`` and by a visited set
    keyed on declaration identity so recursive types terminate.
    """

    def __init__(
        self,
        program: Program,
        *,
        registry: "SchemaAdapterRegistry | None" = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.program = program
        self.registry = registry
        self.max_depth = max_depth
        self.types: Dict[str, SpecType] = {}
        self._ids: Dict[Tuple[str, str], str] = {}
        self._visiting: Set[Tuple[str, str]] = set()

    def collected_types(self) -> List[SpecType]:
        return [self.types[key] for key in sorted(self.types)]

    # ------------------------------------------------------------------
    # Schemas

    def schema_for_node(
        self,
        node: Optional[Node],
        module: SourceModule,
        substitutions: Dict[str, TypeRef] | None = None,
        depth: int = 0,
    ) -> Schema:
        if node is None:
            return {"type": "any"}
        return self.schema_for(TypeRef(self.program, node, module, dict(substitutions or {})), depth)

    def schema_for(self, ref: TypeRef, depth: int = 0) -> Schema:
        ref = self.program.resolve_substitution(ref)
        node = unwrap_type(ref.node)
        if node is not ref.node:
            ref = TypeRef(self.program, node, ref.module, ref.substitutions)
        text = ref.text
        primitive = PRIMITIVE_SCHEMAS.get(text)
        if primitive is not None:
            return dict(primitive)

        kind = node.type
        if kind == "literal_type":
            return _literal_schema(node, ref.module)
        if kind == "template_literal_type":
            return {"type": "string"}
        if kind == "union_type":
            return self._union_schema(ref, depth)
        if kind == "intersection_type":
            return {"allOf": [self._child_schema(ref, child, depth) for child in flatten_type_list(node)]}
        if kind == "array_type":
            element = node.named_children[0] if node.named_children else None
            return {"type": "array", "items": self._child_schema(ref, element, depth)}
        if kind == "readonly_type":
            inner = node.named_children[0] if node.named_children else None
            return self._child_schema(ref, inner, depth)
        if kind == "tuple_type":
            return self._tuple_schema(ref, depth)
        if kind in ("object_type", "interface_body"):
            return self.object_schema(node, ref.module, ref.substitutions, depth)
        if kind in ("function_type", "constructor_type"):
            signature = self.signature(node, ref.module, substitutions=ref.substitutions, depth=depth)
            return {"type": "function", "signatures": [signature.to_dict()]}
        if kind in ("type_identifier", "generic_type", "nested_type_identifier"):
            return self._reference_schema(ref, depth)
        return {"type": text}

    def adapter_extraction(self, ref: TypeRef) -> "SchemaExtraction | None":
        if self.registry is None:
            return None
        node = unwrap_type(self.program.resolve_substitution(ref).node)
        if node.type not in ("type_identifier", "generic_type", "nested_type_identifier"):
            return None
        return self.registry.extract(ref)

    def _child_schema(self, ref: TypeRef, node: Optional[Node], depth: int) -> Schema:
        return self.schema_for_node(node, ref.module, ref.substitutions, depth)

    def _union_schema(self, ref: TypeRef, depth: int) -> Schema:
        schemas = [self._child_schema(ref, child, depth) for child in flatten_type_list(ref.node)]
        literal_types = {schema.get("type") for schema in schemas if set(schema) == {"type", "enum"}}
        if len(literal_types) == 1 and all(set(schema) == {"type", "enum"} for schema in schemas):
            values: List[object] = []
            for schema in schemas:
                values.extend(schema["enum"])
            return {"type": literal_types.pop(), "enum": values}
        return {"anyOf": schemas}

    def _tuple_schema(self, ref: TypeRef, depth: int) -> Schema:
        items: List[Schema] = []
        minimum = 0
        bounded = True
        for child in ref.node.named_children:
            element = child
            optional = False
            if child.type == "optional_type":
                optional = True
                element = child.named_children[0] if child.named_children else child
            elif child.type == "rest_type":
                bounded = False
                element = child.named_children[0] if child.named_children else child
            elif child.child_by_field_name("type") is not None:
                optional = has_token(child, "?")
                element = child.child_by_field_name("type")
            items.append(self._child_schema(ref, element, depth))
            if not optional and bounded:
                minimum += 1
        schema: Schema = {"type": "array", "prefixItems": items, "minItems": minimum}
        if bounded:
            schema["maxItems"] = len(items)
        return schema

    def _reference_schema(self, ref: TypeRef, depth: int) -> Schema:
        extraction = self.adapter_extraction(ref)
        if extraction is not None:
            return self.schema_for(extraction.output, depth)

        name = self.program.reference_name(ref) or ref.text
        base = name.rsplit(".", 1)[-1]
        arguments = self.program.type_arguments(ref)
        if base in ("Array", "ReadonlyArray") and len(arguments) == 1:
            return {"type": "array", "items": self.schema_for(arguments[0], depth)}
        if base == "Record" and len(arguments) == 2:
            return {"type": "object", "additionalProperties": self.schema_for(arguments[1], depth)}

        target = self.program.resolve_reference(ref)
        if target is not None:
            declaration, _bindings = target
            schema: Schema = {"$ref": f"#/types/{self.register(declaration, depth)}"}
            if arguments:
                schema["typeArguments"] = [self.schema_for(argument, depth) for argument in arguments]
            return schema
        builtin = BUILTIN_TYPE_SCHEMAS.get(base)
        if builtin is not None and not arguments:
            return copy.deepcopy(builtin)
        return {"type": ref.text}

    def object_schema(
        self,
        body: Node,
        module: SourceModule,
        substitutions: Dict[str, TypeRef] | None = None,
        depth: int = 0,
    ) -> Schema:
        properties: Dict[str, Schema] = {}
        required: List[str] = []
        additional: Optional[Schema] = None
        for member in body.named_children:
            if member.type == "index_signature":
                value = member.child_by_field_name("type")
                if value is not None and value.named_children:
                    additional = self.schema_for_node(value.named_children[0], module, substitutions, depth)
                continue
            if member.type not in ("property_signature", "method_signature"):
                continue
            name = member_name(member, module)
            if name is None:
                continue
            if member.type == "method_signature":
                signature = self.signature(member, module, substitutions=substitutions, depth=depth)
                schema: Schema = {"type": "function", "signatures": [signature.to_dict()]}
            else:
                annotation = member.child_by_field_name("type")
                value = annotation.named_children[0] if annotation is not None and annotation.named_children else None
                schema = self.schema_for_node(value, module, substitutions, depth)
            description = doc_for(member, module).description
            if description:
                schema = _with_description(schema, description)
            properties[name] = schema
            if not has_token(member, "?"):
                required.append(name)
        result: Schema = {"type": "object", "properties": properties}
        if required:
            result["required"] = required
        if additional is not None:
            result["additionalProperties"] = additional
        return result

    # ------------------------------------------------------------------
    # Named types

    def register(self, declaration: Declaration, depth: int) -> str:
        """Ensure ``declaration`` is present in ``types`` and return its id."""
        identity = declaration.identity
        existing = self._ids.get(identity)
        if existing is not None:
            return existing
        type_id = self._allocate_id(declaration.name)
        self._ids[identity] = type_id
        stub = SpecType(
            id=type_id,
            name=declaration.name,
            kind=declaration.kind,
            source=self.source_location(declaration),
        )
        self.types[type_id] = stub
        if depth >= self.max_depth or identity in self._visiting:
            return type_id
        self._visiting.add(identity)
        try:
            self.types[type_id] = self.describe_type(declaration, type_id, depth + 1)
        finally:
            self._visiting.discard(identity)
        return type_id

    def describe_type(self, declaration: Declaration, type_id: str, depth: int) -> SpecType:
        doc = doc_for(declaration.anchor, declaration.module)
        shape = self.describe_declaration(declaration, depth)
        return SpecType(
            id=type_id,
            name=declaration.name,
            kind=declaration.kind,
            description=doc.description,
            schema=shape.schema,
            members=shape.members,
            source=self.source_location(declaration),
            type_parameters=shape.type_parameters,
            tags=spec_tags(doc),
            deprecated=doc.deprecated,
        )

    def describe_declaration(self, declaration: Declaration, depth: int = 0) -> DeclarationShape:
        node = declaration.node
        module = declaration.module
        shape = DeclarationShape(type_parameters=self.type_parameters(node, module))
        if declaration.kind == "interface":
            body = node.child_by_field_name("body")
            shape.members = self.members(body, module, depth) if body is not None else []
            schema = self.object_schema(body, module, depth=depth) if body is not None else {"type": "object"}
            bases = [self.schema_for(base, depth) for base in self.program.heritage(declaration, {})]
            shape.schema = {"allOf": [*bases, schema]} if bases else schema
        elif declaration.kind == "type":
            shape.schema = self.schema_for_node(node.child_by_field_name("value"), module, depth=depth)
        elif declaration.kind == "enum":
            shape.schema, shape.members = self._enum_shape(node, module)
        elif declaration.kind == "class":
            body = node.child_by_field_name("body")
            shape.members = self.members(body, module, depth) if body is not None else []
            shape.signatures = [
                signature
                for member in shape.members
                if member.kind == "constructor"
                for signature in member.signatures
            ]
        return shape

    def source_location(self, declaration: Declaration) -> SourceLocation:
        return SourceLocation(file=self.program.relative_path(declaration.module.path), line=declaration.line)

    def _allocate_id(self, name: str) -> str:
        if name not in self.types:
            return name
        suffix = 2
        while f"{name}_{suffix}" in self.types:
            suffix += 1
        return f"{name}_{suffix}"

    def _enum_shape(self, node: Node, module: SourceModule) -> Tuple[Schema, List[SpecMember]]:
        body = node.child_by_field_name("body")
        values: List[object] = []
        members: List[SpecMember] = []
        next_value: Optional[int] = 0
        for child in body.named_children if body is not None else []:
            if child.type in ("property_identifier", "string"):
                name = module.text(child).strip("'\"")
                value: object = next_value if next_value is not None else name
            elif child.type == "enum_assignment":
                name = module.text(child.child_by_field_name("name")).strip("'\"")
                value = _literal_value(child.child_by_field_name("value"), module)
            else:
                continue
            next_value = value + 1 if isinstance(value, int) else None
            values.append(value)
            doc = doc_for(child, module)
            members.append(
                SpecMember(
                    id=name,
                    name=name,
                    kind="property",
                    readonly=True,
                    schema={"const": value},
                    description=doc.description,
                    tags=spec_tags(doc),
                    deprecated=doc.deprecated,
                )
            )
        if values and all(isinstance(value, (int, float)) for value in values):
            return {"type": "number", "enum": values}, members
        if values and all(isinstance(value, str) for value in values):
            return {"type": "string", "enum": values}, members
        return {"enum": values}, members

    # ------------------------------------------------------------------
    # Members

    def members(self, body: Node, module: SourceModule, depth: int = 0) -> List[SpecMember]:
        """Collect class or interface members, merging overloads per name."""
        ordered: List[str] = []
        entries: Dict[str, SpecMember] = {}
        overloaded: Set[str] = set()

        def _add(member: SpecMember, *, overload: bool = False) -> None:
            key = member.id
            existing = entries.get(key)
            if existing is None:
                ordered.append(key)
                entries[key] = member
                if overload:
                    overloaded.add(key)
                return
            if overload and key not in overloaded:
                existing.signatures = []
                overloaded.add(key)
            elif not overload and key in overloaded:
                return
            existing.signatures.extend(member.signatures)

        for child in body.named_children:
            if child.type in ("method_definition", "method_signature", "abstract_method_signature"):
                member = self._method_member(child, module, depth)
                if member is None:
                    continue
                is_overload = child.type != "method_definition" and body.type == "class_body"
                _add(member, overload=is_overload)
                if member.kind == "constructor":
                    for parameter_member in self._parameter_properties(child, module, depth):
                        _add(parameter_member)
            elif child.type in ("property_signature", "public_field_definition"):
                member = self._property_member(child, module, depth)
                if member is not None:
                    _add(member)
        return [entries[key] for key in ordered]

    def _method_member(self, node: Node, module: SourceModule, depth: int) -> Optional[SpecMember]:
        name = member_name(node, module)
        if name is None:
            return None
        doc = doc_for(node, module)
        if name == "constructor":
            kind = "constructor"
        elif has_token(node, "get") or has_token(node, "set"):
            kind = "accessor"
        else:
            kind = "method"
        flags: Dict[str, object] = {}
        if has_token(node, "async"):
            flags["async"] = True
        if has_token(node, "abstract") or node.type == "abstract_method_signature":
            flags["abstract"] = True
        return SpecMember(
            id=name,
            name=name,
            kind=kind,
            visibility=_visibility(node, module, name),
            static=has_token(node, "static"),
            optional=has_token(node, "?"),
            signatures=[self.signature(node, module, doc=doc, depth=depth)],
            description=doc.description,
            tags=spec_tags(doc),
            deprecated=doc.deprecated,
            flags=flags,
        )

    def _property_member(self, node: Node, module: SourceModule, depth: int) -> Optional[SpecMember]:
        name = member_name(node, module)
        if name is None:
            return None
        doc = doc_for(node, module)
        annotation = node.child_by_field_name("type")
        if annotation is not None and annotation.named_children:
            schema = self.schema_for_node(annotation.named_children[0], module, depth=depth)
        else:
            schema = infer_value_schema(node.child_by_field_name("value"), module)
        return SpecMember(
            id=name,
            name=name,
            kind="property",
            visibility=_visibility(node, module, name),
            static=has_token(node, "static"),
            readonly=has_token(node, "readonly"),
            optional=has_token(node, "?"),
            schema=schema,
            description=doc.description,
            tags=spec_tags(doc),
            deprecated=doc.deprecated,
        )

    def _parameter_properties(self, constructor: Node, module: SourceModule, depth: int) -> List[SpecMember]:
        members: List[SpecMember] = []
        parameters = constructor.child_by_field_name("parameters")
        for parameter in parameters.named_children if parameters is not None else []:
            modifiers = [c for c in parameter.named_children if c.type == "accessibility_modifier"]
            readonly = has_token(parameter, "readonly")
            if not modifiers and not readonly:
                continue
            pattern = parameter.child_by_field_name("pattern")
            if pattern is None or pattern.type != "identifier":
                continue
            name = module.text(pattern)
            annotation = parameter.child_by_field_name("type")
            value = annotation.named_children[0] if annotation is not None and annotation.named_children else None
            members.append(
                SpecMember(
                    id=name,
                    name=name,
                    kind="property",
                    visibility=module.text(modifiers[0]).strip() if modifiers else "public",
                    readonly=readonly,
                    optional=parameter.type == "optional_parameter",
                    schema=self.schema_for_node(value, module, depth=depth),
                )
            )
        return members

    # ------------------------------------------------------------------
    # Signatures

    def signature(
        self,
        node: Node,
        module: SourceModule,
        *,
        doc: DocComment | None = None,
        substitutions: Dict[str, TypeRef] | None = None,
        depth: int = 0,
    ) -> SpecSignature:
        doc = doc or DocComment()
        param_tags = [tag for tag in (parse_param_tag(t.text) for t in doc.tags_named("param", "arg", "argument")) if tag]
        parameters = self.parameters(node, module, param_tags, substitutions, depth)

        returns: Optional[SpecReturns] = None
        returns_tag = doc.first("returns", "return")
        returns_description = parse_returns_tag(returns_tag.text)[1] if returns_tag else None
        return_node = node.child_by_field_name("return_type")
        if return_node is not None:
            returns = self._returns(return_node, module, substitutions, depth)
            returns.description = returns_description
        elif returns_description:
            returns = SpecReturns(description=returns_description)

        throws = []
        for tag in doc.tags_named("throws", "throw", "exception"):
            type_text, remainder = split_type_expression(tag.text)
            if remainder.startswith("- "):
                remainder = remainder[2:]
            throws.append(SpecThrows(type=type_text, description=remainder.strip() or None))

        return SpecSignature(
            parameters=parameters,
            returns=returns,
            type_parameters=self.type_parameters(node, module),
            throws=throws,
        )

    def _returns(
        self, node: Node, module: SourceModule, substitutions: Dict[str, TypeRef] | None, depth: int
    ) -> SpecReturns:
        if node.type == "type_predicate_annotation":
            predicate = node.named_children[0] if node.named_children else node
            return SpecReturns(schema={"type": "boolean"}, ts_type=_normalize(module.text(predicate)))
        if node.type == "asserts_annotation":
            return SpecReturns(schema={"type": "void"}, ts_type="void")
        type_node = unwrap_type(node)
        return SpecReturns(
            schema=self.schema_for_node(type_node, module, substitutions, depth),
            ts_type=_normalize(module.text(type_node)),
        )

    def parameters(
        self,
        node: Node,
        module: SourceModule,
        param_tags: List[ParamTag],
        substitutions: Dict[str, TypeRef] | None = None,
        depth: int = 0,
    ) -> List[SpecParameter]:
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            single = node.child_by_field_name("parameter")
            if single is None:
                return []
            name = module.text(single)
            return [SpecParameter(name=name, schema={"type": "any"}, description=_param_description(param_tags, name))]

        documented_roots = [tag.name for tag in param_tags if "." not in tag.name]
        parameters: List[SpecParameter] = []
        for index, param in enumerate(
            p for p in params_node.named_children if p.type in ("required_parameter", "optional_parameter")
        ):
            pattern = param.child_by_field_name("pattern")
            if pattern is None or pattern.type == "this":
                continue
            rest = pattern.type == "rest_pattern"
            if rest:
                name = module.text(pattern).lstrip(".").strip()
            elif pattern.type == "identifier":
                name = module.text(pattern)
            elif index < len(documented_roots):
                name = documented_roots[index]
            else:
                name = f"__{index}"

            annotation = param.child_by_field_name("type")
            value = param.child_by_field_name("value")
            if annotation is not None and annotation.named_children:
                schema = self.schema_for_node(annotation.named_children[0], module, substitutions, depth)
            elif value is not None:
                schema = infer_value_schema(value, module)
            elif pattern.type == "object_pattern":
                schema = {"type": "object"}
            else:
                schema = {"type": "any"}

            parameters.append(
                SpecParameter(
                    name=name,
                    schema=schema,
                    required=param.type == "required_parameter" and value is None and not rest,
                    description=_param_description(param_tags, name),
                    rest=rest,
                    default=_normalize(module.text(value)) if value is not None else None,
                )
            )
        return parameters

    def type_parameters(self, node: Node, module: SourceModule) -> List[TypeParameter]:
        container = node.child_by_field_name("type_parameters")
        if container is None:
            return []
        result: List[TypeParameter] = []
        for parameter in container.named_children:
            if parameter.type != "type_parameter":
                continue
            constraint = parameter.child_by_field_name("constraint")
            default = parameter.child_by_field_name("value")
            result.append(
                TypeParameter(
                    name=module.text(parameter.child_by_field_name("name")),
                    constraint=_clause_text(constraint, module),
                    default=_clause_text(default, module),
                )
            )
        return result


# ----------------------------------------------------------------------
# Internal helpers


def is_function_node(node: Optional[Node]) -> bool:
    return node is not None and node.type in _FUNCTION_NODES


def infer_value_schema(node: Optional[Node], module: SourceModule) -> Schema:
    """Best-effort schema for an unannotated initializer expression."""
    if node is None:
        return {"type": "any"}
    kind = node.type
    if kind == "number":
        return {"type": "number"}
    if kind in ("string", "template_string"):
        return {"type": "string"}
    if kind in ("true", "false"):
        return {"type": "boolean"}
    if kind == "null":
        return {"type": "null"}
    if kind == "undefined":
        return {"type": "undefined"}
    if kind == "array":
        return {"type": "array"}
    if kind == "object":
        properties: Dict[str, Schema] = {}
        for pair in node.named_children:
            if pair.type == "pair":
                key = module.text(pair.child_by_field_name("key")).strip("'\"")
                properties[key] = infer_value_schema(pair.child_by_field_name("value"), module)
            elif pair.type == "shorthand_property_identifier":
                properties[module.text(pair)] = {"type": "any"}
        return {"type": "object", "properties": properties}
    if kind in ("as_expression", "satisfies_expression"):
        inner = node.named_children[0] if node.named_children else None
        return infer_value_schema(inner, module)
    if kind == "parenthesized_expression" and node.named_children:
        return infer_value_schema(node.named_children[0], module)
    if kind == "new_expression":
        constructor = node.child_by_field_name("constructor")
        if constructor is not None:
            name = module.text(constructor)
            builtin = BUILTIN_TYPE_SCHEMAS.get(name)
            return copy.deepcopy(builtin) if builtin else {"type": name}
    return {"type": "unknown"}


def _literal_schema(node: Node, module: SourceModule) -> Schema:
    inner = node.named_children[0] if node.named_children else node
    text = module.text(inner).strip()
    if inner.type == "null" or text == "null":
        return {"type": "null"}
    if inner.type == "undefined" or text == "undefined":
        return {"type": "undefined"}
    value = _literal_value(inner, module)
    if isinstance(value, bool):
        return {"type": "boolean", "enum": [value]}
    if isinstance(value, (int, float)):
        return {"type": "number", "enum": [value]}
    return {"type": "string", "enum": [value]}


def _literal_value(node: Optional[Node], module: SourceModule) -> object:
    if node is None:
        return None
    text = module.text(node).strip()
    if node.type == "string" or text[:1] in ("'", '"'):
        try:
            return json.loads(text) if text.startswith('"') else text[1:-1]
        except json.JSONDecodeError:
            return text[1:-1]
    if text in ("true", "false"):
        return text == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def _with_description(schema: Schema, description: str) -> Schema:
    if set(schema) == {"$ref"}:
        return {"allOf": [schema], "description": description}
    return {**schema, "description": description}


def _visibility(node: Node, module: SourceModule, name: str) -> str:
    if name.startswith("#"):
        return "private"
    for child in node.named_children:
        if child.type == "accessibility_modifier":
            return module.text(child).strip()
    return "public"


def _param_description(tags: List[ParamTag], name: str) -> Optional[str]:
    for tag in tags:
        if tag.name == name:
            return tag.description
    return None


def _clause_text(node: Optional[Node], module: SourceModule) -> Optional[str]:
    if node is None:
        return None
    if node.named_children:
        return _normalize(module.text(node.named_children[-1]))
    return _normalize(module.text(node)) or None


def _normalize(text: str) -> str:
    return " ".join(text.split())


__all__ = [
    "BUILTIN_TYPE_SCHEMAS",
    "DeclarationShape",
    "PRIMITIVE_SCHEMAS",
    "TypeWalker",
    "doc_for",
    "infer_value_schema",
    "is_function_node",
    "spec_tags",
]
