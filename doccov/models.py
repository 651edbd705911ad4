"""Core data models for the specification, drift findings and diagnostics."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

OPENPKG_VERSION = "0.4.0"

Schema = Dict[str, Any]

EXPORT_KINDS = ("function", "class", "interface", "type", "enum", "variable")


@dataclass
class SourceLocation:
    """Declaration site of an export, relative to the package root."""

    file: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"file": self.file}
        if self.line is not None:
            data["line"] = self.line
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SourceLocation":
        line = data.get("line")
        return cls(file=str(data.get("file", "")), line=line if isinstance(line, int) else None)


@dataclass
class SpecTag:
    """Raw documentation tag such as ``@see`` or ``@since``."""

    name: str
    text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "text": self.text}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecTag":
        return cls(name=str(data.get("name", "")), text=str(data.get("text", "")))


@dataclass
class TypeParameter:
    name: str
    constraint: Optional[str] = None
    default: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"name": self.name, "constraint": self.constraint, "default": self.default})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TypeParameter":
        return cls(
            name=str(data.get("name", "")),
            constraint=_opt_str(data.get("constraint")),
            default=_opt_str(data.get("default")),
        )


@dataclass
class SpecParameter:
    """A signature parameter; ``required`` reflects declaration-site syntax only."""

    name: str
    schema: Schema = field(default_factory=dict)
    required: bool = True
    description: Optional[str] = None
    rest: bool = False
    default: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "schema": copy.deepcopy(self.schema),
            "required": self.required,
            "description": self.description,
            "default": self.default,
        }
        if self.rest:
            data["rest"] = True
        return _compact(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecParameter":
        return cls(
            name=str(data.get("name", "")),
            schema=_as_schema(data.get("schema")),
            required=bool(data.get("required", True)),
            description=_opt_str(data.get("description")),
            rest=bool(data.get("rest", False)),
            default=_opt_str(data.get("default")),
        )


@dataclass
class SpecReturns:
    schema: Schema = field(default_factory=dict)
    description: Optional[str] = None
    ts_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "schema": copy.deepcopy(self.schema),
                "description": self.description,
                "tsType": self.ts_type,
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecReturns":
        return cls(
            schema=_as_schema(data.get("schema")),
            description=_opt_str(data.get("description")),
            ts_type=_opt_str(data.get("tsType")),
        )


@dataclass
class SpecThrows:
    type: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"type": self.type, "description": self.description})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecThrows":
        return cls(type=_opt_str(data.get("type")), description=_opt_str(data.get("description")))


@dataclass
class SpecSignature:
    parameters: List[SpecParameter] = field(default_factory=list)
    returns: Optional[SpecReturns] = None
    type_parameters: List[TypeParameter] = field(default_factory=list)
    throws: List[SpecThrows] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "parameters": [param.to_dict() for param in self.parameters],
                "returns": self.returns.to_dict() if self.returns else None,
                "typeParameters": [tp.to_dict() for tp in self.type_parameters],
                "throws": [item.to_dict() for item in self.throws],
                "description": self.description,
            },
            keep=("parameters",),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecSignature":
        returns = data.get("returns")
        return cls(
            parameters=[SpecParameter.from_dict(p) for p in _as_list(data.get("parameters"))],
            returns=SpecReturns.from_dict(returns) if isinstance(returns, Mapping) else None,
            type_parameters=[
                TypeParameter.from_dict(tp) for tp in _as_list(data.get("typeParameters"))
            ],
            throws=[SpecThrows.from_dict(t) for t in _as_list(data.get("throws"))],
            description=_opt_str(data.get("description")),
        )


@dataclass
class SpecMember:
    """Property, method, constructor or accessor of a class or interface."""

    id: str
    name: str
    kind: str
    visibility: str = "public"
    static: bool = False
    readonly: bool = False
    optional: bool = False
    schema: Optional[Schema] = None
    signatures: List[SpecSignature] = field(default_factory=list)
    description: Optional[str] = None
    tags: List[SpecTag] = field(default_factory=list)
    deprecated: bool = False
    flags: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "name": self.name,
                "kind": self.kind,
                "visibility": self.visibility,
                "static": self.static or None,
                "readonly": self.readonly or None,
                "optional": self.optional or None,
                "schema": copy.deepcopy(self.schema) if self.schema is not None else None,
                "signatures": [sig.to_dict() for sig in self.signatures],
                "description": self.description,
                "tags": [tag.to_dict() for tag in self.tags],
                "deprecated": self.deprecated or None,
                "flags": dict(self.flags),
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecMember":
        schema = data.get("schema")
        return cls(
            id=str(data.get("id") or data.get("name", "")),
            name=str(data.get("name", "")),
            kind=str(data.get("kind", "property")),
            visibility=str(data.get("visibility", "public")),
            static=bool(data.get("static", False)),
            readonly=bool(data.get("readonly", False)),
            optional=bool(data.get("optional", False)),
            schema=_as_schema(schema) if isinstance(schema, Mapping) else None,
            signatures=[SpecSignature.from_dict(s) for s in _as_list(data.get("signatures"))],
            description=_opt_str(data.get("description")),
            tags=[SpecTag.from_dict(t) for t in _as_list(data.get("tags"))],
            deprecated=bool(data.get("deprecated", False)),
            flags=dict(data.get("flags") or {}),
        )


@dataclass(frozen=True)
class Drift:
    """A single documentation/code mismatch finding."""

    type: str
    issue: str
    category: str
    target: Optional[str] = None
    suggestion: Optional[str] = None
    fixable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "type": self.type,
                "target": self.target,
                "issue": self.issue,
                "suggestion": self.suggestion,
                "category": self.category,
                "fixable": self.fixable,
            },
            keep=("fixable",),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Drift":
        return cls(
            type=str(data.get("type", "")),
            issue=str(data.get("issue", "")),
            category=str(data.get("category", "")),
            target=_opt_str(data.get("target")),
            suggestion=_opt_str(data.get("suggestion")),
            fixable=bool(data.get("fixable", False)),
        )


@dataclass
class DocsMetadata:
    coverage_score: int = 0
    missing: List[str] = field(default_factory=list)
    drift: List[Drift] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coverageScore": self.coverage_score,
            "missing": list(self.missing),
            "drift": [item.to_dict() for item in self.drift],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocsMetadata":
        score = data.get("coverageScore", 0)
        return cls(
            coverage_score=int(score) if isinstance(score, (int, float)) else 0,
            missing=[str(item) for item in _as_list(data.get("missing"))],
            drift=[Drift.from_dict(item) for item in _as_list(data.get("drift"))],
        )


@dataclass
class SpecExport:
    """One public export of the package."""

    id: str
    name: str
    kind: str
    description: Optional[str] = None
    signatures: List[SpecSignature] = field(default_factory=list)
    members: List[SpecMember] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    deprecated: bool = False
    tags: List[SpecTag] = field(default_factory=list)
    source: Optional[SourceLocation] = None
    type_parameters: List[TypeParameter] = field(default_factory=list)
    schema: Optional[Schema] = None
    flags: Dict[str, Any] = field(default_factory=dict)
    docs: Optional[DocsMetadata] = None

    def tag_values(self, name: str) -> List[str]:
        return [tag.text for tag in self.tags if tag.name == name]

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "name": self.name,
                "kind": self.kind,
                "description": self.description,
                "signatures": [sig.to_dict() for sig in self.signatures],
                "members": [member.to_dict() for member in self.members],
                "examples": list(self.examples),
                "deprecated": self.deprecated or None,
                "tags": [tag.to_dict() for tag in self.tags],
                "source": self.source.to_dict() if self.source else None,
                "typeParameters": [tp.to_dict() for tp in self.type_parameters],
                "schema": copy.deepcopy(self.schema) if self.schema is not None else None,
                "flags": dict(self.flags),
                "docs": self.docs.to_dict() if self.docs else None,
            },
            keep=("tags",),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecExport":
        source = data.get("source")
        docs = data.get("docs")
        schema = data.get("schema")
        name = str(data.get("name", ""))
        return cls(
            id=str(data.get("id") or name),
            name=name,
            kind=str(data.get("kind", "variable")),
            description=_opt_str(data.get("description")),
            signatures=[SpecSignature.from_dict(s) for s in _as_list(data.get("signatures"))],
            members=[SpecMember.from_dict(m) for m in _as_list(data.get("members"))],
            examples=[_example_text(e) for e in _as_list(data.get("examples"))],
            deprecated=bool(data.get("deprecated", False)),
            tags=[SpecTag.from_dict(t) for t in _as_list(data.get("tags"))],
            source=SourceLocation.from_dict(source) if isinstance(source, Mapping) else None,
            type_parameters=[
                TypeParameter.from_dict(tp) for tp in _as_list(data.get("typeParameters"))
            ],
            schema=_as_schema(schema) if isinstance(schema, Mapping) else None,
            flags=dict(data.get("flags") or {}),
            docs=DocsMetadata.from_dict(docs) if isinstance(docs, Mapping) else None,
        )


@dataclass
class SpecType:
    """Named type referenced from the exported surface."""

    id: str
    name: str
    kind: str
    description: Optional[str] = None
    schema: Optional[Schema] = None
    members: List[SpecMember] = field(default_factory=list)
    source: Optional[SourceLocation] = None
    type_parameters: List[TypeParameter] = field(default_factory=list)
    tags: List[SpecTag] = field(default_factory=list)
    deprecated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "name": self.name,
                "kind": self.kind,
                "description": self.description,
                "schema": copy.deepcopy(self.schema) if self.schema is not None else None,
                "members": [member.to_dict() for member in self.members],
                "source": self.source.to_dict() if self.source else None,
                "typeParameters": [tp.to_dict() for tp in self.type_parameters],
                "tags": [tag.to_dict() for tag in self.tags],
                "deprecated": self.deprecated or None,
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecType":
        source = data.get("source")
        schema = data.get("schema")
        name = str(data.get("name", ""))
        return cls(
            id=str(data.get("id") or name),
            name=name,
            kind=str(data.get("kind", "type")),
            description=_opt_str(data.get("description")),
            schema=_as_schema(schema) if isinstance(schema, Mapping) else None,
            members=[SpecMember.from_dict(m) for m in _as_list(data.get("members"))],
            source=SourceLocation.from_dict(source) if isinstance(source, Mapping) else None,
            type_parameters=[
                TypeParameter.from_dict(tp) for tp in _as_list(data.get("typeParameters"))
            ],
            tags=[SpecTag.from_dict(t) for t in _as_list(data.get("tags"))],
            deprecated=bool(data.get("deprecated", False)),
        )


@dataclass
class SpecMeta:
    name: str
    version: str = "0.0.0"
    ecosystem: str = "js/ts"
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "version": self.version,
                "ecosystem": self.ecosystem,
                "description": self.description,
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecMeta":
        return cls(
            name=str(data.get("name", "")),
            version=str(data.get("version", "0.0.0")),
            ecosystem=str(data.get("ecosystem", "js/ts")),
            description=_opt_str(data.get("description")),
        )


@dataclass
class OpenPkgSpec:
    """Normalized, versioned description of a package's exported API surface."""

    meta: SpecMeta
    exports: List[SpecExport] = field(default_factory=list)
    types: List[SpecType] = field(default_factory=list)
    openpkg: str = OPENPKG_VERSION

    def export_by_id(self, export_id: str) -> Optional[SpecExport]:
        for item in self.exports:
            if item.id == export_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "openpkg": self.openpkg,
            "meta": self.meta.to_dict(),
            "exports": [item.to_dict() for item in self.exports],
            "types": [item.to_dict() for item in self.types],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OpenPkgSpec":
        meta = data.get("meta")
        return cls(
            meta=SpecMeta.from_dict(meta if isinstance(meta, Mapping) else {}),
            exports=[SpecExport.from_dict(e) for e in _as_list(data.get("exports"))],
            types=[SpecType.from_dict(t) for t in _as_list(data.get("types"))],
            openpkg=str(data.get("openpkg", OPENPKG_VERSION)),
        )


@dataclass
class Diagnostic:
    """Non-fatal problem reported during extraction."""

    message: str
    severity: str = "error"
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "message": self.message,
                "severity": self.severity,
                "file": self.file,
                "line": self.line,
                "column": self.column,
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Diagnostic":
        line, column = data.get("line"), data.get("column")
        return cls(
            message=str(data.get("message", "")),
            severity=str(data.get("severity") or "error"),
            file=_opt_str(data.get("file")),
            line=line if isinstance(line, int) else None,
            column=column if isinstance(column, int) else None,
        )


# ----------------------------------------------------------------------
# Serialization helpers


def _compact(data: Dict[str, Any], keep: tuple[str, ...] = ()) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in keep and (value is None or value == [] or value == {}):
            continue
        result[key] = value
    return result


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _as_schema(value: Any) -> Schema:
    return copy.deepcopy(dict(value)) if isinstance(value, Mapping) else {}


def _example_text(value: Any) -> str:
    if isinstance(value, Mapping):
        return str(value.get("code", ""))
    return str(value)


__all__ = [
    "Diagnostic",
    "DocsMetadata",
    "Drift",
    "EXPORT_KINDS",
    "OPENPKG_VERSION",
    "OpenPkgSpec",
    "Schema",
    "SourceLocation",
    "SpecExport",
    "SpecMember",
    "SpecMeta",
    "SpecParameter",
    "SpecReturns",
    "SpecSignature",
    "SpecTag",
    "SpecThrows",
    "SpecType",
    "TypeParameter",
]
