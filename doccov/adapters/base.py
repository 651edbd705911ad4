"""Base classes for schema-library adapters."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from ..extract.program import TypeRef


@dataclass
class SchemaExtraction:
    """Output (and optional input) shape recovered from a schema type."""

    adapter_id: str
    output: TypeRef
    input: Optional[TypeRef] = None


class SchemaAdapter(ABC):
    """Contract for adapters that see through runtime schema-library types."""

    id: str = ""
    packages: Tuple[str, ...] = ()

    @abstractmethod
    def matches(self, type_ref: TypeRef) -> bool:
        """Return True when ``type_ref`` is a schema type of this library."""

    @abstractmethod
    def extract_output_type(self, type_ref: TypeRef) -> Optional[TypeRef]:
        """Return the validated (output) type described by the schema."""

    def extract_input_type(self, type_ref: TypeRef) -> Optional[TypeRef]:
        return None


class MarkerSchemaAdapter(SchemaAdapter):
    """Adapter matched by a type-name pattern plus a marker property.

    Both checks must pass; a name match alone is not enough because user
    types frequently share the naming conventions of these libraries.
    """

    name_pattern: Pattern[str] = re.compile(r"$^")
    marker: str = ""
    output_property: str = ""
    input_property: Optional[str] = None

    def matches(self, type_ref: TypeRef) -> bool:
        name = type_ref.name
        if not name:
            return False
        if not self.name_pattern.match(name.rsplit(".", 1)[-1]):
            return False
        return type_ref.has_property(self.marker)

    def extract_output_type(self, type_ref: TypeRef) -> Optional[TypeRef]:
        return type_ref.property(self.output_property)

    def extract_input_type(self, type_ref: TypeRef) -> Optional[TypeRef]:
        if self.input_property is None:
            return None
        return type_ref.property(self.input_property)


__all__ = ["MarkerSchemaAdapter", "SchemaAdapter", "SchemaExtraction"]
