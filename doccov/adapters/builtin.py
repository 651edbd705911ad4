"""Adapters for Zod, ArkType, TypeBox and Valibot schema types."""

from __future__ import annotations

import re
from typing import Optional

from ..extract.program import TypeRef
from .base import MarkerSchemaAdapter


class ZodAdapter(MarkerSchemaAdapter):
    id = "zod"
    packages = ("zod",)
    name_pattern = re.compile(r"^Zod[A-Z]")
    marker = "_output"
    output_property = "_output"
    input_property = "_input"


class ArkTypeAdapter(MarkerSchemaAdapter):
    id = "arktype"
    packages = ("arktype",)
    name_pattern = re.compile(r"^Type$")
    marker = "infer"
    output_property = "infer"
    input_property = "inferIn"


class TypeBoxAdapter(MarkerSchemaAdapter):
    id = "typebox"
    packages = ("@sinclair/typebox", "typebox")
    name_pattern = re.compile(r"^T[A-Z]")
    marker = "static"
    output_property = "static"


class ValibotAdapter(MarkerSchemaAdapter):
    """Valibot schemas expose their shapes through the optional ``~types`` slot."""

    id = "valibot"
    packages = ("valibot",)
    name_pattern = re.compile(r"^(?!Zod).*Schema$")
    marker = "~types"

    def extract_output_type(self, type_ref: TypeRef) -> Optional[TypeRef]:
        return self._types_slot(type_ref, "output")

    def extract_input_type(self, type_ref: TypeRef) -> Optional[TypeRef]:
        return self._types_slot(type_ref, "input")

    def _types_slot(self, type_ref: TypeRef, name: str) -> Optional[TypeRef]:
        slot = type_ref.property(self.marker)
        if slot is None:
            return None
        return slot.without_nullish().property(name)


__all__ = ["ArkTypeAdapter", "TypeBoxAdapter", "ValibotAdapter", "ZodAdapter"]
