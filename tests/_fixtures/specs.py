"""Small builders for spec documents used by drift and diff tests."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


def param(name: str, type_: str = "number", *, required: bool = True, description: str | None = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"name": name, "schema": {"type": type_}, "required": required}
    if description:
        data["description"] = description
    return data


def function_export(
    name: str,
    params: Iterable[Dict[str, Any]] = (),
    *,
    returns: Optional[str] = "number",
    returns_description: str | None = None,
    description: str | None = None,
    tags: Iterable[Dict[str, str]] = (),
    examples: Iterable[str] = (),
) -> Dict[str, Any]:
    signature: Dict[str, Any] = {"parameters": list(params)}
    if returns is not None:
        signature["returns"] = {"schema": {"type": returns}, "tsType": returns}
        if returns_description:
            signature["returns"]["description"] = returns_description
    data: Dict[str, Any] = {
        "id": name,
        "name": name,
        "kind": "function",
        "signatures": [signature],
        "source": {"file": "src/index.ts", "line": 1},
    }
    if description:
        data["description"] = description
    tag_list = list(tags)
    if tag_list:
        data["tags"] = tag_list
    example_list = list(examples)
    if example_list:
        data["examples"] = example_list
    return data


def method(name: str, params: Iterable[Dict[str, Any]] = (), *, kind: str = "method") -> Dict[str, Any]:
    return {
        "id": name,
        "name": name,
        "kind": kind,
        "signatures": [{"parameters": list(params), "returns": {"schema": {"type": "void"}, "tsType": "void"}}],
    }


def class_export(name: str, members: Iterable[Dict[str, Any]], *, description: str | None = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": name,
        "name": name,
        "kind": "class",
        "members": list(members),
        "source": {"file": "src/index.ts", "line": 1},
    }
    if description:
        data["description"] = description
    return data


def spec_document(
    exports: Iterable[Dict[str, Any]],
    *,
    types: Iterable[Dict[str, Any]] = (),
    name: str = "demo-pkg",
    version: str = "1.0.0",
) -> Dict[str, Any]:
    return {
        "openpkg": "0.4.0",
        "meta": {"name": name, "version": version, "ecosystem": "js/ts"},
        "exports": list(exports),
        "types": list(types),
    }


def add_export(**overrides: Any) -> Dict[str, Any]:
    """A fully documented ``add(a, b)`` function."""
    data = function_export(
        "add",
        [param("a", description="First operand"), param("b", description="Second operand")],
        returns_description="The sum",
        description="Adds two numbers.",
        tags=[
            {"name": "param", "text": "{number} a - First operand"},
            {"name": "param", "text": "{number} b - Second operand"},
            {"name": "returns", "text": "{number} The sum"},
            {"name": "example", "text": "add(1, 2) // => 3"},
        ],
        examples=["add(1, 2) // => 3"],
    )
    data.update(overrides)
    return data


__all__: List[str] = ["add_export", "class_export", "function_export", "method", "param", "spec_document"]
