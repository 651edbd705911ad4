from __future__ import annotations

from doccov.diff import diff_spec
from doccov.models import OpenPkgSpec
from tests._fixtures.specs import add_export, class_export, function_export, method, param, spec_document


def _spec(*exports, types=()) -> OpenPkgSpec:
    return OpenPkgSpec.from_dict(spec_document(exports, types=types))


def test_identical_specs_have_no_changes() -> None:
    spec = _spec(add_export(), function_export("sub", [param("a")]))

    assert diff_spec(spec, spec).empty


def test_removed_export_is_breaking_and_added_is_not() -> None:
    result = diff_spec(_spec(add_export()), _spec(function_export("mul")))

    assert result.breaking == ["add"]
    assert result.non_breaking == ["mul"]


def test_new_required_parameter_is_breaking() -> None:
    base = _spec(function_export("fn", [param("a")]))
    head = _spec(function_export("fn", [param("a"), param("b")]))

    assert diff_spec(base, head).breaking == ["fn"]


def test_new_optional_parameter_is_non_breaking() -> None:
    base = _spec(function_export("fn", [param("a")]))
    head = _spec(function_export("fn", [param("a"), param("b", required=False)]))

    result = diff_spec(base, head)

    assert result.breaking == []
    assert result.non_breaking == ["fn"]


def test_optional_parameter_becoming_required_is_breaking() -> None:
    base = _spec(function_export("fn", [param("a", required=False)]))
    head = _spec(function_export("fn", [param("a")]))

    assert diff_spec(base, head).breaking == ["fn"]


def test_documentation_changes_are_docs_only() -> None:
    base = _spec(function_export("fn", [param("a")]))
    head = _spec(
        function_export(
            "fn",
            [param("a", description="The input")],
            description="Does things.",
            returns_description="A number",
            examples=["fn(1)"],
        )
    )

    result = diff_spec(base, head)

    assert result.docs_only == ["fn"]
    assert result.breaking == [] and result.non_breaking == []


def test_parameter_union_widening_is_non_breaking_and_narrowing_is_breaking() -> None:
    narrow = {"name": "value", "schema": {"type": "string"}, "required": True}
    wide = {
        "name": "value",
        "schema": {"anyOf": [{"type": "string"}, {"type": "number"}]},
        "required": True,
    }
    narrow_spec = _spec(function_export("fn", [narrow]))
    wide_spec = _spec(function_export("fn", [wide]))

    assert diff_spec(narrow_spec, wide_spec).non_breaking == ["fn"]
    assert diff_spec(wide_spec, narrow_spec).breaking == ["fn"]


def test_return_type_change_is_breaking() -> None:
    base = _spec(function_export("fn", returns="number"))
    head = _spec(function_export("fn", returns="string"))

    assert diff_spec(base, head).breaking == ["fn"]


def test_removed_class_member_is_breaking_and_added_member_is_not() -> None:
    base = _spec(class_export("Client", [method("connect"), method("close")]))
    removed = _spec(class_export("Client", [method("connect")]))
    added = _spec(class_export("Client", [method("connect"), method("close"), method("ping")]))

    assert diff_spec(base, removed).breaking == ["Client"]
    assert diff_spec(base, added).non_breaking == ["Client"]


def test_interface_gaining_optional_property_is_non_breaking() -> None:
    def interface(properties, required):
        return {
            "id": "Options",
            "name": "Options",
            "kind": "interface",
            "schema": {"type": "object", "properties": properties, "required": required},
        }

    base = _spec(interface({"url": {"type": "string"}}, ["url"]))
    head = _spec(interface({"url": {"type": "string"}, "retries": {"type": "number"}}, ["url"]))
    stricter = _spec(interface({"url": {"type": "string"}, "retries": {"type": "number"}}, ["url", "retries"]))

    assert diff_spec(base, head).non_breaking == ["Options"]
    assert diff_spec(base, stricter).breaking == ["Options"]


def test_changed_named_type_is_breaking() -> None:
    base = _spec(types=[{"id": "User", "name": "User", "kind": "interface", "schema": {"type": "object"}}])
    head = _spec(types=[{"id": "User", "name": "User", "kind": "type", "schema": {"type": "string"}}])

    assert diff_spec(base, head).breaking == ["User"]


def test_interface_change_is_classified_once(project_builder) -> None:
    project_builder.package_json()
    project_builder.write({"src/index.ts": "export interface Options {\n  url: string;\n}\n"})
    base = project_builder.extract().spec
    project_builder.write({"src/index.ts": "export interface Options {\n  url: string;\n  retries?: number;\n}\n"})
    head = project_builder.extract().spec

    result = diff_spec(base, head)

    assert result.breaking == []
    assert result.non_breaking == ["Options"]


def test_named_type_gaining_optional_property_is_not_breaking() -> None:
    schema = {"type": "object", "properties": {"id": {"type": "string"}}, "required": ["id"]}
    wider = {
        "type": "object",
        "properties": {"id": {"type": "string"}, "name": {"type": "string"}},
        "required": ["id"],
    }
    base = _spec(types=[{"id": "User", "name": "User", "kind": "interface", "schema": schema}])
    head = _spec(types=[{"id": "User", "name": "User", "kind": "interface", "schema": wider}])

    result = diff_spec(base, head)

    assert result.breaking == []
    assert result.non_breaking == ["User"]
