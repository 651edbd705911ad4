from __future__ import annotations

from doccov.drift.utils import (
    find_closest_match,
    levenshtein,
    normalize_type,
    render_schema,
    split_camel_case,
    suggestion_list,
    types_equivalent,
)


def test_render_schema_shapes() -> None:
    assert render_schema({"type": "string"}) == "string"
    assert render_schema({"type": "array", "items": {"type": "number"}}) == "number[]"
    assert render_schema({"type": "array", "items": {"anyOf": [{"type": "string"}, {"type": "number"}]}}) == (
        "(string | number)[]"
    )
    assert render_schema({"$ref": "#/types/User"}) == "User"
    assert render_schema({"$ref": "#/types/Box", "typeArguments": [{"type": "string"}]}) == "Box<string>"
    assert render_schema({"type": "string", "enum": ["a", "b"]}) == '"a" | "b"'
    assert render_schema({}) is None


def test_normalize_type_collapses_whitespace_and_array_generics() -> None:
    assert normalize_type("Array< string >") == "string[]"
    assert normalize_type("Array<string | number>") == "(string | number)[]"
    assert normalize_type("Map<string,number>") == "Map<string, number>"
    assert normalize_type("") is None


def test_void_and_undefined_are_equivalent() -> None:
    assert types_equivalent("void", "undefined")
    assert not types_equivalent("void", "null")


def test_split_camel_case() -> None:
    assert split_camel_case("parseHTTPResponse") == ["parse", "http", "response"]
    assert split_camel_case("snake_case-name") == ["snake", "case", "name"]


def test_levenshtein() -> None:
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3


def test_find_closest_match_requires_shared_words() -> None:
    match = find_closest_match("fetchUserData", ["fetchUserInfo", "deleteUser"])

    assert match is not None
    assert match.value == "fetchUserInfo"
    assert find_closest_match("x", ["y", "z"]) is None


def test_suggestion_list_respects_limit() -> None:
    assert suggestion_list("Available parameters: ", ["a", "b"], limit=6) == "Available parameters: a, b"
    assert suggestion_list("Available parameters: ", [], limit=6) is None
    assert suggestion_list("Available parameters: ", list("abcdefg"), limit=6) is None
