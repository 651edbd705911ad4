from __future__ import annotations

from doccov.extract.jsdoc import (
    parse_doc_comment,
    parse_param_tag,
    parse_returns_tag,
    parse_template_tag,
    split_type_expression,
)


def test_parse_doc_comment_splits_description_and_tags() -> None:
    comment = parse_doc_comment(
        """/**
         * Adds two numbers.
         *
         * Second paragraph.
         * @param {number} a - First operand
         * @returns {number} The sum
         */"""
    )

    assert comment.description == "Adds two numbers.\n\nSecond paragraph."
    assert [tag.name for tag in comment.tags] == ["param", "returns"]
    assert comment.tags[0].text == "{number} a - First operand"


def test_fenced_example_keeps_at_lines_inside_tag() -> None:
    comment = parse_doc_comment(
        """/**
         * @example
         * ```ts
         * @decorator()
         * class Foo {}
         * ```
         */"""
    )

    assert len(comment.tags) == 1
    assert comment.examples == ["```ts\n@decorator()\nclass Foo {}\n```"]


def test_deprecated_flag_and_empty_examples_ignored() -> None:
    comment = parse_doc_comment("/** @deprecated use other\n * @example\n */")

    assert comment.deprecated is True
    assert comment.examples == []


def test_parse_param_tag_variants() -> None:
    plain = parse_param_tag("{string} name - The name")
    optional = parse_param_tag("{number} [retries=3] how many times")
    untyped = parse_param_tag("options.timeout Milliseconds")

    assert plain is not None and (plain.name, plain.type, plain.description) == ("name", "string", "The name")
    assert optional is not None
    assert optional.optional is True
    assert optional.default == "3"
    assert optional.name == "retries"
    assert untyped is not None and untyped.name == "options.timeout" and untyped.type is None
    assert parse_param_tag("{string}") is None


def test_split_type_expression_handles_nested_braces() -> None:
    assert split_type_expression("{{ a: string }} rest") == ("{ a: string }", "rest")
    assert split_type_expression("no braces") == (None, "no braces")


def test_parse_returns_and_template_tags() -> None:
    assert parse_returns_tag("{Promise<void>} - resolves when done") == ("Promise<void>", "resolves when done")
    assert parse_returns_tag("the result") == (None, "the result")
    assert parse_template_tag("T extends object - the item") == ("T", "object")
    assert parse_template_tag("{string} K") == ("K", "string")
