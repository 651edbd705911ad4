from __future__ import annotations

from doccov.drift.examples import (
    detect_example_syntax_errors,
    extract_error_message,
    parse_assertions,
)
from doccov.models import SpecExport
from doccov.sandbox import strip_code_block_markers


def test_parse_assertions_numbers_lines_after_fence_removal() -> None:
    code = "```ts\nconst x = add(1, 2);\nconsole.log(x); // => 3\n```"

    assertions = parse_assertions(code)

    assert [(a.line_number, a.expected) for a in assertions] == [(2, "3")]


def test_strip_code_block_markers() -> None:
    assert strip_code_block_markers("```typescript\nfoo()\n```") == "foo()"
    assert strip_code_block_markers("foo()") == "foo()"
    assert strip_code_block_markers("```tsx\nconst a = 1\n```") == "const a = 1"
    assert strip_code_block_markers("```jsx title=\"demo\"\nrender()\n```") == "render()"
    assert strip_code_block_markers("```\nfoo()\n```") == "foo()"


def test_extract_error_message_prefers_error_line() -> None:
    stderr = "file:///tmp/x.ts:1\n  boom()\nTypeError: boom is not a function\n"

    assert extract_error_message(stderr) == "TypeError: boom is not a function"
    assert extract_error_message("") == "Unknown error"
    assert extract_error_message("x" * 150) == "x" * 100 + "..."


def test_syntax_error_in_example_is_reported_with_index() -> None:
    entry = SpecExport(id="f", name="f", kind="function", examples=["f()", "f(1, "])

    drifts = detect_example_syntax_errors(entry)

    assert len(drifts) == 1
    assert drifts[0].target == "example[1]"
    assert drifts[0].issue.startswith("@example contains invalid syntax")
    assert drifts[0].category == "example"
    assert drifts[0].fixable is False
