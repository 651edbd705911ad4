from __future__ import annotations

import pytest

from doccov.diff import MarkdownDocFile, diff_spec_with_docs, load_spec, parse_markdown_file
from doccov.validation import SpecValidationError
from tests._fixtures.specs import add_export, class_export, function_export, method, param, spec_document

WRONG_RETURNS = [
    {"name": "param", "text": "{number} a - First operand"},
    {"name": "param", "text": "{number} b - Second operand"},
    {"name": "returns", "text": "{string} The sum"},
]


def test_coverage_deltas_and_drift_introduced() -> None:
    base = spec_document([add_export(), function_export("sub", [param("a")])])
    head = spec_document(
        [
            add_export(tags=WRONG_RETURNS),
            function_export(
                "sub",
                [param("a", description="Minuend")],
                description="Subtracts.",
                returns_description="The difference",
                examples=["sub(1)"],
            ),
            function_export("mul", [param("a")]),
        ]
    )

    result = diff_spec_with_docs(base, head)

    assert result.breaking == []
    assert result.docs_only == ["add", "sub"]
    assert result.non_breaking == ["mul"]
    assert result.old_coverage == 50.0
    assert result.new_coverage == 66.7
    assert result.coverage_delta == 16.7
    assert result.improved_exports == ["sub"]
    assert result.regressed_exports == []
    assert result.new_undocumented == ["mul"]
    assert [(c.export_id, c.type) for c in result.drift_introduced] == [("add", "return-type-mismatch")]
    assert result.drift_resolved == []
    assert result.recommended_bump is not None and result.recommended_bump.bump == "minor"


def test_fixed_drift_is_reported_as_resolved() -> None:
    base = spec_document([add_export(tags=WRONG_RETURNS)])
    head = spec_document([add_export()])

    result = diff_spec_with_docs(base, head)

    assert [change.to_dict() for change in result.drift_resolved] == [
        {
            "exportId": "add",
            "type": "return-type-mismatch",
            "issue": "JSDoc documents string but the function returns number.",
            "target": "returns",
        }
    ]
    assert result.drift_introduced == []
    assert result.recommended_bump is not None and result.recommended_bump.bump == "patch"


def test_removed_export_is_not_counted_as_resolved_drift() -> None:
    base = spec_document([add_export(tags=WRONG_RETURNS), function_export("keep")])
    head = spec_document([function_export("keep")])

    result = diff_spec_with_docs(base, head)

    assert result.breaking == ["add"]
    assert result.drift_resolved == []
    assert result.categorized_breaking[0].to_dict() == {
        "id": "add",
        "name": "add",
        "kind": "function",
        "severity": "high",
        "reason": "removed",
    }


def test_invalid_spec_raises_validation_error() -> None:
    with pytest.raises(SpecValidationError) as excinfo:
        diff_spec_with_docs({"meta": {}}, spec_document([]))

    assert excinfo.value.kind == "openpkg"
    assert excinfo.value.issues


def test_load_spec_accepts_models() -> None:
    spec = load_spec(spec_document([add_export()]))

    assert load_spec(spec) is spec


def test_member_changes_and_class_severity() -> None:
    base = spec_document([class_export("Client", [method("connect", [param("url", "string")]), method("close")])])
    head = spec_document(
        [class_export("Client", [method("connect", [param("url", "string")]), method("closeAll")])]
    )

    result = diff_spec_with_docs(base, head)

    assert [(c.member_name, c.change_type) for c in result.member_changes] == [
        ("closeAll", "added"),
        ("close", "removed"),
    ]
    assert result.member_changes[1].suggestion == "Use closeAll instead"
    assert result.categorized_breaking[0].reason == "methods removed"
    assert result.categorized_breaking[0].severity == "high"
    assert result.recommended_bump is not None and result.recommended_bump.bump == "major"


def test_docs_impact_flags_samples_using_removed_exports() -> None:
    base = spec_document([function_export("createClient"), function_export("other")])
    head = spec_document([function_export("other"), function_export("fresh")])
    markdown = [
        {
            "path": "docs/usage.md",
            "content": (
                "# Usage\n"
                "\n"
                "```ts\n"
                'import { createClient } from "demo-pkg";\n'
                "const client = createClient();\n"
                "```\n"
                "\n"
                "```bash\n"
                "npm install demo-pkg\n"
                "```\n"
            ),
        }
    ]

    result = diff_spec_with_docs(base, head, markdown_files=markdown)
    impact = result.docs_impact

    assert impact is not None
    assert [item.file for item in impact.impacted_files] == ["docs/usage.md"]
    reference = impact.impacted_files[0].references[0]
    assert (reference.export_name, reference.change_type, reference.line) == ("createClient", "removed", 3)
    assert impact.missing_docs == ["fresh"]
    assert impact.stats["filesScanned"] == 1
    assert impact.stats["codeBlocksFound"] == 1
    assert result.to_dict()["docsImpact"]["impactedFiles"][0]["file"] == "docs/usage.md"


def test_docs_impact_reports_removed_method_calls() -> None:
    base = spec_document([class_export("Client", [method("connect"), method("close")])])
    head = spec_document([class_export("Client", [method("connect"), method("shutdown")])])
    doc = parse_markdown_file("```ts\nconst c = new Client();\nc.close();\n```\n", "README.md")

    result = diff_spec_with_docs(base, head, markdown_files=[doc])

    assert result.docs_impact is not None
    reference = result.docs_impact.impacted_files[0].references[0]
    assert reference.change_type == "method-removed"
    assert reference.member_name == "close"
    assert reference.line == 3
    assert isinstance(doc, MarkdownDocFile)


def test_to_dict_shape() -> None:
    data = diff_spec_with_docs(spec_document([]), spec_document([])).to_dict()

    assert data["breaking"] == [] and data["coverageDelta"] == 0.0
    assert data["oldCoverage"] == 100.0
    assert data["recommendedBump"]["bump"] == "none"
    assert "docsImpact" not in data


def test_old_coverage_includes_removed_exports() -> None:
    base = spec_document([add_export(), function_export("sub", [param("a")])])
    head = spec_document([add_export()])

    result = diff_spec_with_docs(base, head)

    assert result.breaking == ["sub"]
    assert result.old_coverage == 50.0
    assert result.new_coverage == 100.0
    assert result.coverage_delta == 50.0
