from __future__ import annotations

from doccov.drift import (
    build_doccov_report,
    compute_drift,
    enrich_spec,
    format_drift_summary_line,
    get_drift_summary,
)
from doccov.models import OpenPkgSpec
from doccov.sandbox import ExampleExecutionResult
from doccov.validation import validate_report
from tests._fixtures.specs import add_export, function_export, param, spec_document


def _spec(*exports) -> OpenPkgSpec:
    return OpenPkgSpec.from_dict(spec_document(exports))


def test_fully_documented_export_has_no_drift() -> None:
    enriched = enrich_spec(_spec(add_export()))
    docs = enriched.exports[0].docs

    assert docs is not None
    assert docs.coverage_score == 100
    assert docs.missing == []
    assert docs.drift == []


def test_enrich_spec_does_not_mutate_input() -> None:
    spec = _spec(add_export())

    enrich_spec(spec)

    assert spec.exports[0].docs is None


def test_wrong_returns_type_is_single_fixable_structural_drift() -> None:
    export = add_export(
        tags=[
            {"name": "param", "text": "{number} a - First operand"},
            {"name": "param", "text": "{number} b - Second operand"},
            {"name": "returns", "text": "{string} The sum"},
        ]
    )

    drifts = compute_drift(_spec(export))["add"]

    assert len(drifts) == 1
    drift = drifts[0]
    assert drift.type == "return-type-mismatch"
    assert drift.category == "structural"
    assert drift.fixable is True
    assert drift.target == "returns"
    assert drift.issue == "JSDoc documents string but the function returns number."
    assert drift.suggestion == "Update @returns to number."


def test_unknown_param_lists_available_parameters() -> None:
    export = add_export(tags=[{"name": "param", "text": "{number} c - Third operand"}])

    drifts = compute_drift(_spec(export))["add"]

    assert [d.type for d in drifts] == ["param-mismatch"]
    assert drifts[0].issue == 'JSDoc documents parameter "c" which is not present in the signature.'
    assert drifts[0].suggestion == "Available parameters: a, b"


def test_misspelled_param_suggests_closest_name() -> None:
    export = function_export(
        "connect",
        [param("maxRetryCount")],
        tags=[{"name": "param", "text": "maxRetryCounts - How many retries"}],
    )

    drifts = compute_drift(_spec(export))["connect"]

    assert drifts[0].suggestion == 'Did you mean "maxRetryCount"?'


def test_deprecated_flag_without_tag_is_semantic_drift() -> None:
    export = {**function_export("old"), "deprecated": True}

    drifts = compute_drift(_spec(export))["old"]

    assert [(d.type, d.category) for d in drifts] == [("deprecated-mismatch", "semantic")]


def test_broken_link_and_example_reference_drift() -> None:
    export = function_export(
        "fetchUserInfo",
        [param("id", "string", description="User id")],
        returns="string",
        description="Loads a user. See {@link loadUsr}.",
        examples=["fetchUserData('1')"],
    )

    drifts = compute_drift(_spec(export, function_export("loadUser")))["fetchUserInfo"]
    types = [d.type for d in drifts]

    assert "broken-link" in types
    assert "example-drift" in types
    example = next(d for d in drifts if d.type == "example-drift")
    assert example.target == "fetchUserData"
    assert example.suggestion == 'Did you mean "fetchUserInfo"?'


def test_runtime_and_assertion_drift_from_example_results() -> None:
    export = add_export(examples=["add(1, 2) // => 3", "boom()"])
    results = {
        "add": {
            0: ExampleExecutionResult(success=True, stdout="4\n"),
            1: ExampleExecutionResult.failure("ReferenceError: boom is not defined\n    at file.ts:1"),
        }
    }

    drifts = compute_drift(_spec(export), results)["add"]
    by_type = {d.type: d for d in drifts}

    assert by_type["example-runtime-error"].issue == (
        "@example throws at runtime: ReferenceError: boom is not defined"
    )
    assert by_type["example-runtime-error"].target == "example[1]"
    assert by_type["example-assertion-failed"].issue == 'Assertion failed: expected "3" but got "4"'
    assert by_type["example-assertion-failed"].target == "example[0]:line1"


def test_report_matches_schema_and_summarizes() -> None:
    broken = add_export(
        id="sum",
        name="sum",
        tags=[{"name": "returns", "text": "{string} The sum"}],
        description=None,
    )
    broken.pop("description")
    spec = _spec(add_export(), broken)

    report = build_doccov_report(spec, "openpkg.json")

    validate_report(report)
    summary = report["summary"]
    assert summary["totalExports"] == 2
    assert summary["documentedExports"] == 1
    assert summary["missingByRule"]["description"] == 1
    assert summary["drift"]["byCategory"]["structural"] >= 1
    assert report["exports"]["add"] == {"coverageScore": 100}
    assert report["source"] == {
        "file": "openpkg.json",
        "specVersion": "0.4.0",
        "packageName": "demo-pkg",
        "packageVersion": "1.0.0",
    }


def test_report_counts_example_runs() -> None:
    results = {"add": {0: ExampleExecutionResult(success=True, stdout="3\n")}}

    report = build_doccov_report(_spec(add_export()), example_results=results)

    assert report["summary"]["examples"] == {"total": 1, "passed": 1, "failed": 0}


def test_empty_spec_scores_full_coverage() -> None:
    report = build_doccov_report(_spec())

    assert report["summary"]["score"] == 100
    assert report["exports"] == {}


def test_summary_line() -> None:
    export = add_export(tags=[{"name": "returns", "text": "{string} The sum"}], deprecated=True)
    drifts = compute_drift(_spec(export))["add"]

    assert format_drift_summary_line(get_drift_summary([])) == "No drift detected"
    assert format_drift_summary_line(get_drift_summary(drifts)) == (
        "2 issues (1 structural, 1 semantic) (2 auto-fixable)"
    )
