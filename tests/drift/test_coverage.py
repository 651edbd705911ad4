from __future__ import annotations

from doccov.drift import calculate_aggregate_coverage, compute_export_coverage
from doccov.models import OpenPkgSpec, SpecExport, SpecSignature, SpecThrows
from tests._fixtures.specs import add_export, class_export, function_export, method, param, spec_document


def test_undocumented_function_misses_every_applicable_rule() -> None:
    entry = SpecExport.from_dict(function_export("add", [param("a")]))

    coverage = compute_export_coverage(entry)

    assert coverage.applicable == ["description", "params", "returns", "examples"]
    assert coverage.missing == ["description", "params", "returns", "examples"]
    assert coverage.score == 0


def test_void_return_does_not_require_returns_docs() -> None:
    entry = SpecExport.from_dict(
        function_export("log", returns="void", description="Logs.", examples=["log()"])
    )

    coverage = compute_export_coverage(entry)

    assert "returns" not in coverage.applicable
    assert coverage.score == 100


def test_interface_only_needs_description() -> None:
    entry = SpecExport(id="User", name="User", kind="interface", description="A user.")

    assert compute_export_coverage(entry).applicable == ["description"]
    assert compute_export_coverage(entry).score == 100


def test_throws_rule_applies_when_declared() -> None:
    entry = SpecExport.from_dict(add_export())
    entry.signatures[0].throws.append(SpecThrows(type="RangeError"))

    coverage = compute_export_coverage(entry)

    assert coverage.missing == ["throws"]
    assert coverage.score == 80


def test_class_params_come_from_constructor_members() -> None:
    entry = SpecExport.from_dict(
        class_export(
            "Client",
            [method("constructor", [param("url", "string", description="Base URL")], kind="constructor")],
            description="HTTP client.",
        )
    )

    coverage = compute_export_coverage(entry)

    assert coverage.applicable == ["description", "params", "examples"]
    assert coverage.missing == ["examples"]
    assert coverage.score == 67


def test_aggregate_is_mean_of_export_scores() -> None:
    spec = OpenPkgSpec.from_dict(
        spec_document([add_export(), function_export("bare", [param("x")])])
    )

    assert calculate_aggregate_coverage(spec) == 50


def test_aggregate_for_empty_spec_is_full() -> None:
    assert calculate_aggregate_coverage(OpenPkgSpec.from_dict(spec_document([]))) == 100


def test_signature_without_returns_is_not_a_returns_rule() -> None:
    entry = SpecExport(
        id="f",
        name="f",
        kind="function",
        description="Does f.",
        signatures=[SpecSignature()],
        examples=["f()"],
    )

    assert compute_export_coverage(entry).applicable == ["description", "examples"]
