"""Tests for doccov.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from doccov.models import SpecExport
from doccov.orchestrator import Orchestrator
from doccov.sandbox import ExampleExecutionResult
from tests._fixtures.specs import add_export, spec_document

DOCUMENTED_ADD = """
/**
 * Adds two numbers.
 * @param a - First operand
 * @param b - Second operand
 * @returns The sum
 * @example
 * add(1, 2)
 */
export function add(a: number, b: number): number {
  return a + b;
}
"""


def _write_package(project_builder, extra: str = "") -> None:
    project_builder.package_json()
    project_builder.write({"src/index.ts": DOCUMENTED_ADD + extra})


class _FailingRunner:
    """Runner double that fails every example."""

    def __init__(self) -> None:
        self.exports: list[str] = []

    def run_export_examples(self, export: SpecExport, package_name: str, version=None):
        self.exports.append(export.name)
        return {0: ExampleExecutionResult.failure("TypeError: add is not a function")}


def test_run_spec_writes_output_and_reuses_cache(project_builder, tmp_path: Path) -> None:
    _write_package(project_builder)
    orchestrator = Orchestrator()
    output = tmp_path / "out" / "openpkg.json"

    first = orchestrator.run_spec(project_builder.path(), output=output)
    second = orchestrator.run_spec(project_builder.path("src/index.ts"))

    assert first.from_cache is False
    assert first.cache_reason == "no-cache"
    assert first.output_path == output
    assert json.loads(output.read_text(encoding="utf-8"))["exports"][0]["name"] == "add"
    assert second.from_cache is True
    assert second.spec.to_dict() == first.spec.to_dict()
    assert project_builder.path(".doccov/spec.cache.json").is_file()


def test_source_change_invalidates_cache(project_builder) -> None:
    _write_package(project_builder)
    orchestrator = Orchestrator()
    orchestrator.run_spec(project_builder.path())

    project_builder.write({"src/index.ts": DOCUMENTED_ADD + "export const VERSION = '1';\n"})
    outcome = orchestrator.run_spec(project_builder.path())

    assert outcome.from_cache is False
    assert outcome.cache_reason == "source-files-changed"
    assert {entry.name for entry in outcome.spec.exports} == {"add", "VERSION"}


def test_cache_can_be_disabled(project_builder) -> None:
    _write_package(project_builder)

    Orchestrator().run_spec(project_builder.path(), use_cache=False)

    assert not project_builder.path(".doccov").exists()


def test_config_entry_is_used_for_directories(project_builder) -> None:
    project_builder.package_json()
    project_builder.write(
        {
            ".doccov.yml": "extract:\n  entry: lib/main.ts\n",
            "lib/main.ts": "export function main(): void {}\n",
        }
    )

    outcome = Orchestrator().run_spec(project_builder.path(), use_cache=False)

    assert [entry.name for entry in outcome.spec.exports] == ["main"]


def test_missing_entry_raises(project_builder) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().run_spec(project_builder.path())
    with pytest.raises(FileNotFoundError):
        Orchestrator().run_spec(project_builder.path("src/nope.ts"))


def test_negative_depth_is_rejected(project_builder) -> None:
    _write_package(project_builder)

    with pytest.raises(ValueError):
        Orchestrator().run_spec(project_builder.path(), max_depth=-1)


def test_run_check_applies_min_coverage(project_builder, tmp_path: Path) -> None:
    _write_package(project_builder, "export function mul(a: number, b: number): number {\n  return a * b;\n}\n")
    report_path = tmp_path / "doccov.json"

    outcome = Orchestrator().run_check(project_builder.path(), min_coverage=80, output=report_path)

    assert outcome.report["summary"]["score"] == 50
    assert outcome.report["summary"]["documentedExports"] == 1
    assert outcome.passed is False
    assert outcome.failures == ["Coverage 50% is below the minimum of 80%"]
    assert json.loads(report_path.read_text(encoding="utf-8"))["summary"]["totalExports"] == 2


def test_run_check_rejects_invalid_threshold(project_builder) -> None:
    _write_package(project_builder)

    with pytest.raises(ValueError):
        Orchestrator().run_check(project_builder.path(), min_coverage=120)


def test_run_check_with_examples_reports_runtime_drift(project_builder) -> None:
    _write_package(project_builder)
    runner = _FailingRunner()
    orchestrator = Orchestrator(runner_factory=lambda config: runner)

    outcome = orchestrator.run_check(project_builder.path(), run_examples=True)

    assert runner.exports == ["add"]
    drift = outcome.spec.exports[0].docs.drift
    assert [item.type for item in drift] == ["example-runtime-error"]
    assert outcome.report["summary"]["examples"] == {"total": 1, "passed": 0, "failed": 1}
    assert outcome.failures == ["1 of 1 example(s) failed"]


def test_run_diff_reads_specs_and_markdown(tmp_path: Path) -> None:
    base = tmp_path / "base.json"
    head = tmp_path / "head.json"
    base.write_text(json.dumps(spec_document([add_export()])), encoding="utf-8")
    head.write_text(json.dumps(spec_document([])), encoding="utf-8")
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text("# Guide\n\n```ts\nadd(1, 2);\n```\n", encoding="utf-8")
    (docs / "notes.txt").write_text("add(1, 2)\n", encoding="utf-8")
    output = tmp_path / "diff.json"

    result = Orchestrator().run_diff(base, head, docs=[docs], output=output)

    assert result.breaking == ["add"]
    assert result.docs_impact is not None
    assert result.docs_impact.stats["filesScanned"] == 1
    assert json.loads(output.read_text(encoding="utf-8"))["recommendedBump"]["bump"] == "major"


def test_run_diff_reports_bad_inputs(tmp_path: Path) -> None:
    good = tmp_path / "good.json"
    good.write_text(json.dumps(spec_document([])), encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    orchestrator = Orchestrator()

    with pytest.raises(FileNotFoundError):
        orchestrator.run_diff(tmp_path / "missing.json", good)
    with pytest.raises(RuntimeError, match="not valid JSON"):
        orchestrator.run_diff(broken, good)
    with pytest.raises(FileNotFoundError):
        orchestrator.run_diff(good, good, docs=[tmp_path / "nodocs"])


def test_cache_hit_keeps_extraction_diagnostics(project_builder) -> None:
    _write_package(project_builder, 'export { thing } from "some-lib";\n')
    orchestrator = Orchestrator()

    first = orchestrator.run_spec(project_builder.path())
    second = orchestrator.run_spec(project_builder.path())

    assert second.from_cache is True
    assert [d.to_dict() for d in second.diagnostics] == [d.to_dict() for d in first.diagnostics]
    assert any("thing" in d.message for d in second.diagnostics)
