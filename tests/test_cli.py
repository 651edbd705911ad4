"""CLI parser behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from doccov import cli
from doccov.cli import _build_parser
from doccov.models import OpenPkgSpec
from doccov.orchestrator import CheckOutcome, SpecOutcome
from tests._fixtures.specs import add_export, function_export, spec_document


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "spec"])
    assert args.verbose is True
    assert args.command == "spec"
    assert args.entry == "."
    assert args.output == "openpkg.json"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "pkg", "--verbose"])
    assert args.verbose is True
    assert args.command == "check"
    assert args.entry == "pkg"


def test_cli_spec_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["spec", "src/index.ts", "--max-depth", "2", "--no-cache", "-o", "out.json"])
    assert args.max_depth == 2
    assert args.no_cache is True
    assert args.resolve_external_types is None
    assert args.output == "out.json"


def test_cli_check_and_diff_options() -> None:
    parser = _build_parser()
    check = parser.parse_args(["check", "--run-examples", "--min-coverage", "80"])
    diff = parser.parse_args(["diff", "old.json", "new.json", "--docs", "docs", "README.md"])
    serve = parser.parse_args(["serve", "--port", "9000"])

    assert check.run_examples is True
    assert check.min_coverage == 80
    assert (diff.base, diff.head, diff.docs) == ("old.json", "new.json", ["docs", "README.md"])
    assert (serve.host, serve.port) == ("127.0.0.1", 9000)


class _StubOrchestrator:
    spec = OpenPkgSpec.from_dict(spec_document([add_export()]))

    def __init__(self) -> None:
        self.spec_calls: list[dict[str, object]] = []

    def run_spec(self, entry, **kwargs) -> SpecOutcome:
        self.spec_calls.append({"entry": entry, **kwargs})
        return SpecOutcome(spec=self.spec, from_cache=True, output_path=Path(kwargs["output"]).resolve())

    def run_check(self, entry, **kwargs) -> CheckOutcome:
        report = {"summary": {"score": 50, "documentedExports": 1, "totalExports": 2}}
        return CheckOutcome(report=report, spec=self.spec, failures=["Coverage 50% is below the minimum of 80%"])


def test_spec_command_reports_written_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    stub = _StubOrchestrator()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "Orchestrator", lambda: stub)

    cli.main(["spec", "src/index.ts", "--no-cache"])

    assert stub.spec_calls[0]["use_cache"] is False
    assert stub.spec_calls[0]["output"] == "openpkg.json"
    assert capsys.readouterr().out.strip() == "Wrote 1 exports to openpkg.json (cached)"


def test_check_command_exits_on_failures(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "Orchestrator", _StubOrchestrator)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check", "--min-coverage", "80"])

    captured = capsys.readouterr()
    assert excinfo.value.code == 1
    assert "Coverage: 50% (1/2 exports fully documented)" in captured.out
    assert "No drift detected" in captured.out
    assert "below the minimum of 80%" in captured.err


def test_diff_command_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    base = tmp_path / "base.json"
    head = tmp_path / "head.json"
    base.write_text(json.dumps(spec_document([add_export()])), encoding="utf-8")
    head.write_text(
        json.dumps(spec_document([add_export(), function_export("mul")], version="1.1.0")),
        encoding="utf-8",
    )

    cli.main(["diff", str(base), str(head)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["nonBreaking"] == ["mul"]
    assert payload["recommendedBump"]["bump"] == "minor"


def test_diff_command_missing_file_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["diff", str(tmp_path / "a.json"), str(tmp_path / "b.json")])

    assert excinfo.value.code == 1
