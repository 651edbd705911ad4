"""Tests for the FastAPI service mode."""

from __future__ import annotations

from typing import Any

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from doccov import __version__
from doccov.diff import diff_spec_with_docs
from doccov.models import Diagnostic, OpenPkgSpec
from doccov.orchestrator import SpecOutcome
from doccov.sandbox import ExampleExecutionResult, ExampleRequest
from doccov.service import create_app
from tests._fixtures.specs import add_export, spec_document


class _StubOrchestrator:
    def __init__(self) -> None:
        self.spec_calls: list[dict[str, object]] = []
        self.example_requests: list[ExampleRequest] = []

    def run_spec(self, entry: str, **kwargs: Any) -> SpecOutcome:
        self.spec_calls.append({"entry": entry, **kwargs})
        if entry == "missing.ts":
            raise FileNotFoundError("Entry file not found: missing.ts")
        return SpecOutcome(
            spec=OpenPkgSpec.from_dict(spec_document([add_export()])),
            diagnostics=[Diagnostic(message="Skipped default export", severity="info")],
        )

    def diff_documents(self, base, head, *, markdown_files=None):
        return diff_spec_with_docs(base, head, markdown_files=markdown_files)

    def run_example(self, request: ExampleRequest) -> ExampleExecutionResult:
        self.example_requests.append(request)
        return ExampleExecutionResult(success=True, stdout="3\n", duration=12)


@pytest.fixture
def orchestrator() -> _StubOrchestrator:
    return _StubOrchestrator()


@pytest.fixture
def client(orchestrator: _StubOrchestrator) -> TestClient:
    return TestClient(create_app(lambda: orchestrator))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


def test_spec_endpoint_forwards_options(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post("/spec", json={"entry": "src/index.ts", "maxDepth": 2, "useCache": False})

    assert response.status_code == 200
    body = response.json()
    assert body["spec"]["exports"][0]["name"] == "add"
    assert body["diagnostics"][0]["message"] == "Skipped default export"
    assert body["fromCache"] is False
    assert orchestrator.spec_calls == [
        {"entry": "src/index.ts", "max_depth": 2, "resolve_external_types": None, "use_cache": False}
    ]


def test_spec_endpoint_maps_missing_entry_to_404(client: TestClient) -> None:
    response = client.post("/spec", json={"entry": "missing.ts"})

    assert response.status_code == 404
    assert "missing.ts" in response.json()["detail"]


def test_diff_endpoint_returns_enriched_diff(client: TestClient) -> None:
    base = spec_document([add_export()])
    head = spec_document([])
    markdown = [{"path": "docs/usage.md", "content": "```ts\nadd(1, 2);\n```\n"}]

    response = client.post("/diff", json={"base": base, "head": head, "markdownFiles": markdown})

    assert response.status_code == 200
    body = response.json()
    assert body["breaking"] == ["add"]
    assert body["recommendedBump"]["bump"] == "major"
    assert body["docsImpact"]["impactedFiles"][0]["file"] == "docs/usage.md"


def test_diff_endpoint_rejects_invalid_spec(client: TestClient) -> None:
    response = client.post("/diff", json={"base": {"openpkg": "0.4.0"}, "head": spec_document([])})

    assert response.status_code == 422
    body = response.json()
    assert body["kind"] == "openpkg"
    assert body["issues"]


def test_examples_endpoint_runs_request(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post(
        "/examples/run",
        json={"packageName": "demo-pkg", "packageVersion": "1.0.0", "code": "console.log(add(1, 2))"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "stdout": "3\n", "stderr": "", "exitCode": 0, "duration": 12}
    assert orchestrator.example_requests == [
        ExampleRequest(package_name="demo-pkg", code="console.log(add(1, 2))", package_version="1.0.0")
    ]
