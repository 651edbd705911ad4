"""FastAPI application entrypoint for doccov service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

try:  # pragma: no cover - optional dependency
    from fastapi import Depends, FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Depends = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from .. import __version__
from ..orchestrator import Orchestrator
from ..sandbox import ExampleRequest
from ..validation import SpecValidationError

_T = TypeVar("_T")


class HealthResponse(BaseModel):
    status: str
    version: str


class SpecRequest(BaseModel):
    entry: str
    maxDepth: Optional[int] = None
    resolveExternalTypes: Optional[bool] = None
    useCache: bool = True


class MarkdownFile(BaseModel):
    path: str
    content: str


class DiffRequest(BaseModel):
    base: Dict[str, Any]
    head: Dict[str, Any]
    markdownFiles: Optional[List[MarkdownFile]] = None


class ExampleRunRequest(BaseModel):
    packageName: str
    packageVersion: Optional[str] = None
    code: str


class ExampleRunResponse(BaseModel):
    success: bool
    stdout: str
    stderr: str
    exitCode: int
    duration: int


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


async def _in_executor(func: Callable[[], _T]) -> _T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing doccov operations."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install doccov[service]`."
        )

    app = FastAPI(title="DocCov Service", version=__version__)

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.post("/spec")
    async def extract_spec(
        payload: SpecRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        outcome = await _in_executor(
            lambda: orchestrator.run_spec(
                payload.entry,
                max_depth=payload.maxDepth,
                resolve_external_types=payload.resolveExternalTypes,
                use_cache=payload.useCache,
            )
        )
        return {
            "spec": outcome.spec.to_dict(),
            "diagnostics": [diagnostic.to_dict() for diagnostic in outcome.diagnostics],
            "fromCache": outcome.from_cache,
        }

    @app.post("/diff")
    async def diff_specs(
        payload: DiffRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        markdown = (
            [{"path": item.path, "content": item.content} for item in payload.markdownFiles]
            if payload.markdownFiles
            else None
        )
        result = await _in_executor(
            lambda: orchestrator.diff_documents(payload.base, payload.head, markdown_files=markdown)
        )
        return result.to_dict()

    @app.post("/examples/run", response_model=ExampleRunResponse)
    async def run_example(
        payload: ExampleRunRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ExampleRunResponse:
        request = ExampleRequest(
            package_name=payload.packageName,
            code=payload.code,
            package_version=payload.packageVersion,
        )
        result = await _in_executor(lambda: orchestrator.run_example(request))
        return ExampleRunResponse(**result.to_dict())

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SpecValidationError)
    async def spec_validation_handler(_: Any, exc: SpecValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": str(exc),
                "kind": exc.kind,
                "issues": [issue.to_dict() for issue in exc.issues],
            },
        )

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install doccov[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
