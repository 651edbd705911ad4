"""Fan-out runner that executes @example samples through a sandbox backend."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from ..logging import get_logger, log_timing
from ..models import SpecExport
from .backends import SandboxBackend, select_backend
from .models import ExampleExecutionResult, ExampleRequest, strip_code_block_markers

_LOGGER = get_logger("sandbox.runner")


class ExampleRunner:
    """Runs samples with a fixed-size worker pool; results keep input order."""

    def __init__(
        self,
        backend: SandboxBackend | None = None,
        *,
        install_timeout: float = 15.0,
        run_timeout: float = 5.0,
        concurrency: int = 3,
        sandbox_url: str | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.backend = backend or select_backend(
            sandbox_url=sandbox_url,
            install_timeout=install_timeout,
            run_timeout=run_timeout,
        )
        self.concurrency = concurrency

    def run_example(self, request: ExampleRequest) -> ExampleExecutionResult:
        code = strip_code_block_markers(request.code)
        if not code:
            return ExampleExecutionResult.failure("Example is empty")
        prepared = ExampleRequest(
            package_name=request.package_name,
            code=code,
            package_version=request.package_version,
        )
        result = self.backend.run(prepared)
        _LOGGER.debug(
            "Example for %s finished in %sms (exit %s)",
            request.package_name,
            result.duration,
            result.exit_code,
        )
        return result

    def run_examples(self, requests: Sequence[ExampleRequest]) -> List[ExampleExecutionResult]:
        if not requests:
            return []
        with log_timing(_LOGGER, f"Running {len(requests)} example(s)"):
            with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
                return list(pool.map(self.run_example, requests))

    def run_export_examples(
        self,
        export: SpecExport,
        package_name: str,
        version: Optional[str] = None,
    ) -> Dict[int, ExampleExecutionResult]:
        """Run every non-empty example of ``export``, keyed by example index."""
        indexed = [(index, code) for index, code in enumerate(export.examples) if code.strip()]
        requests = [
            ExampleRequest(package_name=package_name, code=code, package_version=version)
            for _, code in indexed
        ]
        results = self.run_examples(requests)
        return {index: result for (index, _), result in zip(indexed, results)}


__all__ = ["ExampleRunner"]
