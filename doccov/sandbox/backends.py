"""Execution backends for @example samples: local subprocess or remote sandbox."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import tempfile
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger
from .models import ExampleExecutionResult, ExampleRequest

CommandRunner = Callable[[Sequence[str], Path, float], subprocess.CompletedProcess]

_LOGGER = get_logger("sandbox")


class SandboxBackend(ABC):
    """Runs one sample and reports the outcome; never raises for sample failures."""

    name: str = "base"

    @abstractmethod
    def run(self, request: ExampleRequest) -> ExampleExecutionResult:
        raise NotImplementedError


class LocalBackend(SandboxBackend):
    """Installs the package into a throwaway directory and runs the sample with node."""

    name = "local"

    def __init__(
        self,
        *,
        install_timeout: float = 15.0,
        run_timeout: float = 5.0,
        npm: str = "npm",
        node: str = "node",
        command_runner: CommandRunner | None = None,
    ) -> None:
        self.install_timeout = install_timeout
        self.run_timeout = run_timeout
        self.npm = npm
        self.node = node
        self._command_runner = command_runner or _run_command

    @contextmanager
    def workspace(self) -> Iterator[Path]:
        """Yield a fresh temporary directory that is removed on exit."""
        path = Path(tempfile.mkdtemp(prefix="doccov-example-"))
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)

    def run(self, request: ExampleRequest) -> ExampleExecutionResult:
        started = time.monotonic()
        with self.workspace() as workdir:
            manifest = {
                "name": "example-runner",
                "type": "module",
                "dependencies": {request.package_name: request.package_version or "latest"},
            }
            (workdir / "package.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")

            install = self._execute([self.npm, "install", "--silent"], workdir, self.install_timeout, started)
            if isinstance(install, ExampleExecutionResult):
                return install
            if install.returncode != 0:
                output = "\n".join(part for part in (install.stdout, install.stderr) if part).strip()
                _LOGGER.warning("npm install of %s failed with exit code %s", request.package_name, install.returncode)
                return ExampleExecutionResult.failure(
                    output or "npm install failed",
                    exit_code=install.returncode,
                    duration=_elapsed_ms(started),
                )

            (workdir / "example.ts").write_text(request.code, encoding="utf-8")
            completed = self._execute(
                [self.node, "--experimental-strip-types", "example.ts"],
                workdir,
                self.run_timeout,
                started,
            )
            if isinstance(completed, ExampleExecutionResult):
                return completed
            return ExampleExecutionResult(
                success=completed.returncode == 0,
                stdout=completed.stdout or "",
                stderr=completed.stderr or "",
                exit_code=completed.returncode,
                duration=_elapsed_ms(started),
            )

    def _execute(
        self, args: Sequence[str], cwd: Path, timeout: float, started: float
    ) -> subprocess.CompletedProcess | ExampleExecutionResult:
        try:
            return self._command_runner(args, cwd, timeout)
        except subprocess.TimeoutExpired as exc:
            stdout = exc.stdout.decode("utf-8", errors="ignore") if isinstance(exc.stdout, bytes) else exc.stdout
            timeout_ms = int(timeout * 1000)
            label = "Example" if args[0] == self.node else "npm install"
            return ExampleExecutionResult.failure(
                f"{label} timed out after {timeout_ms}ms",
                stdout=stdout or "",
                duration=_elapsed_ms(started),
            )
        except FileNotFoundError:
            return ExampleExecutionResult.failure(
                f"Unable to locate '{args[0]}'. Install Node.js 22+ to run examples.",
                duration=_elapsed_ms(started),
            )


class RemoteBackend(SandboxBackend):
    """Delegates execution to an HTTP sandbox exposing ``POST /run``."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        run_timeout: float = 5.0,
        request_timeout: float = 30.0,
        opener: Callable[..., Any] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.run_timeout = run_timeout
        self.request_timeout = request_timeout
        self._opener = opener or urlopen

    def run(self, request: ExampleRequest) -> ExampleExecutionResult:
        started = time.monotonic()
        payload = {
            "packageName": request.package_name,
            "packageVersion": request.package_version,
            "code": request.code,
            "timeout": int(self.run_timeout * 1000),
        }
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        http_request = Request(
            f"{self.base_url}/run",
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        try:
            with self._opener(http_request, timeout=self.request_timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or str(exc.reason)
            return ExampleExecutionResult.failure(
                f"Sandbox request failed with status {exc.code}: {message}",
                duration=_elapsed_ms(started),
            )
        except URLError as exc:
            return ExampleExecutionResult.failure(
                f"Sandbox request failed: {exc.reason}", duration=_elapsed_ms(started)
            )
        except TimeoutError:
            return ExampleExecutionResult.failure(
                f"Sandbox request timed out after {self.request_timeout:g}s",
                duration=_elapsed_ms(started),
            )
        except OSError as exc:
            return ExampleExecutionResult.failure(
                f"Sandbox request failed: {exc}", duration=_elapsed_ms(started)
            )

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return ExampleExecutionResult.failure(
                "Sandbox returned invalid JSON", duration=_elapsed_ms(started)
            )
        if not isinstance(data, dict):
            return ExampleExecutionResult.failure(
                "Sandbox returned an unexpected payload", duration=_elapsed_ms(started)
            )
        return ExampleExecutionResult.from_dict(data)


def select_backend(
    env: Optional[Mapping[str, str]] = None,
    *,
    sandbox_url: str | None = None,
    install_timeout: float = 15.0,
    run_timeout: float = 5.0,
) -> SandboxBackend:
    """Pick the remote sandbox on hosted deployments, the local one elsewhere."""
    env = os.environ if env is None else env
    url = sandbox_url or env.get("DOCCOV_SANDBOX_URL")
    if env.get("VERCEL") == "1" or url:
        if not url:
            raise RuntimeError("VERCEL=1 requires DOCCOV_SANDBOX_URL to point at a sandbox service.")
        _LOGGER.debug("Using remote sandbox at %s", url)
        return RemoteBackend(url, env.get("DOCCOV_SANDBOX_TOKEN"), run_timeout=run_timeout)
    return LocalBackend(install_timeout=install_timeout, run_timeout=run_timeout)


def _run_command(args: Sequence[str], cwd: Path, timeout: float) -> subprocess.CompletedProcess:
    return subprocess.run(
        list(args),
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


__all__ = ["CommandRunner", "LocalBackend", "RemoteBackend", "SandboxBackend", "select_backend"]
