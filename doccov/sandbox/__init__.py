"""Isolated execution of documentation samples."""

from .backends import LocalBackend, RemoteBackend, SandboxBackend, select_backend
from .models import ExampleExecutionResult, ExampleRequest, strip_code_block_markers
from .runner import ExampleRunner

__all__ = [
    "ExampleExecutionResult",
    "ExampleRequest",
    "ExampleRunner",
    "LocalBackend",
    "RemoteBackend",
    "SandboxBackend",
    "select_backend",
    "strip_code_block_markers",
]
