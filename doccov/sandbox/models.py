"""Request/result types shared by the sandbox backends."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

_OPENING_FENCE = re.compile(r"^```(?:(?:typescript|tsx|ts|javascript|jsx|js)\b[^\n]*)?\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?```$", re.IGNORECASE)


def strip_code_block_markers(code: str) -> str:
    """Remove a surrounding markdown fence from an @example body."""
    return _CLOSING_FENCE.sub("", _OPENING_FENCE.sub("", code, count=1), count=1).strip()


@dataclass
class ExampleRequest:
    package_name: str
    code: str
    package_version: Optional[str] = None


@dataclass
class ExampleExecutionResult:
    """Outcome of one sample run; ``duration`` is in milliseconds."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration: int = 0

    @classmethod
    def failure(cls, stderr: str, *, exit_code: int = 1, duration: int = 0, stdout: str = "") -> "ExampleExecutionResult":
        return cls(success=False, stdout=stdout, stderr=stderr, exit_code=exit_code, duration=duration)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exitCode": self.exit_code,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExampleExecutionResult":
        exit_code = data.get("exitCode", 1)
        duration = data.get("duration", 0)
        return cls(
            success=bool(data.get("success", False)),
            stdout=str(data.get("stdout") or ""),
            stderr=str(data.get("stderr") or ""),
            exit_code=int(exit_code) if isinstance(exit_code, (int, float)) else 1,
            duration=int(duration) if isinstance(duration, (int, float)) else 0,
        )


__all__ = ["ExampleExecutionResult", "ExampleRequest", "strip_code_block_markers"]
