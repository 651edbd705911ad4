"""Content-hash cache for extracted specs (.doccov/spec.cache.json)."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import DEFAULT_CACHE_PATH, DEFAULT_MAX_DEPTH
from ..logging import get_logger
from ..models import OPENPKG_VERSION, Diagnostic, OpenPkgSpec

CACHE_VERSION = "1.0.0"

_HASH_LENGTH = 16


def hash_content(content: str | bytes) -> str:
    """Truncated sha256 hex digest of ``content``."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    return hashlib.sha256(data).hexdigest()[:_HASH_LENGTH]


def hash_file(path: Path) -> Optional[str]:
    try:
        return hash_content(path.read_bytes())
    except OSError:
        return None


def hash_files(paths: Iterable[Path], root: Path) -> Dict[str, str]:
    """Map root-relative POSIX paths to content hashes, skipping unreadable files."""
    hashes: Dict[str, str] = {}
    for path in paths:
        digest = hash_file(path)
        if digest is not None:
            hashes[_relative(path, root)] = digest
    return hashes


def diff_hashes(cached: Mapping[str, str], current: Mapping[str, str]) -> List[str]:
    """Sorted paths that were modified, removed or added."""
    changed = {name for name, digest in cached.items() if current.get(name) != digest}
    changed.update(name for name in current if name not in cached)
    return sorted(changed)


@dataclass(frozen=True)
class CacheSettings:
    """Extraction settings that change the produced spec."""

    resolve_external_types: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def to_dict(self) -> Dict[str, Any]:
        return {"resolveExternalTypes": self.resolve_external_types, "maxDepth": self.max_depth}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CacheSettings":
        max_depth = data.get("maxDepth", DEFAULT_MAX_DEPTH)
        return cls(
            resolve_external_types=bool(data.get("resolveExternalTypes", False)),
            max_depth=max_depth if isinstance(max_depth, int) else DEFAULT_MAX_DEPTH,
        )


@dataclass
class CacheHashes:
    tsconfig: Optional[str]
    package_json: str
    source_files: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tsconfig": self.tsconfig,
            "packageJson": self.package_json,
            "sourceFiles": dict(sorted(self.source_files.items())),
        }


@dataclass
class SpecCache:
    cache_version: str
    generated_at: str
    spec_version: str
    entry_file: str
    hashes: CacheHashes
    config: CacheSettings
    spec: OpenPkgSpec
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cacheVersion": self.cache_version,
            "generatedAt": self.generated_at,
            "specVersion": self.spec_version,
            "entryFile": self.entry_file,
            "hashes": self.hashes.to_dict(),
            "config": self.config.to_dict(),
            "spec": self.spec.to_dict(),
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }


@dataclass
class CacheContext:
    """Everything needed to hash the inputs of one extraction."""

    entry_file: Path
    source_files: Sequence[Path]
    tsconfig_path: Optional[Path]
    package_json_path: Path
    config: CacheSettings
    cwd: Path


@dataclass
class CacheValidationResult:
    valid: bool
    reason: Optional[str] = None
    changed_files: List[str] = field(default_factory=list)


class SpecCacheStore:
    """Loads, validates and atomically writes the spec cache file."""

    def __init__(self, root: Path, path: str | Path = DEFAULT_CACHE_PATH) -> None:
        self.root = Path(root)
        self._path = self.root / path
        self.logger = get_logger("stores.spec_cache")

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[SpecCache]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.debug("Ignoring unreadable spec cache %s: %s", self._path, exc)
            return None
        cache = _cache_from_dict(data)
        if cache is None:
            self.logger.debug("Ignoring malformed spec cache %s", self._path)
        return cache

    def save(
        self,
        spec: OpenPkgSpec,
        context: CacheContext,
        diagnostics: Sequence[Diagnostic] = (),
    ) -> SpecCache:
        cache = SpecCache(
            cache_version=CACHE_VERSION,
            generated_at=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            spec_version=spec.openpkg,
            entry_file=_relative(context.entry_file, context.cwd),
            hashes=CacheHashes(
                tsconfig=hash_file(context.tsconfig_path) if context.tsconfig_path else None,
                package_json=hash_file(context.package_json_path) or "",
                source_files=hash_files(context.source_files, context.cwd),
            ),
            config=context.config,
            spec=spec,
            diagnostics=list(diagnostics),
        )
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(cache.to_dict(), indent=2)
        handle, temp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".spec.cache.", suffix=".tmp")
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(payload)
            os.replace(temp_name, self._path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        self.logger.debug("Wrote spec cache to %s", self._path)
        return cache

    def validate(self, cache: SpecCache, context: CacheContext) -> CacheValidationResult:
        """Check ``cache`` against the current inputs; first failure wins."""
        if cache.cache_version != CACHE_VERSION or cache.spec_version != OPENPKG_VERSION:
            return CacheValidationResult(False, "cache-version-mismatch")
        if cache.entry_file != _relative(context.entry_file, context.cwd):
            return CacheValidationResult(False, "entry-file-changed")
        if cache.config != context.config:
            return CacheValidationResult(False, "config-changed")
        current_tsconfig = hash_file(context.tsconfig_path) if context.tsconfig_path else None
        if cache.hashes.tsconfig != current_tsconfig:
            return CacheValidationResult(False, "tsconfig-changed")
        if cache.hashes.package_json != (hash_file(context.package_json_path) or ""):
            return CacheValidationResult(False, "package-json-changed")
        changed = diff_hashes(cache.hashes.source_files, hash_files(context.source_files, context.cwd))
        if changed:
            return CacheValidationResult(False, "source-files-changed", changed)
        return CacheValidationResult(True)

    def clear(self) -> bool:
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        return True


# ----------------------------------------------------------------------
# Internal helpers


def _relative(path: Path, root: Path) -> str:
    try:
        return Path(path).resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return Path(os.path.relpath(Path(path).resolve(), Path(root).resolve())).as_posix()


def _cache_from_dict(data: object) -> Optional[SpecCache]:
    if not isinstance(data, dict):
        return None
    hashes = data.get("hashes")
    spec = data.get("spec")
    config = data.get("config")
    if not isinstance(hashes, dict) or not isinstance(spec, dict) or not isinstance(config, dict):
        return None
    source_files = hashes.get("sourceFiles")
    if not isinstance(source_files, dict):
        return None
    tsconfig = hashes.get("tsconfig")
    return SpecCache(
        cache_version=str(data.get("cacheVersion", "")),
        generated_at=str(data.get("generatedAt", "")),
        spec_version=str(data.get("specVersion", "")),
        entry_file=str(data.get("entryFile", "")),
        hashes=CacheHashes(
            tsconfig=tsconfig if isinstance(tsconfig, str) else None,
            package_json=str(hashes.get("packageJson") or ""),
            source_files={str(k): str(v) for k, v in source_files.items()},
        ),
        config=CacheSettings.from_dict(config),
        spec=OpenPkgSpec.from_dict(spec),
        diagnostics=[
            Diagnostic.from_dict(item) for item in data.get("diagnostics") or [] if isinstance(item, dict)
        ],
    )


__all__ = [
    "CACHE_VERSION",
    "CacheContext",
    "CacheHashes",
    "CacheSettings",
    "CacheValidationResult",
    "SpecCache",
    "SpecCacheStore",
    "diff_hashes",
    "hash_content",
    "hash_file",
    "hash_files",
]
