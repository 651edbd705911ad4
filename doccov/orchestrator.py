"""Pipeline orchestration for the spec, check and diff flows."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .adapters import SchemaAdapterRegistry
from .config import ConfigError, DocCovConfig, load_config
from .diff import SpecDiffWithDocs, diff_spec_with_docs
from .drift import build_doccov_report, enrich_spec
from .drift.examples import ExampleResults
from .extract import extract, find_package_root
from .logging import get_logger
from .models import Diagnostic, OpenPkgSpec
from .sandbox import ExampleExecutionResult, ExampleRequest, ExampleRunner
from .stores import CacheContext, CacheSettings, SpecCache, SpecCacheStore
from .validation import validate_report, validate_spec

DEFAULT_ENTRY_CANDIDATES = ("src/index.ts", "src/index.tsx", "index.ts", "lib/index.ts")
MARKDOWN_SUFFIXES = (".md", ".mdx")

RunnerFactory = Callable[[DocCovConfig], ExampleRunner]


@dataclass
class SpecOutcome:
    """Result of a spec extraction, possibly served from the cache."""

    spec: OpenPkgSpec
    diagnostics: List[Diagnostic] = field(default_factory=list)
    from_cache: bool = False
    cache_reason: Optional[str] = None
    output_path: Optional[Path] = None


@dataclass
class CheckOutcome:
    """Coverage report plus the thresholds it was held against."""

    report: Dict[str, Any]
    spec: OpenPkgSpec
    failures: List[str] = field(default_factory=list)
    output_path: Optional[Path] = None

    @property
    def passed(self) -> bool:
        return not self.failures


def _default_runner(config: DocCovConfig) -> ExampleRunner:
    return ExampleRunner(
        install_timeout=config.examples.install_timeout,
        run_timeout=config.examples.run_timeout,
        concurrency=config.examples.concurrency,
        sandbox_url=config.examples.sandbox_url,
    )


class Orchestrator:
    """Coordinates extraction, caching, drift, example runs and diffing."""

    def __init__(
        self,
        registry: SchemaAdapterRegistry | None = None,
        runner_factory: RunnerFactory | None = None,
    ) -> None:
        self.registry = registry
        self._runner_factory = runner_factory or _default_runner
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    # spec

    def run_spec(
        self,
        entry: str | Path,
        *,
        output: str | Path | None = None,
        max_depth: int | None = None,
        resolve_external_types: bool | None = None,
        use_cache: bool | None = None,
    ) -> SpecOutcome:
        """Extract (or reuse) the spec for ``entry`` and optionally write it."""
        entry_path, root, config = self._resolve_entry(entry)
        settings = CacheSettings(
            resolve_external_types=(
                config.extract.resolve_external_types
                if resolve_external_types is None
                else resolve_external_types
            ),
            max_depth=config.extract.max_depth if max_depth is None else max_depth,
        )
        if settings.max_depth < 0:
            raise ValueError("max_depth must be zero or positive")
        caching = config.cache.enabled if use_cache is None else use_cache
        store = SpecCacheStore(root, config.cache.path) if caching else None

        cached: Optional[SpecCache] = None
        reason: Optional[str] = None
        if store is not None:
            cached, reason = self._from_cache(store, entry_path, root, settings)
        if cached is not None:
            outcome = SpecOutcome(spec=cached.spec, diagnostics=list(cached.diagnostics), from_cache=True)
        else:
            result = extract(
                entry_path,
                max_depth=settings.max_depth,
                resolve_external_types=settings.resolve_external_types,
                registry=self.registry,
                package_dir=root,
            )
            validate_spec(result.spec.to_dict())
            if store is not None:
                store.save(
                    result.spec,
                    self._cache_context(entry_path, root, settings, result.source_files),
                    result.diagnostics,
                )
            outcome = SpecOutcome(
                spec=result.spec,
                diagnostics=result.diagnostics,
                cache_reason=reason,
            )

        if output is not None:
            outcome.output_path = self._write_json(Path(output), outcome.spec.to_dict())
        return outcome

    def _from_cache(
        self,
        store: SpecCacheStore,
        entry_path: Path,
        root: Path,
        settings: CacheSettings,
    ) -> tuple[Optional[SpecCache], Optional[str]]:
        """Cache entry when still valid, else the invalidation reason."""
        cache = store.load()
        if cache is None:
            self.logger.info("Spec cache miss: no cache at %s", store.path)
            return None, "no-cache"
        known_sources = [root / name for name in cache.hashes.source_files]
        validation = store.validate(cache, self._cache_context(entry_path, root, settings, known_sources))
        if not validation.valid:
            if validation.changed_files:
                self.logger.info(
                    "Spec cache miss (%s): %s",
                    validation.reason,
                    ", ".join(validation.changed_files),
                )
            else:
                self.logger.info("Spec cache miss (%s)", validation.reason)
            return None, validation.reason
        self.logger.info("Spec cache hit for %s", cache.entry_file)
        return cache, None

    @staticmethod
    def _cache_context(
        entry_path: Path,
        root: Path,
        settings: CacheSettings,
        source_files: Sequence[Path],
    ) -> CacheContext:
        tsconfig = root / "tsconfig.json"
        return CacheContext(
            entry_file=entry_path,
            source_files=list(source_files),
            tsconfig_path=tsconfig if tsconfig.is_file() else None,
            package_json_path=root / "package.json",
            config=settings,
            cwd=root,
        )

    # ------------------------------------------------------------------
    # check

    def run_check(
        self,
        entry: str | Path,
        *,
        run_examples: bool | None = None,
        min_coverage: int | None = None,
        output: str | Path | None = None,
        spec_path: str = "openpkg.json",
    ) -> CheckOutcome:
        """Score documentation coverage and drift for the package at ``entry``."""
        _, root, config = self._resolve_entry(entry)
        spec = self.run_spec(entry).spec
        threshold = config.check.min_coverage if min_coverage is None else min_coverage
        if not 0 <= threshold <= 100:
            raise ValueError("min_coverage must be between 0 and 100")

        example_results: Dict[str, ExampleResults] = {}
        if config.examples.run if run_examples is None else run_examples:
            example_results = self._run_spec_examples(spec, config)

        enriched = enrich_spec(spec, example_results or None)
        report = build_doccov_report(enriched, spec_path, example_results or None)
        validate_report(report)

        failures: List[str] = []
        score = report["summary"]["score"]
        if score < threshold:
            failures.append(f"Coverage {score}% is below the minimum of {threshold}%")
        drift_total = report["summary"]["drift"]["total"]
        if config.check.fail_on_drift and drift_total:
            failures.append(f"{drift_total} drift issue(s) found")
        examples = report["summary"].get("examples")
        if examples and examples["failed"]:
            failures.append(f"{examples['failed']} of {examples['total']} example(s) failed")

        outcome = CheckOutcome(report=report, spec=enriched, failures=failures)
        if output is not None:
            outcome.output_path = self._write_json(Path(output), report)
        self.logger.info(
            "Check for %s: score %s%%, %d drift issue(s)",
            spec.meta.name or root.name,
            score,
            drift_total,
        )
        return outcome

    def _run_spec_examples(self, spec: OpenPkgSpec, config: DocCovConfig) -> Dict[str, ExampleResults]:
        runner = self._runner_factory(config)
        results: Dict[str, ExampleResults] = {}
        for entry in spec.exports:
            if not entry.examples:
                continue
            outcome = runner.run_export_examples(entry, spec.meta.name, spec.meta.version)
            if outcome:
                results[entry.id or entry.name] = outcome
        return results

    def run_example(self, request: ExampleRequest, config: DocCovConfig | None = None) -> ExampleExecutionResult:
        runner = self._runner_factory(config or DocCovConfig(root=Path.cwd()))
        return runner.run_example(request)

    # ------------------------------------------------------------------
    # diff

    def run_diff(
        self,
        base: str | Path,
        head: str | Path,
        *,
        docs: Iterable[str | Path] = (),
        output: str | Path | None = None,
    ) -> SpecDiffWithDocs:
        """Compare two spec files, optionally against markdown documentation."""
        base_doc = self._read_json(Path(base))
        head_doc = self._read_json(Path(head))
        markdown = self._read_markdown(docs)
        result = self.diff_documents(base_doc, head_doc, markdown_files=markdown)
        if output is not None:
            self._write_json(Path(output), result.to_dict())
        return result

    def diff_documents(
        self,
        base: Mapping[str, Any],
        head: Mapping[str, Any],
        *,
        markdown_files: Optional[Sequence[Mapping[str, str]]] = None,
    ) -> SpecDiffWithDocs:
        result = diff_spec_with_docs(base, head, markdown_files=markdown_files or None)
        bump = result.recommended_bump.bump if result.recommended_bump else "none"
        self.logger.info(
            "Diff: %d breaking, %d non-breaking, %d docs-only (recommend %s)",
            len(result.breaking),
            len(result.non_breaking),
            len(result.docs_only),
            bump,
        )
        return result

    # ------------------------------------------------------------------
    # helpers

    def _resolve_entry(self, entry: str | Path) -> tuple[Path, Path, DocCovConfig]:
        path = Path(entry).expanduser().resolve()
        if path.is_dir():
            config = self._load_config(path)
            candidates = [config.extract.entry] if config.extract.entry else list(DEFAULT_ENTRY_CANDIDATES)
            for candidate in candidates:
                if candidate and (path / candidate).is_file():
                    return (path / candidate).resolve(), path, config
            raise FileNotFoundError(f"No entry file found in {path}; pass the entry file explicitly")
        if not path.is_file():
            raise FileNotFoundError(f"Entry file not found: {path}")
        root = find_package_root(path)
        return path, root, self._load_config(root)

    def _load_config(self, root: Path) -> DocCovConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration in %s: %s", root, exc)
            return DocCovConfig(root=root)

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise FileNotFoundError(f"Spec file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"{path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise RuntimeError(f"{path} must contain a JSON object")
        return data

    def _read_markdown(self, paths: Iterable[str | Path]) -> List[Dict[str, str]]:
        files: List[Dict[str, str]] = []
        for raw in paths:
            path = Path(raw).expanduser()
            if path.is_dir():
                candidates = sorted(
                    item for item in path.rglob("*") if item.is_file() and item.suffix in MARKDOWN_SUFFIXES
                )
            elif path.is_file():
                candidates = [path]
            else:
                raise FileNotFoundError(f"Documentation path not found: {path}")
            for item in candidates:
                files.append({"path": item.as_posix(), "content": item.read_text(encoding="utf-8")})
        self.logger.debug("Loaded %d markdown file(s) for impact analysis", len(files))
        return files

    def _write_json(self, path: Path, payload: Mapping[str, Any]) -> Path:
        path = path.expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        self.logger.debug("Wrote %s", path)
        return path


__all__ = ["CheckOutcome", "Orchestrator", "SpecOutcome"]
