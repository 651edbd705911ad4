"""Extraction entry point: entry file in, ``OpenPkgSpec`` out."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from ..config import DEFAULT_MAX_DEPTH
from ..logging import get_logger, log_timing
from ..models import Diagnostic, OpenPkgSpec, SpecExport, SpecMeta
from .jsdoc import DocComment, leading_doc_comment, parse_doc_comment
from .program import Program, SourceModule
from .schema import TypeWalker
from .serializers import ExportSerializer

if TYPE_CHECKING:
    from ..adapters import SchemaAdapterRegistry

logger = get_logger("extract")


@dataclass
class ExtractResult:
    """Spec plus the diagnostics and source files seen while building it."""

    spec: OpenPkgSpec
    diagnostics: List[Diagnostic] = field(default_factory=list)
    source_files: List[Path] = field(default_factory=list)


def extract(
    entry_file: Path | str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    resolve_external_types: bool = False,
    registry: "SchemaAdapterRegistry | None" = None,
    package_dir: Path | str | None = None,
) -> ExtractResult:
    """Build the spec for the exports reachable from ``entry_file``.

    A missing entry file raises ``FileNotFoundError`` before any work is
    done.  Problems with individual exports become diagnostics instead.
    """
    entry_path = Path(entry_file).expanduser()
    if not entry_path.is_file():
        raise FileNotFoundError(f"Entry file not found: {entry_path}")
    entry_path = entry_path.resolve()
    root = Path(package_dir).resolve() if package_dir is not None else find_package_root(entry_path)

    if registry is None:
        from ..adapters import SchemaAdapterRegistry

        registry = SchemaAdapterRegistry.default()

    with log_timing(logger, f"Extracting {entry_path.name}"):
        program = Program(entry_path, resolve_external_types=resolve_external_types, package_dir=root)
        walker = TypeWalker(program, registry=registry, max_depth=max_depth)
        serializer = ExportSerializer(program, walker)
        entry_module = program.entry_module

        exports: List[SpecExport] = []
        diagnostics: List[Diagnostic] = []
        for name in program.exported_names(entry_module):
            resolved = program.export_lookup(entry_module, name)
            if resolved.namespace is not None:
                diagnostics.append(
                    Diagnostic(
                        message=f"Namespace export '{name}' is not serialized",
                        severity="info",
                        file=program.relative_path(entry_module.path),
                    )
                )
                continue
            if not resolved.declarations:
                origin = f" from '{resolved.external}'" if resolved.external else ""
                diagnostics.append(
                    Diagnostic(
                        message=f"Could not resolve export '{name}'{origin}",
                        severity="warning",
                        file=program.relative_path(entry_module.path),
                    )
                )
                continue
            declaration = resolved.declarations[0]
            try:
                export = serializer.serialize(
                    name, resolved, statement_doc=_export_statement_doc(entry_module, name)
                )
            except Exception as exc:
                logger.warning("Failed to serialize export '%s': %s", name, exc)
                diagnostics.append(
                    Diagnostic(
                        message=f"Failed to serialize export '{name}': {exc}",
                        severity="error",
                        file=program.relative_path(declaration.module.path),
                        line=declaration.line,
                        column=declaration.column,
                    )
                )
                continue
            if export is None:
                diagnostics.append(
                    Diagnostic(
                        message=f"Export '{name}' has an unsupported declaration kind ({declaration.kind})",
                        severity="info",
                        file=program.relative_path(declaration.module.path),
                        line=declaration.line,
                    )
                )
                continue
            exports.append(export)

    spec = OpenPkgSpec(meta=read_package_meta(root, entry_path), exports=exports, types=walker.collected_types())
    logger.info(
        "Extracted %d exports and %d types from %s",
        len(spec.exports),
        len(spec.types),
        program.relative_path(entry_path),
    )
    return ExtractResult(
        spec=spec,
        diagnostics=program.diagnostics + diagnostics,
        source_files=program.source_files(),
    )


def find_package_root(entry_file: Path) -> Path:
    """Nearest ancestor holding a package.json, else the entry's directory."""
    for directory in entry_file.parents:
        if (directory / "package.json").is_file():
            return directory
    return entry_file.parent


def read_package_meta(root: Path, entry_file: Path) -> SpecMeta:
    fallback = entry_file.name.split(".")[0]
    manifest = root / "package.json"
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return SpecMeta(name=fallback)
    if not isinstance(data, dict):
        return SpecMeta(name=fallback)
    description = data.get("description")
    return SpecMeta(
        name=str(data.get("name") or fallback),
        version=str(data.get("version") or "0.0.0"),
        description=description if isinstance(description, str) and description else None,
    )


def _export_statement_doc(module: SourceModule, name: str) -> Optional[DocComment]:
    """Doc comment on an ``export { a as b }`` clause naming ``name``."""
    for entry in module.exports:
        if entry.exported != name or entry.form not in ("local", "reexport"):
            continue
        if entry.node.child_by_field_name("declaration") is not None:
            continue
        raw = leading_doc_comment(entry.node, module.source)
        if raw:
            return parse_doc_comment(raw)
    return None


__all__ = ["ExtractResult", "extract", "find_package_root", "read_package_meta"]
