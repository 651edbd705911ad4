"""Configuration loading for doccov (.doccov.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".doccov.yml"
DEFAULT_MAX_DEPTH = 4
DEFAULT_CACHE_PATH = ".doccov/spec.cache.json"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ExtractConfig:
    """Extractor settings."""

    entry: Optional[str] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    resolve_external_types: bool = False


@dataclass
class CacheConfig:
    """On-disk spec cache settings."""

    enabled: bool = True
    path: str = DEFAULT_CACHE_PATH


@dataclass
class ExampleConfig:
    """Sandbox runner settings for @example execution."""

    run: bool = False
    install_timeout: float = 15.0
    run_timeout: float = 5.0
    concurrency: int = 3
    sandbox_url: Optional[str] = None


@dataclass
class CheckConfig:
    """Thresholds applied by `doccov check`."""

    min_coverage: int = 0
    fail_on_drift: bool = False


@dataclass
class DocsConfig:
    """Markdown documentation used for diff impact analysis."""

    paths: List[str] = field(default_factory=list)


@dataclass
class DocCovConfig:
    """Represents the settings defined in .doccov.yml."""

    root: Path
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    examples: ExampleConfig = field(default_factory=ExampleConfig)
    check: CheckConfig = field(default_factory=CheckConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)

    @property
    def cache_path(self) -> Path:
        return self.root / self.cache.path


def load_config(config_path: Path) -> DocCovConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocCovConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    extract = ExtractConfig()
    extract_data = _as_dict(data.get("extract"))
    if extract_data:
        extract.entry = _as_str(extract_data.get("entry"))
        max_depth = _as_int(extract_data.get("max_depth"))
        if max_depth is not None:
            if max_depth < 0:
                raise ConfigError("extract.max_depth must be zero or positive")
            extract.max_depth = max_depth
        resolve = _as_bool(extract_data.get("resolve_external_types"))
        if resolve is not None:
            extract.resolve_external_types = resolve

    cache = CacheConfig()
    cache_data = _as_dict(data.get("cache"))
    if cache_data:
        enabled = _as_bool(cache_data.get("enabled"))
        if enabled is not None:
            cache.enabled = enabled
        cache.path = _as_str(cache_data.get("path")) or DEFAULT_CACHE_PATH

    examples = ExampleConfig()
    example_data = _as_dict(data.get("examples"))
    if example_data:
        examples.run = _as_bool(example_data.get("run")) or False
        examples.install_timeout = _as_float(example_data.get("install_timeout")) or 15.0
        examples.run_timeout = _as_float(example_data.get("run_timeout")) or 5.0
        concurrency = _as_int(example_data.get("concurrency"))
        if concurrency is not None:
            examples.concurrency = max(1, concurrency)
        examples.sandbox_url = _as_str(example_data.get("sandbox_url"))

    check = CheckConfig()
    check_data = _as_dict(data.get("check"))
    if check_data:
        min_coverage = _as_int(check_data.get("min_coverage"))
        if min_coverage is not None:
            if not 0 <= min_coverage <= 100:
                raise ConfigError("check.min_coverage must be between 0 and 100")
            check.min_coverage = min_coverage
        check.fail_on_drift = _as_bool(check_data.get("fail_on_drift")) or False

    docs = DocsConfig(paths=_as_str_list(_as_dict(data.get("docs")).get("paths")))

    return DocCovConfig(
        root=root,
        extract=extract,
        cache=cache,
        examples=examples,
        check=check,
        docs=docs,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CacheConfig",
    "CheckConfig",
    "ConfigError",
    "DEFAULT_MAX_DEPTH",
    "DocCovConfig",
    "DocsConfig",
    "ExampleConfig",
    "ExtractConfig",
    "load_config",
]
