"""Tests for doccov.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from doccov.config import ConfigError, DocCovConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DocCovConfig)
    assert config.root == tmp_path.resolve()
    assert config.extract.entry is None
    assert config.extract.max_depth == 4
    assert config.extract.resolve_external_types is False
    assert config.cache.enabled is True
    assert config.cache_path == tmp_path.resolve() / ".doccov" / "spec.cache.json"
    assert config.examples.run is False
    assert config.examples.concurrency == 3
    assert config.check.min_coverage == 0
    assert config.docs.paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".doccov.yml"
    config_file.write_text(
        """
extract:
  entry: "src/main.ts"
  max_depth: 2
  resolve_external_types: "yes"
cache:
  enabled: false
  path: "build/cache.json"
examples:
  run: true
  install_timeout: 30
  run_timeout: "2.5"
  concurrency: 0
  sandbox_url: "https://sandbox.example.com/run"
check:
  min_coverage: 80
  fail_on_drift: true
docs:
  paths: docs
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.extract.entry == "src/main.ts"
    assert config.extract.max_depth == 2
    assert config.extract.resolve_external_types is True
    assert config.cache.enabled is False
    assert config.cache_path == tmp_path.resolve() / "build" / "cache.json"
    assert config.examples.run is True
    assert config.examples.install_timeout == pytest.approx(30.0)
    assert config.examples.run_timeout == pytest.approx(2.5)
    assert config.examples.concurrency == 1
    assert config.examples.sandbox_url == "https://sandbox.example.com/run"
    assert config.check.min_coverage == 80
    assert config.check.fail_on_drift is True
    assert config.docs.paths == ["docs"]


def test_load_config_from_sibling_file_path(tmp_path: Path) -> None:
    (tmp_path / ".doccov.yml").write_text("check:\n  min_coverage: 50\n", encoding="utf-8")

    config = load_config(tmp_path / "package.json")

    assert config.check.min_coverage == 50


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".doccov.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).extract.max_depth == 4


@pytest.mark.parametrize(
    "content",
    [
        "extract: [unclosed\n",
        "- just\n- a list\n",
        "extract:\n  max_depth: -1\n",
        "check:\n  min_coverage: 101\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".doccov.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
