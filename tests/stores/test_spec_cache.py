from __future__ import annotations

import json
from pathlib import Path

from doccov.models import Diagnostic, OpenPkgSpec, SpecExport, SpecMeta
from doccov.stores import CacheContext, CacheSettings, SpecCacheStore
from doccov.stores.spec_cache import diff_hashes, hash_content


def _spec() -> OpenPkgSpec:
    return OpenPkgSpec(
        meta=SpecMeta(name="demo-pkg", version="1.0.0"),
        exports=[SpecExport(id="add", name="add", kind="function")],
    )


def _context(root: Path, settings: CacheSettings | None = None) -> CacheContext:
    return CacheContext(
        entry_file=root / "src" / "index.ts",
        source_files=[root / "src" / "index.ts", root / "src" / "util.ts"],
        tsconfig_path=None,
        package_json_path=root / "package.json",
        config=settings or CacheSettings(),
        cwd=root,
    )


def _package(tmp_path: Path) -> Path:
    root = tmp_path / "pkg"
    (root / "src").mkdir(parents=True)
    (root / "package.json").write_text('{"name": "demo-pkg"}', encoding="utf-8")
    (root / "src" / "index.ts").write_text("export * from './util';\n", encoding="utf-8")
    (root / "src" / "util.ts").write_text("export const x = 1;\n", encoding="utf-8")
    return root


def test_hash_content_is_truncated_sha256() -> None:
    digest = hash_content("hello")

    assert digest == "2cf24dba5fb0a30e"
    assert hash_content(b"hello") == digest


def test_diff_hashes_reports_modified_removed_and_added() -> None:
    cached = {"a.ts": "1", "b.ts": "2", "c.ts": "3"}
    current = {"a.ts": "1", "b.ts": "changed", "d.ts": "4"}

    assert diff_hashes(cached, current) == ["b.ts", "c.ts", "d.ts"]


def test_save_then_load_roundtrips_and_validates(tmp_path: Path) -> None:
    root = _package(tmp_path)
    store = SpecCacheStore(root)

    store.save(_spec(), _context(root))
    cache = store.load()

    assert cache is not None
    assert store.path == root / ".doccov" / "spec.cache.json"
    assert cache.entry_file == "src/index.ts"
    assert sorted(cache.hashes.source_files) == ["src/index.ts", "src/util.ts"]
    assert cache.spec.to_dict() == _spec().to_dict()
    assert cache.generated_at.endswith("Z")
    assert store.validate(cache, _context(root)).valid is True


def test_source_change_invalidates_with_changed_files(tmp_path: Path) -> None:
    root = _package(tmp_path)
    store = SpecCacheStore(root)
    store.save(_spec(), _context(root))
    (root / "src" / "util.ts").write_text("export const x = 2;\n", encoding="utf-8")

    result = store.validate(store.load(), _context(root))

    assert result.valid is False
    assert result.reason == "source-files-changed"
    assert result.changed_files == ["src/util.ts"]


def test_validation_reasons_in_order(tmp_path: Path) -> None:
    root = _package(tmp_path)
    store = SpecCacheStore(root)
    store.save(_spec(), _context(root))
    cache = store.load()
    assert cache is not None

    changed_settings = _context(root, CacheSettings(max_depth=3))
    assert store.validate(cache, changed_settings).reason == "config-changed"

    (root / "package.json").write_text('{"name": "demo-pkg", "version": "2.0.0"}', encoding="utf-8")
    assert store.validate(cache, _context(root)).reason == "package-json-changed"

    (root / "tsconfig.json").write_text("{}", encoding="utf-8")
    with_tsconfig = _context(root)
    with_tsconfig.tsconfig_path = root / "tsconfig.json"
    assert store.validate(cache, with_tsconfig).reason == "tsconfig-changed"

    moved = _context(root)
    moved.entry_file = root / "src" / "util.ts"
    assert store.validate(cache, moved).reason == "entry-file-changed"

    cache.cache_version = "0.0.1"
    assert store.validate(cache, _context(root)).reason == "cache-version-mismatch"


def test_load_ignores_missing_and_malformed_files(tmp_path: Path) -> None:
    root = _package(tmp_path)
    store = SpecCacheStore(root)

    assert store.load() is None

    store.path.parent.mkdir(parents=True)
    store.path.write_text("not json", encoding="utf-8")
    assert store.load() is None

    store.path.write_text(json.dumps({"hashes": []}), encoding="utf-8")
    assert store.load() is None


def test_clear_removes_cache(tmp_path: Path) -> None:
    root = _package(tmp_path)
    store = SpecCacheStore(root)
    store.save(_spec(), _context(root))

    assert store.clear() is True
    assert store.clear() is False
    assert not store.path.exists()


def test_extraction_diagnostics_survive_the_cache(tmp_path: Path) -> None:
    root = _package(tmp_path)
    store = SpecCacheStore(root)
    warning = Diagnostic(message="Could not resolve export 'thing'", severity="warning", file="src/index.ts", line=3)

    store.save(_spec(), _context(root), [warning])
    cache = store.load()

    assert cache is not None
    assert cache.diagnostics == [warning]
    assert json.loads(store.path.read_text(encoding="utf-8"))["diagnostics"][0]["severity"] == "warning"
