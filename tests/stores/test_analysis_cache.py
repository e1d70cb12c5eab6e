"""Tests for the per-file analysis cache."""

from __future__ import annotations

import json
from pathlib import Path

from repoviz.models import SourceFile
from repoviz.pipeline import analyze_file
from repoviz.stores import AnalysisCache, fingerprint


def _meta(path: str = "src/app.js", content: str = "import x from './x';\nfunction go() {}\n"):
    return analyze_file(SourceFile(path=path, content=content))


def test_analysis_cache_round_trip(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"
    meta = _meta()
    cache = AnalysisCache(cache_path, signature="sig-1")
    cache.store(meta.path, fingerprint="fp-abc", metadata=meta)
    cache.persist()

    loaded = AnalysisCache(cache_path, signature="sig-1")

    assert loaded.get(meta.path, fingerprint="fp-abc") == meta


def test_analysis_cache_round_trips_manifest_details(tmp_path: Path) -> None:
    meta = _meta("package.json", '{"name": "web", "devDependencies": {"vite": "^5"}}')
    cache = AnalysisCache(tmp_path / "cache.json", signature="s")
    cache.store(meta.path, fingerprint="fp", metadata=meta)
    cache.persist()

    reused = AnalysisCache(tmp_path / "cache.json", signature="s").get(meta.path, fingerprint="fp")

    assert reused is not None
    assert reused.manifest == meta.manifest


def test_analysis_cache_invalidates_on_signature_or_content_change(tmp_path: Path) -> None:
    meta = _meta()
    cache = AnalysisCache(tmp_path / "cache.json", signature="sig-1")
    cache.store(meta.path, fingerprint="fp", metadata=meta)
    cache.persist()

    assert AnalysisCache(tmp_path / "cache.json", signature="sig-1").get(meta.path, fingerprint="fp") is not None
    assert AnalysisCache(tmp_path / "cache.json", signature="sig-2").get(meta.path, fingerprint="fp") is None
    assert cache.get(meta.path, fingerprint="fp-changed") is None


def test_analysis_cache_prune_removes_unused(tmp_path: Path) -> None:
    cache = AnalysisCache(tmp_path / "cache.json", signature="s")
    cache.store("a.js", fingerprint="fp", metadata=_meta("a.js"))
    cache.store("b.js", fingerprint="fp", metadata=_meta("b.js"))

    cache.prune(["a.js"])
    cache.persist()

    reloaded = AnalysisCache(tmp_path / "cache.json", signature="s")
    assert len(reloaded) == 1
    assert reloaded.get("a.js", fingerprint="fp") is not None
    assert reloaded.get("b.js", fingerprint="fp") is None


def test_analysis_cache_ignores_corrupt_or_foreign_files(tmp_path: Path) -> None:
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    foreign = tmp_path / "foreign.json"
    foreign.write_text(json.dumps({"version": 99, "entries": {}}), encoding="utf-8")

    assert len(AnalysisCache(corrupt, signature="s")) == 0
    assert len(AnalysisCache(foreign, signature="s")) == 0


def test_analysis_cache_without_path_never_writes(tmp_path: Path) -> None:
    cache = AnalysisCache(None, signature="s")
    cache.store("a.js", fingerprint="fp", metadata=_meta("a.js"))
    cache.persist()

    assert cache.get("a.js", fingerprint="fp") is not None
    assert list(tmp_path.iterdir()) == []


def test_fingerprint_is_sha256_of_utf8() -> None:
    assert fingerprint("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert fingerprint("a") != fingerprint("b")
