"""Tests for repoviz.pipeline."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repoviz.models import FileFailure, SourceFile
from repoviz.pipeline import (
    ANALYZER_SIGNATURE,
    AnalysisPipeline,
    analyze_file,
    language_stats,
)
from repoviz.stores import AnalysisCache


def _sources(files: dict[str, str]) -> list[SourceFile]:
    return [SourceFile(path=path, content=content) for path, content in files.items()]


def test_two_file_repository_end_to_end() -> None:
    sources = _sources(
        {
            "a.js": "import b from './b'; function foo() { if (true) { return 1; } }",
            "b.js": "export default 1;",
        }
    )

    analysis = AnalysisPipeline().run(sources)

    a = analysis.file("a.js")
    b = analysis.file("b.js")
    assert a is not None and b is not None
    assert a.imports == {"./b"}
    assert [(func.name, func.line) for func in a.functions] == [("foo", 1)]
    assert a.complexity == 2
    assert b.imports == frozenset()
    assert b.functions == ()
    assert b.complexity == 1
    assert [(edge.source, edge.target) for edge in analysis.graph.local_edges()] == [("a.js", "b.js")]
    assert analysis.cycles == []
    assert analysis.failures == []


def test_analyze_file_builds_metadata() -> None:
    meta = analyze_file(SourceFile(path="src/app.py", content="import os\n\ndef main():\n    pass\n"))

    assert meta.filename == "app.py"
    assert meta.path == "src/app.py"
    assert meta.extension == ".py"
    assert meta.language == "python"
    assert meta.line_count == 5
    assert meta.byte_size == len("import os\n\ndef main():\n    pass\n")
    assert meta.is_empty is False
    assert meta.imports == {"os"}
    assert [func.name for func in meta.functions] == ["main"]
    assert meta.complexity_weight == pytest.approx(0.7)
    assert meta.manifest is None


def test_analyze_file_handles_empty_and_unknown_files() -> None:
    empty = analyze_file(SourceFile(path="empty.js", content=""))
    blank = analyze_file(SourceFile(path="blank.js", content="   "))
    unknown = analyze_file(SourceFile(path="LICENSE", content="if you use this, else"))

    assert (empty.line_count, empty.is_empty, empty.complexity) == (0, True, 1)
    assert blank.is_empty is True
    assert unknown.language is None
    assert unknown.extension == ""
    assert unknown.complexity == 1
    assert unknown.complexity_weight == pytest.approx(1.0)
    assert unknown.imports == frozenset()


def test_analyze_file_prefers_reported_size_and_parses_manifests() -> None:
    sized = analyze_file(SourceFile(path="a.js", content="x", size=42))
    manifest = analyze_file(
        SourceFile(path="package.json", content='{"dependencies": {"react": "^18"}}')
    )

    assert sized.byte_size == 42
    assert manifest.language == "json"
    assert manifest.manifest is not None
    assert manifest.manifest.ecosystem == "npm"
    assert manifest.manifest.dependencies == {"react": "^18"}


def test_failures_are_isolated_per_file() -> None:
    def flaky(source: SourceFile):
        if source.path == "bad.js":
            raise ValueError("boom")
        return analyze_file(source)

    sources = _sources({"good.js": "let a = 1;", "bad.js": "let b;", "other.py": "x = 1"})

    analysis = AnalysisPipeline(analyzer=flaky).run(sources)

    assert [meta.path for meta in analysis.files] == ["good.js", "other.py"]
    assert analysis.failures == [FileFailure(path="bad.js", error="boom")]


def test_thread_pool_preserves_input_order() -> None:
    files = {f"mod{index:02d}.js": f"import x from './mod{index + 1:02d}';" for index in range(20)}
    sources = _sources(files)

    sequential = AnalysisPipeline(workers=1).run(sources)
    threaded = AnalysisPipeline(workers=4).run(sources)

    assert [meta.path for meta in threaded.files] == list(files)
    assert threaded.to_dict() == sequential.to_dict()


def test_manifest_cross_checks() -> None:
    sources = _sources(
        {
            "package.json": '{"dependencies": {"react": "^18", "left-pad": "1.0.0"}}',
            "src/index.js": "import React from 'react';\nimport axios from 'axios';\nimport fs from 'fs';\n",
        }
    )

    analysis = AnalysisPipeline().run(sources)

    assert analysis.unused == {"package.json": ["left-pad"]}
    assert [(item.name, item.path) for item in analysis.missing] == [("axios", "src/index.js")]


def test_cycles_respect_the_configured_cap() -> None:
    sources = _sources(
        {
            "a.js": "import './b';\nimport './c';",
            "b.js": "import './a';",
            "c.js": "import './a';",
        }
    )

    assert len(AnalysisPipeline().run(sources).cycles) == 2
    assert len(AnalysisPipeline(max_cycles=1).run(sources).cycles) == 1


def test_language_stats_ignore_empty_and_unknown_files() -> None:
    sources = _sources(
        {
            "a.py": "\n".join(["x = 1"] * 10),
            "b.py": "\n".join(["y = 2"] * 10),
            "c.js": "\n".join(["let z;"] * 30),
            "d.js": "",
            "NOTICE": "text",
        }
    )
    files = [analyze_file(source) for source in sources]

    stats = language_stats(files)

    assert list(stats) == ["javascript", "python"]
    assert (stats["javascript"].file_count, stats["javascript"].total_lines) == (1, 30)
    assert (stats["python"].file_count, stats["python"].total_lines) == (2, 20)
    assert stats["javascript"].percentage == pytest.approx(60.0)
    assert stats["python"].percentage == pytest.approx(40.0)


def test_cache_reuses_unchanged_files(tmp_path: Path) -> None:
    calls: list[str] = []

    def counting(source: SourceFile):
        calls.append(source.path)
        return analyze_file(source)

    sources = _sources({"a.js": "import './b';", "b.js": "function b() {}"})
    cache_path = tmp_path / "cache.json"

    first = AnalysisPipeline(
        cache=AnalysisCache(cache_path, signature=ANALYZER_SIGNATURE), analyzer=counting
    ).run(sources)
    second = AnalysisPipeline(
        cache=AnalysisCache(cache_path, signature=ANALYZER_SIGNATURE), analyzer=counting
    ).run(sources)

    assert calls == ["a.js", "b.js"]
    assert second.cache_hits == 2
    assert second.files == first.files


def test_report_is_json_serialisable() -> None:
    sources = _sources(
        {
            "requirements.txt": "requests\n",
            "app.py": "import requests\n\ndef run():\n    if True:\n        return 1\n",
        }
    )

    payload = json.loads(json.dumps(AnalysisPipeline().run(sources).to_dict()))

    assert payload["files"][1]["language"] == "python"
    assert payload["complexity"]["total"] == 2
    assert payload["complexity"]["cognitiveTotal"] == 2
    assert payload["complexity"]["files"] == [{"path": "app.py", "cognitive": 2, "maxNesting": 2}]
    assert payload["complexity"]["classes"] == []
    assert payload["unusedDependencies"] == {"requirements.txt": []}
    assert payload["missingDependencies"] == []
