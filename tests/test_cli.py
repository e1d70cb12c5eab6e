"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repoviz.cli import _build_parser, main


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "--verbose"])
    assert args.verbose is True


def test_cli_parses_analyze_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["analyze", "repo", "--max-files", "10", "--workers", "2", "--format", "json", "--no-cache"]
    )
    assert args.path == "repo"
    assert args.max_files == 10
    assert args.workers == 2
    assert args.format == "json"
    assert args.no_cache is True


def test_cli_rejects_non_positive_limits() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["analyze", "--workers", "0"])


def test_analyze_prints_json_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    _write(repo / "a.js", "import b from './b'; function foo() { if (true) { return 1; } }\n")
    _write(repo / "b.js", "export default 1;\n")

    main(["analyze", str(repo), "--format", "json", "--no-cache"])

    payload = json.loads(capsys.readouterr().out)
    assert [item["path"] for item in payload["files"]] == ["a.js", "b.js"]
    assert payload["cycles"] == []
    assert payload["complexity"]["total"] == 3
    assert not (repo / ".repoviz").exists()


def test_analyze_text_report_and_cache(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    _write(repo / "a.py", "import b\n")
    _write(repo / "b.py", "import a\n")

    main(["analyze", str(repo)])

    out = capsys.readouterr().out
    assert "Files analysed: 2" in out
    assert "cycles: 1" in out
    assert (repo / ".repoviz" / "cache.json").exists()


def test_analyze_writes_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    _write(repo / "main.go", "package main\n\nfunc main() {\n}\n")
    report = tmp_path / "out" / "report.json"

    main(["analyze", str(repo), "--format", "json", "--output", str(report), "--no-cache"])

    assert "Report written to" in capsys.readouterr().out
    assert json.loads(report.read_text(encoding="utf-8"))["files"][0]["language"] == "go"


def test_analyze_missing_path_exits_with_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "missing")])
    assert excinfo.value.code == 1


def test_analyze_bad_config_exits_with_error(tmp_path: Path) -> None:
    _write(tmp_path / ".repoviz.yml", "- not a mapping\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path)])
    assert excinfo.value.code == 1


def test_inspect_prints_file_metadata(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "tool.rs"
    _write(target, "use std::io;\n\npub fn run() {\n}\n")

    main(["inspect", str(target)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["language"] == "rust"
    assert payload["imports"] == ["std::io"]
    assert payload["functions"] == [{"name": "run", "line": 3, "kind": "function"}]


def test_analyze_writes_debug_log_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    _write(repo / "a.py", "import os\n")
    log_file = tmp_path / "logs" / "repoviz.log"

    main(["--quiet", "--log-file", str(log_file), "analyze", str(repo), "--no-cache"])

    captured = capsys.readouterr()
    assert "Files analysed: 1" in captured.out
    assert "[repoviz] INFO" not in captured.err
    text = log_file.read_text(encoding="utf-8")
    assert "Repository scan took" in text
    assert "Dependency graph took" in text
