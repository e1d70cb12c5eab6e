"""CLI entrypoints for repoviz commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from .config import ConfigError, load_config
from .logging import configure_logging, get_logger, log_phase
from .models import SourceFile, file_metadata_to_dict
from .pipeline import ANALYZER_SIGNATURE, AnalysisPipeline, RepositoryAnalysis, analyze_file
from .repo_scanner import RepoScanner
from .stores import AnalysisCache

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("value must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoviz",
        description="Analyse a repository's languages, imports, complexity and dependency graph.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors to the console.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyse every supported file in a repository.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    analyze_parser.add_argument(
        "--max-files",
        type=_positive_int,
        help="Cap on analysed source files (overrides analysis.max_files).",
    )
    analyze_parser.add_argument(
        "--workers",
        type=_positive_int,
        help="Number of worker threads (overrides analysis.workers).",
    )
    analyze_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )
    analyze_parser.add_argument(
        "--output",
        type=Path,
        help="Write the report to this file instead of stdout.",
    )
    analyze_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore and do not update the analysis cache.",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the metadata record of a single file as JSON.",
    )
    _add_verbose_option(inspect_parser, suppress_default=True)
    inspect_parser.add_argument("file", type=Path, help="File to analyse.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoviz commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    if args.command == "analyze":
        try:
            report = _run_analyze(args)
        except (FileNotFoundError, NotADirectoryError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        _emit(report, args.output)
    elif args.command == "inspect":
        try:
            content = args.file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            parser.exit(1, f"Cannot read {args.file}: {exc}\n")
        meta = analyze_file(
            SourceFile(path=args.file.as_posix(), content=content, size=args.file.stat().st_size)
        )
        print(json.dumps(file_metadata_to_dict(meta), indent=2))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_analyze(args: argparse.Namespace) -> str:
    root = Path(args.path).expanduser()
    if not root.exists():
        raise FileNotFoundError(f"Repository path not found: {args.path}")
    if not root.is_dir():
        raise NotADirectoryError(f"Repository path is not a directory: {args.path}")

    config = load_config(root)
    if args.max_files is not None:
        config.analysis.max_files = args.max_files
    if args.workers is not None:
        config.analysis.workers = args.workers

    with log_phase(logger, "Repository scan"):
        scan = RepoScanner().scan(str(root), config)

    cache = None
    cache_path = config.cache_path
    if cache_path is not None and not args.no_cache:
        cache = AnalysisCache(cache_path, signature=ANALYZER_SIGNATURE)

    pipeline = AnalysisPipeline(
        workers=config.analysis.workers,
        thresholds=config.complexity,
        max_cycles=config.analysis.max_cycles,
        cache=cache,
    )
    analysis = pipeline.run(scan.sources)
    logger.info("Analysed %d files under %s", len(analysis.files), scan.root)

    if args.format == "json":
        return json.dumps(analysis.to_dict(), indent=2)
    return _render_text(analysis)


def _render_text(analysis: RepositoryAnalysis) -> str:
    lines: List[str] = [f"Files analysed: {len(analysis.files)}"]
    if analysis.failures:
        lines.append(f"Files failed: {len(analysis.failures)}")
        lines.extend(f"  {item.path}: {item.error}" for item in analysis.failures)

    if analysis.languages:
        lines.append("")
        lines.append("Languages:")
        for language, stats in analysis.languages.items():
            lines.append(
                f"  {language:<12} {stats.file_count:>4} files {stats.total_lines:>7} lines"
                f" {stats.percentage:>5.1f}%"
            )

    report = analysis.complexity
    lines.append("")
    lines.append(
        f"Complexity: total {report.total}, average {report.average}, risk {report.risk},"
        f" cognitive {report.cognitive_total}"
    )
    if report.files:
        deepest = max(report.files, key=lambda item: item.max_nesting)
        lines.append(f"  deepest nesting: {deepest.max_nesting} ({deepest.path})")
    if report.classes:
        lines.append(f"  classes: {len(report.classes)}")
    for spot in report.hotspots:
        lines.append(f"  [{spot.severity}] {spot.kind} {spot.name} ({spot.path}): {spot.complexity}")

    local_edges = len(analysis.graph.local_edges())
    lines.append("")
    lines.append(
        f"Dependency graph: {len(analysis.graph.nodes)} files, {local_edges} local edges,"
        f" {len(analysis.graph.external_nodes)} external modules"
    )
    lines.append(
        f"  coupling {analysis.metrics.coupling}, components {analysis.metrics.components},"
        f" complexity {analysis.metrics.complexity}"
    )
    if analysis.cycles:
        lines.append(f"  cycles: {len(analysis.cycles)}")
        lines.extend("    " + " -> ".join(cycle + (cycle[0],)) for cycle in analysis.cycles)
    else:
        lines.append("  cycles: none")

    for manifest, names in analysis.unused.items():
        if names:
            lines.append(f"Unused dependencies in {manifest}: {', '.join(names)}")
    if analysis.missing:
        lines.append("Undeclared imports:")
        lines.extend(f"  {item.name} ({item.path})" for item in analysis.missing)

    return "\n".join(lines)


def _emit(report: str, output: Path | None) -> None:
    if output is None:
        print(report)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report + "\n", encoding="utf-8")
    print(f"Report written to {_relativize(output)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
