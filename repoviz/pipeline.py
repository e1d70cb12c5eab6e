"""Per-file analysis and the repository-level fan-in."""

from __future__ import annotations

import posixpath
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from . import __version__
from .analyzers.complexity import (
    DEFAULT_THRESHOLDS,
    ComplexityThresholds,
    cognitive_score,
    count_code_lines,
    maintainability_index,
    max_nesting,
    score,
    score_classes,
    score_functions,
    summarize,
)
from .analyzers.functions import extract_classes, extract_functions
from .analyzers.graph import (
    ECOSYSTEM_LANGUAGES,
    DependencyGraph,
    GraphMetrics,
    MissingDependency,
    build_graph,
    find_cycles,
    find_missing,
    find_unused,
    graph_metrics,
)
from .analyzers.imports import extract_imports
from .analyzers.languages import (
    classify,
    complexity_weight,
    is_code_language,
    is_manifest,
    split_extension,
)
from .analyzers.manifests import parse_manifest
from .logging import get_logger, log_phase
from .models import (
    ClassComplexity,
    ComplexityReport,
    FileComplexity,
    FileFailure,
    FileMetadata,
    FunctionComplexity,
    LanguageStats,
    SourceFile,
    file_metadata_to_dict,
)
from .stores import AnalysisCache, fingerprint

logger = get_logger("pipeline")

ANALYZER_SIGNATURE = f"repoviz-{__version__}"


def analyze_file(source: SourceFile) -> FileMetadata:
    """Build the metadata record for one already-fetched file."""
    path = source.path.replace("\\", "/")
    filename = posixpath.basename(path)
    content = source.content or ""
    language = classify(filename)

    line_count = len(content.split("\n")) if content else 0
    byte_size = source.size if source.size is not None else len(content.encode("utf-8"))

    imports: frozenset[str] = frozenset()
    functions = ()
    complexity = 1
    if is_code_language(language):
        imports = extract_imports(content, language)
        functions = extract_functions(content, language)
        complexity = score(content, language)

    manifest = parse_manifest(path, content) if is_manifest(filename) else None

    return FileMetadata(
        filename=filename,
        path=path,
        extension=split_extension(filename),
        language=language,
        line_count=line_count,
        byte_size=byte_size,
        is_empty=line_count <= 1 and not content.strip(),
        imports=imports,
        functions=functions,
        complexity=complexity,
        complexity_weight=complexity_weight(language),
        manifest=manifest,
    )


def language_stats(files: Sequence[FileMetadata]) -> Dict[str, LanguageStats]:
    """Aggregate line and size totals per language, largest first."""
    totals: Dict[str, List[int]] = {}
    for meta in files:
        if meta.language is None or meta.is_empty:
            continue
        bucket = totals.setdefault(meta.language, [0, 0, 0])
        bucket[0] += 1
        bucket[1] += meta.line_count
        bucket[2] += meta.byte_size

    all_lines = sum(bucket[1] for bucket in totals.values())
    ordered = sorted(totals.items(), key=lambda item: (-item[1][1], item[0]))
    return {
        language: LanguageStats(
            file_count=count,
            total_lines=lines,
            total_size=size,
            percentage=round(lines / all_lines * 100, 1) if all_lines else 0.0,
        )
        for language, (count, lines, size) in ordered
    }


@dataclass
class RepositoryAnalysis:
    """Everything produced by one pipeline run."""

    files: List[FileMetadata]
    failures: List[FileFailure]
    graph: DependencyGraph
    cycles: List[Tuple[str, ...]]
    unused: Dict[str, List[str]]
    missing: List[MissingDependency]
    metrics: GraphMetrics
    languages: Dict[str, LanguageStats]
    complexity: ComplexityReport
    cache_hits: int = 0

    def file(self, path: str) -> Optional[FileMetadata]:
        for meta in self.files:
            if meta.path == path:
                return meta
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "files": [file_metadata_to_dict(meta) for meta in self.files],
            "failures": [{"path": item.path, "error": item.error} for item in self.failures],
            "graph": self.graph.to_dict(),
            "cycles": [list(cycle) for cycle in self.cycles],
            "unusedDependencies": {path: list(names) for path, names in self.unused.items()},
            "missingDependencies": [{"name": item.name, "path": item.path} for item in self.missing],
            "metrics": {
                "coupling": self.metrics.coupling,
                "components": self.metrics.components,
                "complexity": self.metrics.complexity,
            },
            "languages": {
                language: {
                    "fileCount": stats.file_count,
                    "totalLines": stats.total_lines,
                    "totalSize": stats.total_size,
                    "percentage": stats.percentage,
                }
                for language, stats in self.languages.items()
            },
            "complexity": {
                "total": self.complexity.total,
                "average": self.complexity.average,
                "risk": self.complexity.risk,
                "cognitiveTotal": self.complexity.cognitive_total,
                "bands": dict(self.complexity.bands),
                "maintainability": dict(self.complexity.maintainability),
                "hotspots": [
                    {
                        "type": spot.kind,
                        "name": spot.name,
                        "path": spot.path,
                        "complexity": spot.complexity,
                        "severity": spot.severity,
                    }
                    for spot in self.complexity.hotspots
                ],
                "functions": [
                    {
                        "path": func.path,
                        "name": func.name,
                        "line": func.line,
                        "complexity": func.complexity,
                        "lineCount": func.line_count,
                    }
                    for func in self.complexity.functions
                ],
                "classes": [
                    {
                        "path": item.path,
                        "name": item.name,
                        "line": item.line,
                        "complexity": item.complexity,
                        "lineCount": item.line_count,
                        "methods": item.methods,
                    }
                    for item in self.complexity.classes
                ],
                "files": [
                    {"path": item.path, "cognitive": item.cognitive, "maxNesting": item.max_nesting}
                    for item in self.complexity.files
                ],
            },
        }


@dataclass
class _FileOutcome:
    metadata: Optional[FileMetadata] = None
    functions: Tuple[FunctionComplexity, ...] = ()
    classes: Tuple[ClassComplexity, ...] = ()
    scores: Optional[FileComplexity] = None
    maintainability: Optional[float] = None
    failure: Optional[FileFailure] = None
    cached: bool = False


@dataclass
class AnalysisPipeline:
    """Analyses files independently, then fans in to repository-level results."""

    workers: int = 1
    thresholds: ComplexityThresholds = DEFAULT_THRESHOLDS
    max_cycles: Optional[int] = None
    cache: Optional[AnalysisCache] = None
    analyzer: Callable[[SourceFile], FileMetadata] = field(default=analyze_file, repr=False)

    def run(self, sources: Sequence[SourceFile]) -> RepositoryAnalysis:
        with log_phase(logger, f"Per-file analysis of {len(sources)} files"):
            if self.workers > 1 and len(sources) > 1:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    outcomes = list(executor.map(self._process, sources))
            else:
                outcomes = [self._process(source) for source in sources]

        files: List[FileMetadata] = []
        failures: List[FileFailure] = []
        function_scores: List[FunctionComplexity] = []
        class_scores: List[ClassComplexity] = []
        file_scores: List[FileComplexity] = []
        maintainability: Dict[str, float] = {}
        cache_hits = 0
        for outcome in outcomes:
            if outcome.failure is not None:
                failures.append(outcome.failure)
                continue
            assert outcome.metadata is not None
            files.append(outcome.metadata)
            function_scores.extend(outcome.functions)
            class_scores.extend(outcome.classes)
            if outcome.scores is not None:
                file_scores.append(outcome.scores)
            if outcome.maintainability is not None:
                maintainability[outcome.metadata.path] = outcome.maintainability
            cache_hits += int(outcome.cached)

        if self.cache is not None:
            self.cache.prune(meta.path for meta in files)
            self.cache.persist()

        code_files = [meta for meta in files if is_code_language(meta.language)]
        manifests = [meta.manifest for meta in files if meta.manifest is not None]

        with log_phase(logger, "Dependency graph"):
            graph = build_graph(code_files)
            cycles = find_cycles(graph, limit=self.max_cycles)
        unused: Dict[str, List[str]] = {}
        for manifest in manifests:
            languages = ECOSYSTEM_LANGUAGES.get(manifest.ecosystem, set())
            relevant = [meta for meta in code_files if meta.language in languages]
            unused[manifest.path] = find_unused(manifest.names(), relevant)

        logger.debug(
            "Analysed %d files (%d failed, %d from cache)", len(files), len(failures), cache_hits
        )
        return RepositoryAnalysis(
            files=files,
            failures=failures,
            graph=graph,
            cycles=cycles,
            unused=unused,
            missing=find_missing(manifests, graph),
            metrics=graph_metrics(graph),
            languages=language_stats(files),
            complexity=summarize(
                code_files,
                function_scores,
                maintainability,
                self.thresholds,
                classes=class_scores,
                file_scores=file_scores,
            ),
            cache_hits=cache_hits,
        )

    def _process(self, source: SourceFile) -> _FileOutcome:
        try:
            return self._analyze(source)
        except Exception as exc:
            logger.warning("Failed to analyse %s: %s", source.path, exc)
            return _FileOutcome(failure=FileFailure(path=source.path, error=str(exc) or type(exc).__name__))

    def _analyze(self, source: SourceFile) -> _FileOutcome:
        digest = fingerprint(source.content or "")
        metadata = None
        if self.cache is not None:
            metadata = self.cache.get(source.path, fingerprint=digest)
        cached = metadata is not None
        if metadata is None:
            metadata = self.analyzer(source)
            if self.cache is not None:
                self.cache.store(source.path, fingerprint=digest, metadata=metadata)

        if not is_code_language(metadata.language):
            return _FileOutcome(metadata=metadata, cached=cached)

        content = source.content or ""
        language = metadata.language
        functions = score_functions(content, language, metadata.functions, path=metadata.path)
        classes = score_classes(
            content, language, extract_classes(content, language), metadata.functions, path=metadata.path
        )
        index = maintainability_index(
            metadata.complexity,
            count_code_lines(content, metadata.language),
            len(metadata.functions),
        )
        return _FileOutcome(
            metadata=metadata,
            functions=functions,
            classes=classes,
            scores=FileComplexity(
                path=metadata.path,
                cognitive=cognitive_score(content, language),
                max_nesting=max_nesting(content, language),
            ),
            maintainability=index,
            cached=cached,
        )


__all__ = [
    "ANALYZER_SIGNATURE",
    "AnalysisPipeline",
    "RepositoryAnalysis",
    "analyze_file",
    "language_stats",
]
