"""Per-language analyzers: classification, extraction, scoring and graphs."""

from __future__ import annotations

from .complexity import (
    DEFAULT_THRESHOLDS,
    ComplexityThresholds,
    band,
    cognitive_score,
    count_code_lines,
    maintainability_index,
    max_nesting,
    risk_level,
    score,
    score_classes,
    score_functions,
    summarize,
)
from .functions import extract_classes, extract_functions
from .graph import (
    DependencyGraph,
    Edge,
    GraphMetrics,
    MissingDependency,
    ModuleImports,
    build_graph,
    find_cycles,
    find_missing,
    find_unused,
    graph_metrics,
)
from .imports import extract_imports
from .languages import classify, complexity_weight, is_code_language, is_manifest
from .manifests import (
    parse_cargo_toml,
    parse_manifest,
    parse_package_json,
    parse_pyproject_toml,
    parse_requirements_txt,
)
from .normalizer import strip_noise
from .registry import get_support, supported_languages

__all__ = [
    "DEFAULT_THRESHOLDS",
    "ComplexityThresholds",
    "DependencyGraph",
    "Edge",
    "GraphMetrics",
    "MissingDependency",
    "ModuleImports",
    "band",
    "build_graph",
    "classify",
    "cognitive_score",
    "complexity_weight",
    "count_code_lines",
    "extract_classes",
    "extract_functions",
    "extract_imports",
    "find_cycles",
    "find_missing",
    "find_unused",
    "get_support",
    "graph_metrics",
    "is_code_language",
    "is_manifest",
    "maintainability_index",
    "max_nesting",
    "parse_cargo_toml",
    "parse_manifest",
    "parse_package_json",
    "parse_pyproject_toml",
    "parse_requirements_txt",
    "risk_level",
    "score",
    "score_classes",
    "score_functions",
    "strip_noise",
    "summarize",
    "supported_languages",
]
