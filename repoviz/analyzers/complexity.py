"""Lexical cyclomatic complexity.

Scores are McCabe-style estimates: one plus the number of decision-point
keywords left after comments and string bodies are stripped. No control-flow
graph is built; the banding thresholds below are calibrated against this
keyword-density method.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

from ..models import (
    ClassComplexity,
    ClassRecord,
    ComplexityReport,
    FileComplexity,
    FileMetadata,
    FunctionComplexity,
    FunctionRecord,
    Hotspot,
)
from .normalizer import strip_noise
from .registry import DEFAULT_LANGUAGE, get_support

_SYMBOL_PATTERNS = {
    # ternary only: skip optional chaining (?.) and nullish coalescing (??)
    "?": r"(?<!\?)\?(?![?.])",
    "&&": r"&&",
    "||": r"\|\|",
}


@dataclass(frozen=True)
class ComplexityThresholds:
    """Upper bounds for the low/medium/high bands and hotspot cut-offs."""

    low: int = 5
    medium: int = 10
    high: int = 20
    file_hotspot: int = 20
    file_hotspot_high: int = 30
    function_hotspot: int = 10
    function_hotspot_high: int = 15


DEFAULT_THRESHOLDS = ComplexityThresholds()


@lru_cache(maxsize=None)
def _keyword_pattern(language: str) -> Pattern[str]:
    support = get_support(language) or get_support(DEFAULT_LANGUAGE)
    assert support is not None
    parts = [_SYMBOL_PATTERNS.get(keyword, rf"\b{re.escape(keyword)}\b") for keyword in support.keywords]
    return re.compile("|".join(parts))


def _resolve_language(language: Optional[str]) -> str:
    if get_support(language) is None:
        return DEFAULT_LANGUAGE
    return language  # type: ignore[return-value]


def score(content: str, language: Optional[str]) -> int:
    """Return the lexical cyclomatic complexity of ``content`` (always >= 1)."""
    if not content:
        return 1
    cleaned = strip_noise(content, language)
    pattern = _keyword_pattern(_resolve_language(language))
    return 1 + sum(1 for _ in pattern.finditer(cleaned))


def band(value: int, thresholds: ComplexityThresholds = DEFAULT_THRESHOLDS) -> str:
    if value <= thresholds.low:
        return "low"
    if value <= thresholds.medium:
        return "medium"
    if value <= thresholds.high:
        return "high"
    return "very-high"


def risk_level(total: int) -> str:
    if total <= 10:
        return "low"
    if total <= 20:
        return "medium"
    if total <= 40:
        return "high"
    return "critical"


def count_code_lines(content: str, language: Optional[str]) -> int:
    """Count non-blank lines that are not pure line comments."""
    support = get_support(language)
    prefixes = support.comments.line_prefixes if support is not None else ("//", "#")
    count = 0
    for line in content.split("\n"):
        trimmed = line.strip()
        if trimmed and not trimmed.startswith(prefixes):
            count += 1
    return count


def maintainability_index(complexity: int, code_lines: int, function_count: int) -> float:
    """Classic maintainability index clamped to 0..100."""
    if code_lines <= 0:
        return 100.0
    volume = code_lines * math.log2(function_count + 1)
    if volume <= 0:
        return 100.0
    value = 171 - 5.2 * math.log(volume) - 0.23 * complexity - 16.2 * math.log(code_lines)
    return round(min(100.0, max(0.0, value)), 2)


_LOGICAL_KEYWORDS = frozenset({"&&", "||", "and", "or"})
_RUBY_OPENER = re.compile(
    r"^(?:if|unless|while|until|for|case|def|class|module|begin)\b|\bdo\b(?:\s*\|[^|]*\|)?$"
)


def _alternation(keywords: Sequence[str]) -> Optional[Pattern[str]]:
    if not keywords:
        return None
    parts = [_SYMBOL_PATTERNS.get(keyword, rf"\b{re.escape(keyword)}\b") for keyword in keywords]
    return re.compile("|".join(parts))


@lru_cache(maxsize=None)
def _cognitive_patterns(language: str) -> Tuple[Optional[Pattern[str]], Optional[Pattern[str]]]:
    support = get_support(language)
    assert support is not None
    structural = [k for k in support.keywords if k not in _LOGICAL_KEYWORDS]
    logical = [k for k in support.keywords if k in _LOGICAL_KEYWORDS]
    return _alternation(structural), _alternation(logical)


def _opens_indented_block(language: str, trimmed: str) -> bool:
    if language == "ruby":
        return bool(_RUBY_OPENER.search(trimmed))
    return trimmed.endswith(":")


def _block_depths(lines: Sequence[str], language: str, blocks: str) -> List[Tuple[int, int]]:
    """Return ``(depth at line start, deepest depth reached on the line)`` per line."""
    depths: List[Tuple[int, int]] = []
    if blocks == "indent":
        stack: List[int] = []
        for line in lines:
            trimmed = line.strip()
            if not trimmed:
                depths.append((len(stack), len(stack)))
                continue
            indent = _indent_of(line)
            while stack and stack[-1] >= indent:
                stack.pop()
            depth = len(stack)
            if _opens_indented_block(language, trimmed):
                stack.append(indent)
            depths.append((depth, len(stack)))
        return depths

    running = 0
    for line in lines:
        trimmed = line.strip()
        closers = len(trimmed) - len(trimmed.lstrip("}"))
        depth = max(0, running - closers)
        peak = depth
        for char in line:
            if char == "{":
                running += 1
                peak = max(peak, running)
            elif char == "}":
                running = max(0, running - 1)
        depths.append((depth, peak))
    return depths


def cognitive_score(content: str, language: Optional[str]) -> int:
    """Nesting-weighted count of control structures.

    A line holding a control keyword adds one plus the block depth it starts
    at; every logical operator on any line adds one more. Unsupported
    languages score 0.
    """
    support = get_support(language)
    if support is None or not content:
        return 0
    structural, logical = _cognitive_patterns(support.tag)
    lines = strip_noise(content, language).split("\n")
    total = 0
    for line, (depth, _) in zip(lines, _block_depths(lines, support.tag, support.blocks)):
        if structural is not None and structural.search(line):
            total += 1 + depth
        if logical is not None:
            total += sum(1 for _ in logical.finditer(line))
    return total


def max_nesting(content: str, language: Optional[str]) -> int:
    """Deepest block nesting: braces for C-like languages, indented blocks otherwise."""
    support = get_support(language)
    if support is None or not content:
        return 0
    lines = strip_noise(content, language).split("\n")
    return max((peak for _, peak in _block_depths(lines, support.tag, support.blocks)), default=0)


def score_functions(
    content: str,
    language: Optional[str],
    functions: Sequence[FunctionRecord],
    *,
    path: str = "",
) -> Tuple[FunctionComplexity, ...]:
    """Score each function body; bodies are cut from the original lines."""
    support = get_support(language)
    if support is None or not content or not functions:
        return ()

    lines = content.split("\n")
    results: List[FunctionComplexity] = []
    for func in functions:
        start = func.line - 1
        if start < 0 or start >= len(lines):
            continue
        if support.blocks == "indent":
            body = _indented_body(lines, start)
        else:
            body = _braced_body(lines, start)
        results.append(
            FunctionComplexity(
                path=path,
                name=func.name,
                line=func.line,
                complexity=score("\n".join(body), language),
                line_count=len(body),
            )
        )
    return tuple(results)


def _braced_body(lines: Sequence[str], start: int) -> List[str]:
    depth = 0
    opened = False
    body: List[str] = []
    for line in lines[start:]:
        body.append(line)
        for char in line:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
                if opened and depth == 0:
                    return body
    return body


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _indented_body(lines: Sequence[str], start: int) -> List[str]:
    header = lines[start]
    base = _indent_of(header)
    body = [header]
    for line in lines[start + 1 :]:
        if not line.strip():
            body.append(line)
            continue
        if _indent_of(line) <= base:
            if line.strip() == "end":
                body.append(line)
            break
        body.append(line)
    while len(body) > 1 and not body[-1].strip():
        body.pop()
    return body


def score_classes(
    content: str,
    language: Optional[str],
    classes: Sequence[ClassRecord],
    functions: Sequence[FunctionRecord] = (),
    *,
    path: str = "",
) -> Tuple[ClassComplexity, ...]:
    """Score each class body and count the functions defined inside it."""
    support = get_support(language)
    if support is None or not content or not classes:
        return ()

    lines = content.split("\n")
    results: List[ClassComplexity] = []
    for record in classes:
        start = record.line - 1
        if start < 0 or start >= len(lines):
            continue
        body = _indented_body(lines, start) if support.blocks == "indent" else _braced_body(lines, start)
        end = record.line + len(body) - 1
        results.append(
            ClassComplexity(
                path=path,
                name=record.name,
                line=record.line,
                complexity=score("\n".join(body), language),
                line_count=len(body),
                methods=sum(1 for func in functions if record.line < func.line <= end),
            )
        )
    return tuple(results)


def summarize(
    files: Sequence[FileMetadata],
    functions: Sequence[FunctionComplexity] = (),
    maintainability: Optional[Mapping[str, float]] = None,
    thresholds: ComplexityThresholds = DEFAULT_THRESHOLDS,
    classes: Sequence[ClassComplexity] = (),
    file_scores: Sequence[FileComplexity] = (),
) -> ComplexityReport:
    """Aggregate per-file scores into bands, hotspots and a risk level."""
    code_files = [meta for meta in files if get_support(meta.language) is not None]
    total = sum(meta.complexity for meta in code_files)
    average = round(total / len(code_files), 2) if code_files else 0.0

    bands: Dict[str, str] = {meta.path: band(meta.complexity, thresholds) for meta in code_files}

    hotspots: List[Hotspot] = []
    for meta in code_files:
        if meta.complexity > thresholds.file_hotspot:
            severity = "high" if meta.complexity > thresholds.file_hotspot_high else "medium"
            hotspots.append(
                Hotspot(
                    kind="file",
                    name=meta.filename,
                    complexity=meta.complexity,
                    severity=severity,
                    path=meta.path,
                )
            )
    for func in functions:
        if func.complexity > thresholds.function_hotspot:
            severity = "high" if func.complexity > thresholds.function_hotspot_high else "medium"
            hotspots.append(
                Hotspot(
                    kind="function",
                    name=func.name,
                    complexity=func.complexity,
                    severity=severity,
                    path=func.path,
                )
            )
    hotspots.sort(key=lambda item: item.complexity, reverse=True)

    return ComplexityReport(
        total=total,
        average=average,
        risk=risk_level(total),
        bands=bands,
        maintainability=dict(maintainability or {}),
        hotspots=tuple(hotspots),
        functions=tuple(functions),
        classes=tuple(classes),
        files=tuple(file_scores),
        cognitive_total=sum(item.cognitive for item in file_scores),
    )


__all__ = [
    "DEFAULT_THRESHOLDS",
    "ComplexityThresholds",
    "band",
    "cognitive_score",
    "count_code_lines",
    "maintainability_index",
    "max_nesting",
    "risk_level",
    "score",
    "score_classes",
    "score_functions",
    "summarize",
]
