"""Core data models shared across repoviz components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

WILDCARD = "*"


@dataclass(frozen=True)
class SourceFile:
    """Already-fetched file content handed to the analysis core."""

    path: str
    content: str
    size: Optional[int] = None


@dataclass(frozen=True)
class FunctionRecord:
    """A function or method definition located in a source file."""

    name: str
    line: int
    kind: str = "function"
    indent: Optional[int] = None


@dataclass(frozen=True)
class ClassRecord:
    """A class-like type definition (class, struct, interface, trait, module)."""

    name: str
    line: int
    kind: str = "class"


@dataclass(frozen=True)
class ManifestDeclarations:
    """Uniform view of the dependencies declared by one manifest file."""

    path: str
    ecosystem: str
    name: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)

    def names(self) -> Tuple[str, ...]:
        """Return every declared package name, runtime first."""
        ordered = list(self.dependencies)
        ordered.extend(name for name in self.dev_dependencies if name not in self.dependencies)
        return tuple(ordered)


@dataclass(frozen=True)
class FileMetadata:
    """Read-only analysis record for a single file."""

    filename: str
    path: str
    extension: str
    language: Optional[str]
    line_count: int
    byte_size: int
    is_empty: bool
    imports: frozenset[str] = frozenset()
    functions: Tuple[FunctionRecord, ...] = ()
    complexity: int = 1
    complexity_weight: float = 1.0
    manifest: Optional[ManifestDeclarations] = None


@dataclass(frozen=True)
class LanguageStats:
    """Per-language totals over a set of analysed files."""

    file_count: int
    total_lines: int
    total_size: int
    percentage: float


@dataclass(frozen=True)
class FunctionComplexity:
    """Complexity of one function body."""

    path: str
    name: str
    line: int
    complexity: int
    line_count: int


@dataclass(frozen=True)
class ClassComplexity:
    """Complexity of one class body and the number of methods inside it."""

    path: str
    name: str
    line: int
    complexity: int
    line_count: int
    methods: int


@dataclass(frozen=True)
class FileComplexity:
    """Per-file scores beyond the cyclomatic estimate."""

    path: str
    cognitive: int
    max_nesting: int


@dataclass(frozen=True)
class Hotspot:
    """A file or function whose complexity crosses the hotspot threshold."""

    kind: str
    name: str
    complexity: int
    severity: str
    path: str


@dataclass(frozen=True)
class ComplexityReport:
    """Repository-level complexity summary."""

    total: int
    average: float
    risk: str
    bands: Dict[str, str]
    maintainability: Dict[str, float]
    hotspots: Tuple[Hotspot, ...]
    functions: Tuple[FunctionComplexity, ...] = ()
    classes: Tuple[ClassComplexity, ...] = ()
    files: Tuple[FileComplexity, ...] = ()
    cognitive_total: int = 0


@dataclass(frozen=True)
class FileFailure:
    """A file whose analysis raised; the rest of the batch still completes."""

    path: str
    error: str


def file_metadata_to_dict(meta: FileMetadata) -> Dict[str, Any]:
    """Serialise a FileMetadata record into JSON-friendly primitives."""
    payload: Dict[str, Any] = {
        "filename": meta.filename,
        "path": meta.path,
        "extension": meta.extension,
        "language": meta.language,
        "lineCount": meta.line_count,
        "byteSize": meta.byte_size,
        "isEmpty": meta.is_empty,
        "imports": sorted(meta.imports),
        "functions": [_function_to_dict(func) for func in meta.functions],
        "complexity": meta.complexity,
        "complexityWeight": meta.complexity_weight,
    }
    if meta.manifest is not None:
        payload["manifest"] = {
            "path": meta.manifest.path,
            "ecosystem": meta.manifest.ecosystem,
            "name": meta.manifest.name,
            "dependencies": dict(meta.manifest.dependencies),
            "devDependencies": dict(meta.manifest.dev_dependencies),
        }
    return payload


def file_metadata_from_dict(payload: object) -> Optional[FileMetadata]:
    """Rebuild a FileMetadata record; return None for malformed payloads."""
    if not isinstance(payload, dict):
        return None
    path = payload.get("path")
    filename = payload.get("filename")
    if not isinstance(path, str) or not isinstance(filename, str):
        return None

    functions = []
    for raw in payload.get("functions") or []:
        if not isinstance(raw, dict):
            continue
        name = raw.get("name")
        line = raw.get("line")
        if not isinstance(name, str) or not isinstance(line, int):
            continue
        indent = raw.get("indent")
        functions.append(
            FunctionRecord(
                name=name,
                line=line,
                kind=str(raw.get("kind") or "function"),
                indent=indent if isinstance(indent, int) else None,
            )
        )

    manifest = None
    raw_manifest = payload.get("manifest")
    if isinstance(raw_manifest, dict):
        manifest = ManifestDeclarations(
            path=str(raw_manifest.get("path") or path),
            ecosystem=str(raw_manifest.get("ecosystem") or ""),
            name=raw_manifest.get("name") if isinstance(raw_manifest.get("name"), str) else None,
            dependencies=_str_map(raw_manifest.get("dependencies")),
            dev_dependencies=_str_map(raw_manifest.get("devDependencies")),
        )

    imports = payload.get("imports") or []
    language = payload.get("language")
    try:
        return FileMetadata(
            filename=filename,
            path=path,
            extension=str(payload.get("extension") or ""),
            language=language if isinstance(language, str) else None,
            line_count=int(payload.get("lineCount") or 0),
            byte_size=int(payload.get("byteSize") or 0),
            is_empty=bool(payload.get("isEmpty")),
            imports=frozenset(str(item) for item in imports if isinstance(item, str)),
            functions=tuple(functions),
            complexity=int(payload.get("complexity") or 1),
            complexity_weight=float(payload.get("complexityWeight") or 1.0),
            manifest=manifest,
        )
    except (TypeError, ValueError):
        return None


def _function_to_dict(func: FunctionRecord) -> Dict[str, Any]:
    data: Dict[str, Any] = {"name": func.name, "line": func.line, "kind": func.kind}
    if func.indent is not None:
        data["indent"] = func.indent
    return data


def _str_map(value: object) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items()}


__all__ = [
    "WILDCARD",
    "ClassComplexity",
    "ClassRecord",
    "ComplexityReport",
    "FileComplexity",
    "FileFailure",
    "FileMetadata",
    "FunctionComplexity",
    "FunctionRecord",
    "Hotspot",
    "LanguageStats",
    "ManifestDeclarations",
    "SourceFile",
    "file_metadata_from_dict",
    "file_metadata_to_dict",
]
