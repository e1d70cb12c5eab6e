"""Language classification by file name."""

from __future__ import annotations

import posixpath
from types import MappingProxyType
from typing import Optional

from .registry import get_support

LANGUAGE_MAP = MappingProxyType(
    {
        # JavaScript ecosystem
        ".js": "javascript",
        ".jsx": "javascript",
        ".mjs": "javascript",
        ".cjs": "javascript",
        ".ts": "typescript",
        ".tsx": "typescript",
        ".vue": "vue",
        ".svelte": "svelte",
        # Python
        ".py": "python",
        ".pyw": "python",
        ".pyi": "python",
        # JVM
        ".java": "java",
        ".kt": "kotlin",
        ".kts": "kotlin",
        ".scala": "scala",
        # C family
        ".c": "c",
        ".h": "c",
        ".cpp": "cpp",
        ".cxx": "cpp",
        ".cc": "cpp",
        ".hpp": "cpp",
        ".hxx": "cpp",
        ".cs": "csharp",
        # Web
        ".html": "html",
        ".htm": "html",
        ".css": "css",
        ".scss": "scss",
        ".sass": "sass",
        ".less": "less",
        # Other languages
        ".php": "php",
        ".rb": "ruby",
        ".go": "go",
        ".rs": "rust",
        ".swift": "swift",
        ".m": "objective-c",
        ".mm": "objective-c",
        # Data formats
        ".json": "json",
        ".yaml": "yaml",
        ".yml": "yaml",
        ".xml": "xml",
        ".toml": "toml",
        ".ini": "ini",
        # Documentation
        ".md": "markdown",
        ".markdown": "markdown",
        ".rst": "restructuredtext",
        ".txt": "text",
        # Shell
        ".sh": "shell",
        ".bash": "bash",
        ".zsh": "zsh",
        ".fish": "fish",
        ".ps1": "powershell",
        ".bat": "batch",
        ".cmd": "batch",
        ".sql": "sql",
        ".dockerfile": "dockerfile",
        ".env": "env",
    }
)

_SPECIAL_BASENAMES = MappingProxyType(
    {
        "dockerfile": "dockerfile",
        "makefile": "makefile",
        "jenkinsfile": "groovy",
        "vagrantfile": "ruby",
    }
)

LANGUAGE_COMPLEXITY = MappingProxyType(
    {
        "c": 1.0,
        "cpp": 1.2,
        "java": 1.1,
        "csharp": 1.1,
        "javascript": 0.8,
        "typescript": 0.9,
        "python": 0.7,
        "ruby": 0.7,
        "php": 0.8,
        "go": 0.9,
        "rust": 1.3,
        "swift": 1.0,
        "kotlin": 1.0,
        "scala": 1.4,
    }
)

MANIFEST_FILENAMES = frozenset({"package.json", "requirements.txt", "Cargo.toml", "pyproject.toml"})


def _basename(filename: str) -> str:
    return posixpath.basename(filename.replace("\\", "/"))


def split_extension(filename: str) -> str:
    """Return the extension of ``filename`` including the dot; dotfiles have none."""
    return posixpath.splitext(_basename(filename))[1]


def classify(filename: Optional[str]) -> Optional[str]:
    """Map a file name (with or without directories) to a language tag."""
    if not filename:
        return None

    basename = _basename(filename).lower()
    if basename.startswith(".env"):
        return "env"

    ext = split_extension(filename).lower()
    if not ext:
        return _SPECIAL_BASENAMES.get(basename)

    return LANGUAGE_MAP.get(ext)


def complexity_weight(language: Optional[str]) -> float:
    """Return the relative weight used to scale a language's complexity."""
    if language is None:
        return 1.0
    return LANGUAGE_COMPLEXITY.get(language, 1.0)


def is_code_language(language: Optional[str]) -> bool:
    return get_support(language) is not None


def is_manifest(filename: str) -> bool:
    return _basename(filename) in MANIFEST_FILENAMES


__all__ = [
    "LANGUAGE_COMPLEXITY",
    "LANGUAGE_MAP",
    "MANIFEST_FILENAMES",
    "classify",
    "complexity_weight",
    "is_code_language",
    "is_manifest",
    "split_extension",
]
