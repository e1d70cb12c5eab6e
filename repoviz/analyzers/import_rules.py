"""Per-language regular expressions that pull dependency identifiers out of source lines.

Every rule set receives the raw (non-normalised) lines of a file and returns
the identifiers it matched, in discovery order. Duplicates are removed later by
:func:`repoviz.analyzers.imports.extract_imports`. Because the rules run on raw
text, an ``import`` inside a string or comment can produce a false positive.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

_JS_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"import\s+.*?\s+from\s+['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"import\s+['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"require\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*\)"),
    re.compile(r"import\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*\)"),
    re.compile(r"export\s+(?:\*|\{[^}]*\}|\*\s+as\s+\w+)\s*from\s+['\"`]([^'\"`]+)['\"`]"),
)

_PY_IMPORT = re.compile(r"^import\s+([^#]+)")
_PY_FROM = re.compile(r"^from\s+([^\s#]+)\s+import\b")

_JAVA_IMPORT = re.compile(r"^import\s+(?:static\s+)?([^;]+);")
_CSHARP_USING = re.compile(r"^(?:global\s+)?using\s+(?:static\s+)?(?:\w+\s*=\s*)?([\w.]+)\s*;")

_GO_SINGLE = re.compile(r"^import\s+(?:[\w.]+\s+)?['\"`]([^'\"`]+)['\"`]")
_GO_QUOTED = re.compile(r"['\"`]([^'\"`]+)['\"`]")
_GO_BLOCK_OPEN = re.compile(r"^import\s*\($")

_RUST_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^(?:pub(?:\([^)]*\))?\s+)?use\s+([^;]+);"),
    re.compile(r"^extern\s+crate\s+([^;]+);"),
)

_PHP_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^use\s+([^;]+);"),
    re.compile(r"^require(?:_once)?\s*\(?\s*['\"`]([^'\"`]+)['\"`]\s*\)?\s*;"),
    re.compile(r"^include(?:_once)?\s*\(?\s*['\"`]([^'\"`]+)['\"`]\s*\)?\s*;"),
)

_RUBY_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^require\s+['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"^require_relative\s+['\"`]([^'\"`]+)['\"`]"),
    re.compile(r"^load\s+['\"`]([^'\"`]+)['\"`]"),
)

_C_INCLUDE = re.compile(r"^#\s*include\s*[<\"]([^>\"]+)[>\"]")


def _scan_all(lines: Sequence[str], patterns: Sequence[Pattern[str]]) -> Tuple[str, ...]:
    # every occurrence on every line
    return tuple(
        match.group(1)
        for line in lines
        for pattern in patterns
        for match in pattern.finditer(line)
    )


def _scan_trimmed(lines: Sequence[str], patterns: Sequence[Pattern[str]]) -> Tuple[str, ...]:
    # first occurrence per pattern on each stripped line
    found: List[str] = []
    for line in lines:
        trimmed = line.strip()
        for pattern in patterns:
            match = pattern.match(trimmed)
            if match:
                found.append(match.group(1).strip())
    return tuple(found)


def javascript_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_all(lines, _JS_PATTERNS)


def python_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    found: List[str] = []
    for line in lines:
        trimmed = line.strip()
        match = _PY_FROM.match(trimmed)
        if match:
            found.append(match.group(1))
            continue
        match = _PY_IMPORT.match(trimmed)
        if match:
            found.extend(_split_python_names(match.group(1)))
    return tuple(found)


def _split_python_names(clause: str) -> Iterable[str]:
    for part in clause.split(","):
        name = part.strip().split(" ")[0].strip("()")
        if name:
            yield name


def java_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_trimmed(lines, (_JAVA_IMPORT,))


def csharp_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_trimmed(lines, (_CSHARP_USING,))


class GoImportState(Enum):
    """States of the Go import scanner."""

    OUTSIDE_IMPORT_BLOCK = "outside"
    INSIDE_IMPORT_BLOCK = "inside"


class GoImportScanner:
    """Two-state machine that follows ``import ( ... )`` groups line by line."""

    def __init__(self) -> None:
        self.state = GoImportState.OUTSIDE_IMPORT_BLOCK

    def feed(self, line: str) -> Optional[str]:
        """Advance on one line and return the import path it declares, if any."""
        trimmed = line.strip()
        if self.state is GoImportState.OUTSIDE_IMPORT_BLOCK:
            if _GO_BLOCK_OPEN.match(trimmed):
                self.state = GoImportState.INSIDE_IMPORT_BLOCK
                return None
            match = _GO_SINGLE.match(trimmed)
            return match.group(1) if match else None

        if trimmed == ")":
            self.state = GoImportState.OUTSIDE_IMPORT_BLOCK
            return None
        match = _GO_QUOTED.search(trimmed)
        return match.group(1) if match else None


def go_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    scanner = GoImportScanner()
    return tuple(path for path in (scanner.feed(line) for line in lines) if path)


def rust_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_trimmed(lines, _RUST_PATTERNS)


def php_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_trimmed(lines, _PHP_PATTERNS)


def ruby_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_trimmed(lines, _RUBY_PATTERNS)


def c_imports(lines: Sequence[str]) -> Tuple[str, ...]:
    return _scan_trimmed(lines, (_C_INCLUDE,))


__all__ = [
    "GoImportScanner",
    "GoImportState",
    "c_imports",
    "csharp_imports",
    "go_imports",
    "java_imports",
    "javascript_imports",
    "php_imports",
    "python_imports",
    "ruby_imports",
    "rust_imports",
]
