"""Per-language regular expressions that locate function and method definitions.

Each rule set matches physical lines of the original text, so line numbers stay
1-based and human-navigable. Every textual match becomes one record: a line
matched by two candidate patterns yields two records, and overloaded methods
are kept as separate entries.
"""

from __future__ import annotations

import re
from typing import Dict, List, Pattern, Sequence, Tuple

from ..models import ClassRecord, FunctionRecord

CONTROL_KEYWORDS = frozenset(
    {
        "if",
        "else",
        "for",
        "foreach",
        "while",
        "do",
        "switch",
        "try",
        "catch",
        "using",
        "lock",
        "return",
        "sizeof",
        "synchronized",
        "fixed",
    }
)

_IDENT = r"[a-zA-Z_$][a-zA-Z0-9_$]*"

_JS_PATTERNS: Tuple[Tuple[Pattern[str], bool], ...] = (
    (re.compile(rf"\bfunction(?:\s*\*\s*|\s+)({_IDENT})\s*\("), False),
    (
        re.compile(
            rf"(?:const\s+|let\s+|var\s+)?({_IDENT})\s*[=:]\s*(?:async\s+)?(?:function|\([^)]*\)\s*=>)"
        ),
        False,
    ),
    (re.compile(rf"^(?:async\s+)?(?:static\s+)?({_IDENT})\s*\([^)]*\)\s*\{{"), True),
    (re.compile(rf"({_IDENT})\s*:\s*(?:async\s+)?function"), False),
)

_PY_DEF = re.compile(r"^(\s*)(?:async\s+)?def\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\(")
_RUBY_DEF = re.compile(r"^(\s*)def\s+(?:self\.)?([a-zA-Z_][a-zA-Z0-9_?!=]*)")

_JAVA_METHOD = re.compile(
    r"(?:public|private|protected)?\s*(?:static)?\s*(?:\w+\s+)*(\w+)\s*\([^)]*\)\s*"
    r"(?:throws\s+\w+(?:\s*,\s*\w+)*)?\s*\{"
)
_CSHARP_METHOD = re.compile(
    r"(?:public|private|protected|internal)?\s*(?:static)?\s*(?:async)?\s*(?:\w+\s+)*(\w+)\s*\([^)]*\)\s*\{"
)
_C_FUNCTION = re.compile(r"^(?:[\w*&:<>]+\s+)*\**([a-zA-Z_][a-zA-Z0-9_:~]*)\s*\([^)]*\)\s*(?:const\s*)?\{")

_GO_FUNC = re.compile(r"^func\s+(\([^)]*\)\s+)?([a-zA-Z_][a-zA-Z0-9_]*)\s*[\[(]")
_RUST_FN = re.compile(
    r"^(?:pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?(?:extern\s+\"\w+\"\s+)?"
    r"fn\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*[<(]"
)
_PHP_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(
        r"^(?:abstract\s+|final\s+)?(?:public|private|protected)?\s*(?:static)?\s*function\s+"
        r"([a-zA-Z_][a-zA-Z0-9_]*)\s*\("
    ),
    re.compile(r"^function\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\("),
)


def javascript_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    records: List[FunctionRecord] = []
    for number, line in enumerate(lines, start=1):
        trimmed = line.strip()
        for pattern, check_control in _JS_PATTERNS:
            match = pattern.search(trimmed)
            if not match:
                continue
            name = match.group(1)
            if check_control and name in CONTROL_KEYWORDS:
                continue
            records.append(FunctionRecord(name=name, line=number, kind="function"))
    return tuple(records)


def python_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    return _indented(lines, _PY_DEF, "function")


def ruby_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    return _indented(lines, _RUBY_DEF, "method")


def _indented(lines: Sequence[str], pattern: Pattern[str], kind: str) -> Tuple[FunctionRecord, ...]:
    records: List[FunctionRecord] = []
    for number, line in enumerate(lines, start=1):
        match = pattern.match(line)
        if match:
            records.append(
                FunctionRecord(
                    name=match.group(2),
                    line=number,
                    kind=kind,
                    indent=len(match.group(1)),
                )
            )
    return tuple(records)


def java_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    return _brace_based(lines, _JAVA_METHOD, "method")


def csharp_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    return _brace_based(lines, _CSHARP_METHOD, "method")


def c_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    return _brace_based(lines, _C_FUNCTION, "function", anchored=True)


def _brace_based(
    lines: Sequence[str], pattern: Pattern[str], kind: str, *, anchored: bool = False
) -> Tuple[FunctionRecord, ...]:
    records: List[FunctionRecord] = []
    for number, line in enumerate(lines, start=1):
        trimmed = line.strip()
        match = pattern.match(trimmed) if anchored else pattern.search(trimmed)
        if not match:
            continue
        name = match.group(1)
        # a control statement's opening brace looks just like a definition
        if name in CONTROL_KEYWORDS:
            continue
        records.append(FunctionRecord(name=name, line=number, kind=kind))
    return tuple(records)


def go_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    records: List[FunctionRecord] = []
    for number, line in enumerate(lines, start=1):
        match = _GO_FUNC.match(line.strip())
        if match:
            kind = "method" if match.group(1) else "function"
            records.append(FunctionRecord(name=match.group(2), line=number, kind=kind))
    return tuple(records)


def rust_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    records: List[FunctionRecord] = []
    for number, line in enumerate(lines, start=1):
        match = _RUST_FN.match(line.strip())
        if match:
            records.append(FunctionRecord(name=match.group(1), line=number, kind="function"))
    return tuple(records)


def php_functions(lines: Sequence[str]) -> Tuple[FunctionRecord, ...]:
    records: List[FunctionRecord] = []
    for number, line in enumerate(lines, start=1):
        trimmed = line.strip()
        for pattern in _PHP_PATTERNS:
            match = pattern.match(trimmed)
            if match:
                records.append(FunctionRecord(name=match.group(1), line=number, kind="function"))
    return tuple(records)


# Declarations ending in ";" (forward declarations, unit structs) have no body.
_CLASS_PATTERNS: Dict[str, Pattern[str]] = {
    "javascript": re.compile(
        r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?(?P<kind>class)\s+(?P<name>[a-zA-Z_$][\w$]*)"
    ),
    "python": re.compile(r"^(?P<kind>class)\s+(?P<name>[a-zA-Z_]\w*)\s*[:(]"),
    "java": re.compile(
        r"^(?:(?:public|private|protected|static|final|abstract|sealed)\s+)*"
        r"(?P<kind>class|interface|enum|record)\s+(?P<name>\w+)"
    ),
    "csharp": re.compile(
        r"^(?:(?:public|private|protected|internal|static|sealed|abstract|partial)\s+)*"
        r"(?P<kind>class|interface|struct|record|enum)\s+(?P<name>\w+)"
    ),
    "go": re.compile(r"^type\s+(?P<name>\w+)\s+(?P<kind>struct|interface)\b"),
    "rust": re.compile(
        r"^(?:pub(?:\([^)]*\))?\s+)?(?P<kind>struct|enum|trait|union)\s+(?P<name>[a-zA-Z_]\w*)"
    ),
    "php": re.compile(r"^(?:(?:abstract|final)\s+)*(?P<kind>class|interface|trait)\s+(?P<name>\w+)"),
    "ruby": re.compile(r"^(?P<kind>class|module)\s+(?P<name>[A-Z]\w*(?:::\w+)*)"),
    "cpp": re.compile(
        r"^(?:template\s*<.*>\s*)?(?P<kind>class|struct)\s+(?P<name>[a-zA-Z_]\w*)\s*(?:[:{]|$)"
    ),
    "c": re.compile(r"^(?:typedef\s+)?(?P<kind>struct)\s+(?P<name>[a-zA-Z_]\w*)\s*(?:\{|$)"),
    "typescript": re.compile(
        r"^(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?"
        r"(?P<kind>class|interface|enum)\s+(?P<name>[a-zA-Z_$][\w$]*)"
    ),
}


def class_definitions(lines: Sequence[str], language: str) -> Tuple[ClassRecord, ...]:
    """Locate class-like definitions; one record per matching line."""
    pattern = _CLASS_PATTERNS.get(language)
    if pattern is None:
        return ()
    records: List[ClassRecord] = []
    for number, line in enumerate(lines, start=1):
        trimmed = line.strip()
        match = pattern.match(trimmed)
        if match is None or trimmed.endswith(";"):
            continue
        records.append(ClassRecord(name=match.group("name"), line=number, kind=match.group("kind")))
    return tuple(records)


__all__ = [
    "CONTROL_KEYWORDS",
    "class_definitions",
    "c_functions",
    "csharp_functions",
    "go_functions",
    "java_functions",
    "javascript_functions",
    "php_functions",
    "python_functions",
    "ruby_functions",
    "rust_functions",
]
