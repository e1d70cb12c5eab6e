"""Capability bundles describing how each language is analysed."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Sequence, Tuple

from ..models import FunctionRecord

ImportRule = Callable[[Sequence[str]], Tuple[str, ...]]
FunctionRule = Callable[[Sequence[str]], Tuple[FunctionRecord, ...]]

BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
SLASH_COMMENT = re.compile(r"//.*$", re.MULTILINE)
HASH_COMMENT = re.compile(r"#.*$", re.MULTILINE)
SLASH_OR_HASH_COMMENT = re.compile(r"(?://|#).*$", re.MULTILINE)


@dataclass(frozen=True)
class CommentSyntax:
    """Comment markers stripped before counting keywords."""

    line: Optional[Pattern[str]] = None
    block: Optional[Pattern[str]] = None
    line_prefixes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LanguageSupport:
    """Everything the pipeline needs to analyse one language.

    ``blocks`` is ``"braces"`` for C-like languages and ``"indent"`` for
    languages whose bodies are delimited by indentation or ``end`` keywords.
    ``resolution`` selects how import identifiers map onto repository files.
    """

    tag: str
    imports: ImportRule
    functions: FunctionRule
    comments: CommentSyntax
    keywords: Tuple[str, ...]
    blocks: str = "braces"
    resolution: str = "relative"
    extensions: Tuple[str, ...] = ()


__all__ = [
    "BLOCK_COMMENT",
    "CommentSyntax",
    "FunctionRule",
    "HASH_COMMENT",
    "ImportRule",
    "LanguageSupport",
    "SLASH_COMMENT",
    "SLASH_OR_HASH_COMMENT",
]
