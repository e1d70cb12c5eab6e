"""Comment and string-literal stripping ahead of keyword counting.

This is a lexical approximation rather than a tokenizer. Known limitations:

* line comments are removed before strings, so ``"http://host"`` loses its
  tail and ``'#'`` in Python truncates the line;
* nested block comments are not tracked (the first ``*/`` closes the comment);
* quotes inside regular-expression literals can pair with unrelated quotes;
* raw and multi-line string forms are only handled where the generic quote
  patterns happen to match them.
"""

from __future__ import annotations

import re
from typing import Optional

from .registry import get_support

_DOUBLE_QUOTED = re.compile(r'"[^"\\]*(?:\\.[^"\\]*)*"')
_SINGLE_QUOTED = re.compile(r"'[^'\\]*(?:\\.[^'\\]*)*'")
_BACKTICK_QUOTED = re.compile(r"`[^`\\]*(?:\\.[^`\\]*)*`")


def strip_noise(content: str, language: Optional[str]) -> str:
    """Remove comments and empty out string literals, keeping their delimiters."""
    if not content:
        return ""

    cleaned = content
    support = get_support(language)
    if support is not None:
        if support.comments.line is not None:
            cleaned = support.comments.line.sub("", cleaned)
        if support.comments.block is not None:
            cleaned = support.comments.block.sub("", cleaned)

    cleaned = _DOUBLE_QUOTED.sub('""', cleaned)
    cleaned = _SINGLE_QUOTED.sub("''", cleaned)
    cleaned = _BACKTICK_QUOTED.sub("``", cleaned)
    return cleaned


__all__ = ["strip_noise"]
