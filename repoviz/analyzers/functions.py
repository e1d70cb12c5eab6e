"""Function and class extraction dispatched through the language registry."""

from __future__ import annotations

from typing import Optional, Tuple

from ..models import ClassRecord, FunctionRecord
from .function_rules import class_definitions
from .registry import get_support


def extract_functions(content: str, language: Optional[str]) -> Tuple[FunctionRecord, ...]:
    """Return function records in line order; duplicates per line are preserved."""
    support = get_support(language)
    if support is None or not content:
        return ()
    return support.functions(content.split("\n"))


def extract_classes(content: str, language: Optional[str]) -> Tuple[ClassRecord, ...]:
    support = get_support(language)
    if support is None or not content:
        return ()
    return class_definitions(content.split("\n"), support.tag)


__all__ = ["extract_classes", "extract_functions"]
