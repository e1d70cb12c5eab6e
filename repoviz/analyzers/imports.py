"""Import extraction dispatched through the language registry."""

from __future__ import annotations

from typing import Optional

from .registry import get_support


def extract_imports(content: str, language: Optional[str]) -> frozenset[str]:
    """Return the set of module identifiers imported by ``content``.

    Unsupported languages and empty content yield an empty set. Statements the
    rule set does not recognise are skipped silently.
    """
    support = get_support(language)
    if support is None or not content:
        return frozenset()
    return frozenset(support.imports(content.split("\n")))


__all__ = ["extract_imports"]
