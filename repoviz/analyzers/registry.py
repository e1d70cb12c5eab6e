"""Registry of per-language capability bundles.

The table is built once at import time and never mutated, so it can be shared
freely across threads analysing different files.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from . import function_rules, import_rules
from .base import (
    BLOCK_COMMENT,
    HASH_COMMENT,
    SLASH_COMMENT,
    SLASH_OR_HASH_COMMENT,
    CommentSyntax,
    LanguageSupport,
)

_C_STYLE = CommentSyntax(line=SLASH_COMMENT, block=BLOCK_COMMENT, line_prefixes=("//",))
_HASH_STYLE = CommentSyntax(line=HASH_COMMENT, line_prefixes=("#",))
_PHP_STYLE = CommentSyntax(
    line=SLASH_OR_HASH_COMMENT, block=BLOCK_COMMENT, line_prefixes=("//", "#")
)

_C_FAMILY_KEYWORDS: Tuple[str, ...] = (
    "if",
    "else",
    "for",
    "while",
    "do",
    "switch",
    "case",
    "catch",
    "?",
    "&&",
    "||",
)

_JS_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx")


def _build() -> Mapping[str, LanguageSupport]:
    javascript = LanguageSupport(
        tag="javascript",
        imports=import_rules.javascript_imports,
        functions=function_rules.javascript_functions,
        comments=_C_STYLE,
        keywords=_C_FAMILY_KEYWORDS,
        extensions=_JS_EXTENSIONS,
    )
    supports = (
        javascript,
        LanguageSupport(
            tag="typescript",
            imports=import_rules.javascript_imports,
            functions=function_rules.javascript_functions,
            comments=_C_STYLE,
            keywords=_C_FAMILY_KEYWORDS,
            extensions=_JS_EXTENSIONS,
        ),
        LanguageSupport(
            tag="python",
            imports=import_rules.python_imports,
            functions=function_rules.python_functions,
            comments=_HASH_STYLE,
            keywords=("if", "elif", "else", "for", "while", "try", "except", "and", "or"),
            blocks="indent",
            resolution="python",
            extensions=(".py", ".pyi"),
        ),
        LanguageSupport(
            tag="java",
            imports=import_rules.java_imports,
            functions=function_rules.java_functions,
            comments=_C_STYLE,
            keywords=_C_FAMILY_KEYWORDS,
            resolution="qualified",
            extensions=(".java",),
        ),
        LanguageSupport(
            tag="csharp",
            imports=import_rules.csharp_imports,
            functions=function_rules.csharp_functions,
            comments=_C_STYLE,
            keywords=_C_FAMILY_KEYWORDS,
            resolution="qualified",
            extensions=(".cs",),
        ),
        LanguageSupport(
            tag="go",
            imports=import_rules.go_imports,
            functions=function_rules.go_functions,
            comments=_C_STYLE,
            keywords=("if", "else", "for", "switch", "case", "select", "&&", "||"),
            extensions=(".go",),
        ),
        LanguageSupport(
            tag="rust",
            imports=import_rules.rust_imports,
            functions=function_rules.rust_functions,
            comments=_C_STYLE,
            keywords=("if", "else", "for", "while", "match", "&&", "||"),
            resolution="qualified",
            extensions=(".rs",),
        ),
        LanguageSupport(
            tag="php",
            imports=import_rules.php_imports,
            functions=function_rules.php_functions,
            comments=_PHP_STYLE,
            keywords=(
                "if",
                "else",
                "elseif",
                "for",
                "while",
                "foreach",
                "switch",
                "case",
                "catch",
                "?",
                "&&",
                "||",
            ),
            resolution="path",
            extensions=(".php",),
        ),
        LanguageSupport(
            tag="ruby",
            imports=import_rules.ruby_imports,
            functions=function_rules.ruby_functions,
            comments=_HASH_STYLE,
            keywords=("if", "elsif", "else", "for", "while", "case", "when", "rescue", "&&", "||"),
            blocks="indent",
            resolution="path",
            extensions=(".rb",),
        ),
        LanguageSupport(
            tag="cpp",
            imports=import_rules.c_imports,
            functions=function_rules.c_functions,
            comments=_C_STYLE,
            keywords=_C_FAMILY_KEYWORDS,
            resolution="path",
            extensions=(".h", ".hpp", ".hxx", ".cpp", ".cc", ".cxx"),
        ),
        LanguageSupport(
            tag="c",
            imports=import_rules.c_imports,
            functions=function_rules.c_functions,
            comments=_C_STYLE,
            keywords=tuple(keyword for keyword in _C_FAMILY_KEYWORDS if keyword != "catch"),
            resolution="path",
            extensions=(".h", ".c"),
        ),
    )
    return MappingProxyType({support.tag: support for support in supports})


_REGISTRY = _build()

DEFAULT_LANGUAGE = "javascript"


def get_support(language: Optional[str]) -> Optional[LanguageSupport]:
    """Return the capability bundle for ``language`` or None when unsupported."""
    if not language:
        return None
    return _REGISTRY.get(language)


def supported_languages() -> Tuple[str, ...]:
    """Return every language tag with a registered capability bundle."""
    return tuple(_REGISTRY)


__all__ = ["DEFAULT_LANGUAGE", "get_support", "supported_languages"]
