"""Tests for repoviz.analyzers.normalizer."""

from __future__ import annotations

from repoviz.analyzers.normalizer import strip_noise


def test_strip_noise_removes_line_and_block_comments() -> None:
    source = "let a = 1; // if this\n/* while (x) {\n} */ let b = 2;"

    cleaned = strip_noise(source, "javascript")

    assert "if" not in cleaned
    assert "while" not in cleaned
    assert "let a = 1;" in cleaned
    assert "let b = 2;" in cleaned


def test_strip_noise_empties_strings_but_keeps_quotes() -> None:
    cleaned = strip_noise("x = \"if\" + 'else' + `for ${y}`;", "javascript")

    assert cleaned == "x = \"\" + '' + ``;"


def test_strip_noise_handles_escaped_quotes() -> None:
    cleaned = strip_noise('s = "say \\"if\\" now"; t = 1', "javascript")

    assert cleaned == 's = ""; t = 1'


def test_strip_noise_uses_hash_comments_for_python() -> None:
    cleaned = strip_noise("value = 1  # if not cached\n", "python")

    assert cleaned == "value = 1  \n"


def test_strip_noise_leaves_comments_for_unknown_languages() -> None:
    cleaned = strip_noise("// note 'quoted'", None)

    assert cleaned == "// note ''"


def test_strip_noise_of_empty_content_is_empty() -> None:
    assert strip_noise("", "python") == ""
