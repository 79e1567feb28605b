"""Tests for built-in language resolution — no mocking needed."""

import pytest
from pygments.lexers import BashLexer, PythonLexer, TextLexer

from hlfilter.errors import UnknownLanguageError
from hlfilter.lang import LEXER_MAP, PLAIN_TEXT_NAMES, get_builtin_lexer, normalize_language


class TestNormalizeLanguage:
    def test_lowercases(self):
        assert normalize_language("Shell") == "shell"

    def test_strips_whitespace(self):
        assert normalize_language("  python ") == "python"


class TestGetBuiltinLexer:
    def test_shell_is_bash(self):
        assert isinstance(get_builtin_lexer("shell"), BashLexer)

    def test_python(self):
        assert isinstance(get_builtin_lexer("python"), PythonLexer)

    def test_case_insensitive(self):
        assert isinstance(get_builtin_lexer("SHELL"), BashLexer)

    def test_plain_text_names(self):
        for name in PLAIN_TEXT_NAMES:
            assert isinstance(get_builtin_lexer(name), TextLexer)

    def test_keeps_leading_newlines(self):
        assert get_builtin_lexer("shell").stripnl is False

    def test_unknown_raises(self):
        with pytest.raises(UnknownLanguageError) as excinfo:
            get_builtin_lexer("brainfuck_nonexistent_xyz")
        assert excinfo.value.name == "brainfuck_nonexistent_xyz"
        assert "brainfuck_nonexistent_xyz" in str(excinfo.value)


class TestLexerMap:
    def test_has_plain_text_names(self):
        assert set(LEXER_MAP) == set(PLAIN_TEXT_NAMES)

    def test_all_plain_text(self):
        assert all(cls is TextLexer for cls in LEXER_MAP.values())
