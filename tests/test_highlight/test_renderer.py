"""Tests for the highlighter — uses real Pygments highlighting."""

import pytest
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer

from hlfilter.config import DEFAULT_THEME
from hlfilter.errors import UnknownLanguageError, UnknownThemeError
from hlfilter.grammar import parse_grammar
from hlfilter.highlight import Highlighter, create_highlighter


# ---------------------------------------------------------------------------
# create_highlighter — one-time initialization
# ---------------------------------------------------------------------------
class TestCreateHighlighter:
    def test_registers_builtin_grammar_and_plain_text(self, highlighter):
        for name in ("shell", "janet", "jdn", "text", "plaintext"):
            assert name in highlighter.languages
        assert highlighter.themes == [DEFAULT_THEME]

    def test_unknown_builtin_fails_at_creation(self):
        with pytest.raises(UnknownLanguageError):
            create_highlighter(["brainfuck_nonexistent_xyz"], [DEFAULT_THEME])

    def test_unknown_theme_fails_at_creation(self):
        with pytest.raises(UnknownThemeError, match="no-such-theme"):
            create_highlighter(["shell"], ["no-such-theme"])

    def test_grammar_aliases_share_one_lexer(self, highlighter):
        assert highlighter.get_lexer("janet") is highlighter.get_lexer("jdn")

    def test_lookup_is_case_insensitive(self, highlighter):
        assert highlighter.get_lexer("Shell") is highlighter.get_lexer("shell")

    def test_builtin_aliases_share_one_lexer(self, highlighter):
        for alias in ("bash", "sh", "zsh"):
            assert highlighter.get_lexer(alias) is highlighter.get_lexer("shell")

    def test_builtin_alias_does_not_shadow_grammar(self):
        grammar = parse_grammar({"name": "sh", "scopeName": "source.sh", "patterns": []})
        hl = create_highlighter([grammar, "shell"], [DEFAULT_THEME])
        assert hl.get_lexer("sh") is not hl.get_lexer("shell")
        assert hl.get_lexer("bash") is hl.get_lexer("shell")


# ---------------------------------------------------------------------------
# Highlighter.render
# ---------------------------------------------------------------------------
class TestRender:
    def test_shell_produces_html(self, highlighter):
        html = highlighter.render("echo hi", "shell", DEFAULT_THEME)
        assert html.startswith('<div class="highlight solarized-light"')
        assert "<span" in html
        assert "echo" in html
        assert "<code>" in html

    def test_bash_alias_produces_html(self, highlighter):
        html = highlighter.render("echo hi", "bash", DEFAULT_THEME)
        assert "echo" in html
        assert html.startswith("<div")

    def test_inline_styles(self, highlighter):
        html = highlighter.render("echo hi", "shell", DEFAULT_THEME)
        assert 'style="' in html
        assert "class=\"nb\"" not in html

    def test_janet_produces_html(self, highlighter):
        html = highlighter.render('(def x "hi")', "janet", DEFAULT_THEME)
        assert "<span" in html
        assert "def" in html

    def test_no_language_is_plain_text(self, highlighter):
        html = highlighter.render("a < b", None, DEFAULT_THEME)
        assert "a &lt; b" in html

    def test_unknown_language_raises(self, highlighter):
        with pytest.raises(UnknownLanguageError) as excinfo:
            highlighter.render("x", "cobol_nonexistent", DEFAULT_THEME)
        assert "cobol_nonexistent" in str(excinfo.value)
        assert "shell" in str(excinfo.value)

    def test_theme_not_loaded_raises(self, highlighter):
        with pytest.raises(UnknownThemeError):
            highlighter.render("echo hi", "shell", "monokai")

    def test_deterministic(self, highlighter):
        first = highlighter.render("for f in *; do echo $f; done", "shell", DEFAULT_THEME)
        second = highlighter.render("for f in *; do echo $f; done", "shell", DEFAULT_THEME)
        assert first == second

    def test_second_theme(self):
        hl = create_highlighter(["shell"], [DEFAULT_THEME, "monokai"])
        light = hl.render("echo hi", "shell", DEFAULT_THEME)
        dark = hl.render("echo hi", "shell", "monokai")
        assert light != dark
        assert 'class="highlight monokai"' in dark


# ---------------------------------------------------------------------------
# Highlighter — constructed directly
# ---------------------------------------------------------------------------
class TestHighlighterDirect:
    def test_render_uses_given_objects(self):
        hl = Highlighter({"text": TextLexer()}, {"plain": HtmlFormatter(nowrap=True)})
        assert hl.render("hello", "text", "plain") == "hello\n"

    def test_empty_highlighter_has_no_languages(self):
        hl = Highlighter({}, {})
        assert hl.languages == []
        with pytest.raises(UnknownLanguageError):
            hl.render("x", None, "plain")
