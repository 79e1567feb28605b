"""Pygments-based rendering of source code to inline-styled HTML."""

from __future__ import annotations

import logging
from typing import Iterable

from pygments import highlight as _pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from hlfilter.errors import UnknownLanguageError, UnknownThemeError
from hlfilter.grammar import Grammar
from hlfilter.lang import PLAIN_TEXT_NAMES, get_builtin_lexer, normalize_language

logger = logging.getLogger(__name__)

# Language used for code blocks that carry no class
DEFAULT_LANGUAGE = PLAIN_TEXT_NAMES[0]


class Highlighter:
    """Lexers and formatters built once, then only read while rendering."""

    def __init__(self, lexers: dict[str, Lexer], formatters: dict[str, HtmlFormatter]) -> None:
        self._lexers = dict(lexers)
        self._formatters = dict(formatters)

    @property
    def languages(self) -> list[str]:
        return sorted(self._lexers)

    @property
    def themes(self) -> list[str]:
        return sorted(self._formatters)

    def get_lexer(self, lang: str | None) -> Lexer:
        key = normalize_language(lang) if lang else DEFAULT_LANGUAGE
        lexer = self._lexers.get(key)
        if lexer is None:
            raise UnknownLanguageError(lang, self.languages)
        return lexer

    def get_formatter(self, theme: str) -> HtmlFormatter:
        formatter = self._formatters.get(theme)
        if formatter is None:
            raise UnknownThemeError(theme)
        return formatter

    def render(self, code: str, lang: str | None, theme: str) -> str:
        """Highlight *code* as *lang* in *theme* and return the HTML markup."""
        lexer = self.get_lexer(lang)
        formatter = self.get_formatter(theme)
        return _pygments_highlight(code, lexer, formatter)


def create_highlighter(
    langs: Iterable[str | Grammar],
    themes: Iterable[str],
) -> Highlighter:
    """Build a Highlighter for built-in language names, loaded grammars and themes.

    Raises UnknownLanguageError / UnknownThemeError for names Pygments does
    not know, so configuration mistakes surface before any input is read.
    """
    lexers: dict[str, Lexer] = {}

    plain = get_builtin_lexer(DEFAULT_LANGUAGE)
    for name in PLAIN_TEXT_NAMES:
        lexers[name] = plain

    for lang in langs:
        if isinstance(lang, Grammar):
            lexer = lang.make_lexer()
            for name in lang.names:
                lexers[name] = lexer
            logger.debug("Registered grammar %s as %s", lang.scope_name, ", ".join(lang.names))
        else:
            lexer = get_builtin_lexer(lang)
            lexers[normalize_language(lang)] = lexer
            # Pygments aliases (shell -> bash, sh, zsh) never shadow a loaded grammar
            for alias in type(lexer).aliases:
                lexers.setdefault(normalize_language(alias), lexer)
            logger.debug("Registered built-in language %s (%s)", lang, ", ".join(type(lexer).aliases))

    formatters = {theme: _make_formatter(theme) for theme in themes}
    return Highlighter(lexers, formatters)


def _make_formatter(theme: str) -> HtmlFormatter:
    try:
        style = get_style_by_name(theme)
    except ClassNotFound as exc:
        raise UnknownThemeError(theme) from exc
    return HtmlFormatter(
        style=style,
        noclasses=True,
        wrapcode=True,
        cssclass=f"highlight {theme}",
    )
