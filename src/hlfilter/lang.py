"""Built-in language resolution through the Pygments lexer registry."""

from __future__ import annotations

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from hlfilter.errors import UnknownLanguageError


# Names that resolve without consulting the registry
PLAIN_TEXT_NAMES = ("text", "plaintext", "txt", "plain")

LEXER_MAP = {name: TextLexer for name in PLAIN_TEXT_NAMES}

# Source is passed through as written, leading blank lines included
LEXER_OPTIONS = {"stripnl": False}


def normalize_language(name: str) -> str:
    """Canonical lookup key for a language name or alias."""
    return name.strip().lower()


def get_builtin_lexer(name: str) -> Lexer:
    """Instantiate the Pygments lexer registered under *name*."""
    key = normalize_language(name)
    lexer_cls = LEXER_MAP.get(key)
    if lexer_cls is not None:
        return lexer_cls(**LEXER_OPTIONS)
    try:
        return get_lexer_by_name(key, **LEXER_OPTIONS)
    except ClassNotFound as exc:
        raise UnknownLanguageError(name) from exc
