"""Load TextMate JSON grammar files and build lexers from them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pygments.lexer import Lexer, RegexLexer

from hlfilter.errors import GrammarError
from hlfilter.grammar.compiler import compile_grammar, make_lexer_class
from hlfilter.lang import LEXER_OPTIONS, normalize_language

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grammar:
    """A loaded grammar and the lexer class compiled from it."""
    name: str
    scope_name: str
    lexer_class: type[RegexLexer]
    aliases: tuple[str, ...] = ()
    path: Path | None = field(default=None, compare=False)

    @property
    def names(self) -> tuple[str, ...]:
        """Every language name the grammar answers to, primary name first."""
        return (self.name,) + self.aliases

    def make_lexer(self) -> Lexer:
        return self.lexer_class(**LEXER_OPTIONS)


def load_grammar(path: str | Path) -> Grammar:
    """Read and compile the TextMate grammar at *path*.

    Raises GrammarError if the file cannot be read, is not JSON, or is not
    a grammar.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise GrammarError(f"Cannot read grammar file {p}: {exc.strerror or exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GrammarError(f"Grammar file {p} is not valid JSON: {exc}") from exc

    grammar = parse_grammar(data, source=str(p))
    logger.debug("Loaded grammar %s (%s) from %s", grammar.name, grammar.scope_name, p)
    return Grammar(
        name=grammar.name,
        scope_name=grammar.scope_name,
        lexer_class=grammar.lexer_class,
        aliases=grammar.aliases,
        path=p,
    )


def parse_grammar(data: Any, source: str = "<grammar>") -> Grammar:
    """Validate and compile an already-decoded grammar document."""
    if not isinstance(data, dict):
        raise GrammarError(f"{source}: grammar must be a JSON object")
    if not isinstance(data.get("patterns"), list):
        raise GrammarError(f"{source}: grammar has no 'patterns' list")

    scope_name = data.get("scopeName") or ""
    if not isinstance(scope_name, str):
        raise GrammarError(f"{source}: 'scopeName' must be a string")
    scope_tail = scope_name.rsplit(".", 1)[-1] if scope_name else ""

    raw_name = data.get("name")
    primary = normalize_language(raw_name) if isinstance(raw_name, str) else ""
    primary = primary or normalize_language(scope_tail)
    if not primary:
        raise GrammarError(f"{source}: grammar has neither 'name' nor 'scopeName'")

    aliases: list[str] = []
    for alias in [scope_tail, *(data.get("aliases") or [])]:
        if not isinstance(alias, str):
            continue
        key = normalize_language(alias)
        if key and key != primary and key not in aliases:
            aliases.append(key)

    filenames = [
        f"*.{ext.lstrip('.')}" for ext in data.get("fileTypes") or [] if isinstance(ext, str)
    ]

    tokens = compile_grammar(data, source)
    lexer_class = make_lexer_class(
        raw_name if isinstance(raw_name, str) and raw_name else primary,
        tokens,
        aliases=[primary, *aliases],
        filenames=filenames,
    )
    return Grammar(
        name=primary,
        scope_name=scope_name,
        lexer_class=lexer_class,
        aliases=tuple(aliases),
    )
