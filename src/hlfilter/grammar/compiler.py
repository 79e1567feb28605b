"""Compile TextMate grammars into Pygments ExtendedRegexLexer token tables.

TextMate grammars describe a language as nested ``patterns``:

1. ``match`` rules colour one regex match (optionally per capture group)
2. ``begin``/``end`` rules open a region that is lexed by its own patterns
3. ``include`` rules splice in a repository entry or the whole grammar

Each region becomes a Pygments lexer state, each repository entry becomes a
state that is only ever included, and Oniguruma regex syntax is rewritten to
what Python's ``re`` accepts.
"""

from __future__ import annotations

import logging
import re
import warnings
from typing import Any, Callable, Iterator

from pygments.lexer import ExtendedRegexLexer, LexerContext, include
from pygments.token import (
    Comment,
    Error,
    Generic,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
    _TokenType,
)

from hlfilter.errors import GrammarError

logger = logging.getLogger(__name__)

ROOT_STATE = "root"
# Top-level patterns without the fallback, the target of $self includes
SELF_STATE = "grammar"
REGEX_FLAGS = re.MULTILINE

# Consumes one character that no rule of the state matched
FALLBACK_REGEX = r"[\s\S]"

# Consecutive empty matches allowed at one position before one character
# is consumed by force
MAX_EMPTY_MATCHES = 8

SCOPE_TOKENS: dict[str, _TokenType] = {
    "comment": Comment,
    "comment.line": Comment.Single,
    "comment.block": Comment.Multiline,
    "comment.block.documentation": String.Doc,
    "constant": Name.Constant,
    "constant.numeric": Number,
    "constant.numeric.integer": Number.Integer,
    "constant.numeric.float": Number.Float,
    "constant.numeric.hex": Number.Hex,
    "constant.character": String.Char,
    "constant.character.escape": String.Escape,
    "constant.language": Keyword.Constant,
    "constant.other.symbol": String.Symbol,
    "entity": Name,
    "entity.name.function": Name.Function,
    "entity.name.type": Name.Class,
    "entity.name.class": Name.Class,
    "entity.name.namespace": Name.Namespace,
    "entity.name.tag": Name.Tag,
    "entity.name.section": Generic.Heading,
    "entity.other.attribute-name": Name.Attribute,
    "entity.other.inherited-class": Name.Class,
    "invalid": Error,
    "keyword": Keyword,
    "keyword.control.import": Keyword.Namespace,
    "keyword.operator": Operator,
    "keyword.operator.word": Operator.Word,
    "markup.heading": Generic.Heading,
    "markup.bold": Generic.Strong,
    "markup.italic": Generic.Emph,
    "markup.inserted": Generic.Inserted,
    "markup.deleted": Generic.Deleted,
    "markup.raw": String.Backtick,
    "meta": Text,
    "punctuation": Punctuation,
    "punctuation.definition.comment": Comment,
    "punctuation.definition.string": String,
    "storage": Keyword,
    "storage.type": Keyword.Type,
    "storage.modifier": Keyword.Declaration,
    "string": String,
    "string.quoted.single": String.Single,
    "string.quoted.double": String.Double,
    "string.quoted.other": String.Other,
    "string.interpolated": String.Interpol,
    "string.regexp": String.Regex,
    "string.other": String.Other,
    "support": Name.Builtin,
    "support.function": Name.Builtin,
    "support.type": Keyword.Type,
    "support.class": Name.Class,
    "support.constant": Name.Constant,
    "support.variable": Name.Variable,
    "variable": Name.Variable,
    "variable.language": Name.Builtin.Pseudo,
    "variable.other.constant": Name.Constant,
}

POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": "!-/:-@\\[-`{-~",
    "space": "\\s",
    "upper": "A-Z",
    "word": "\\w",
    "xdigit": "0-9a-fA-F",
}


def scope_token(scope: str | None) -> _TokenType | None:
    """Map a TextMate scope name to a Pygments token by longest dotted prefix.

    Only the first of several space-separated scopes is used. Returns None
    for an empty scope, and Text for scopes outside the known vocabulary.
    """
    if not scope or not scope.split():
        return None
    parts = scope.split()[0].split(".")
    for n in range(len(parts), 0, -1):
        token = SCOPE_TOKENS.get(".".join(parts[:n]))
        if token is not None:
            return token
    return Text


def translate_regex(pattern: str) -> str:
    """Rewrite Oniguruma-only syntax into Python ``re`` syntax.

    Constructs with no Python equivalent are left alone so that compiling
    the result fails and the rule can be skipped.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    in_class = False

    while i < n:
        ch = pattern[i]

        if ch == "\\" and i + 1 < n:
            nxt = pattern[i + 1]
            if nxt == "h":
                out.append("0-9a-fA-F" if in_class else "[0-9a-fA-F]")
            elif nxt == "H" and not in_class:
                out.append("[^0-9a-fA-F]")
            elif nxt == "G" and not in_class:
                pass
            elif nxt == "z" and not in_class:
                out.append("\\Z")
            elif nxt == "Z" and not in_class:
                out.append("(?=\\n?\\Z)")
            elif nxt == "k" and pattern.startswith("<", i + 2):
                end = pattern.find(">", i + 3)
                if end == -1:
                    out.append(ch + nxt)
                else:
                    ref = pattern[i + 3:end]
                    out.append(f"(?:\\{ref})" if ref.isdigit() else f"(?P={ref})")
                    i = end + 1
                    continue
            elif nxt == "x" and pattern.startswith("{", i + 2):
                end = pattern.find("}", i + 3)
                try:
                    codepoint = int(pattern[i + 3:end], 16) if end != -1 else None
                except ValueError:
                    codepoint = None
                if codepoint is None:
                    out.append(ch + nxt)
                else:
                    out.append(f"\\U{codepoint:08x}")
                    i = end + 1
                    continue
            else:
                out.append(ch + nxt)
            i += 2
            continue

        if in_class:
            if ch == "[":
                if pattern.startswith("[:", i):
                    end = pattern.find(":]", i + 2)
                    name = pattern[i + 2:end] if end != -1 else ""
                    if name in POSIX_CLASSES:
                        out.append(POSIX_CLASSES[name])
                        i = end + 2
                        continue
                out.append("\\[")
            else:
                if ch == "]":
                    in_class = False
                out.append(ch)
            i += 1
            continue

        if ch == "[":
            in_class = True
            out.append(ch)
            i += 1
            if pattern.startswith("^", i):
                out.append("^")
                i += 1
            # a leading ']' is a literal in both dialects
            if pattern.startswith("]", i):
                out.append("\\]")
                i += 1
            continue

        if pattern.startswith("(?<", i) and not pattern.startswith(("(?<=", "(?<!"), i):
            out.append("(?P<")
            i += 3
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def split_captures(
    match: re.Match, default: _TokenType, captures: dict[int, _TokenType]
) -> Iterator[tuple[int, _TokenType, str]]:
    """Split a match into token runs by capture group.

    Unlike ``pygments.lexer.bygroups`` no text outside the groups is dropped:
    every character gets the token of the highest-numbered group covering
    it, or *default*.
    """
    start, stop = match.span()
    text = match.group()
    if not text:
        return
    tokens = [default] * len(text)
    for index in sorted(captures):
        if index > match.re.groups:
            continue
        g_start, g_end = match.span(index)
        if g_start < 0:
            continue
        for pos in range(max(g_start, start), min(g_end, stop)):
            tokens[pos - start] = captures[index]

    run_start = 0
    for pos in range(1, len(text) + 1):
        if pos == len(text) or tokens[pos] != tokens[run_start]:
            yield start + run_start, tokens[run_start], text[run_start:pos]
            run_start = pos


def _skip_empty_match(ctx: LexerContext, pos: int, token: _TokenType):
    """Force progress once empty matches keep recurring at *pos*.

    Lookahead rules and zero-width begin/end pairs can otherwise match
    forever without consuming input.
    """
    if getattr(ctx, "empty_pos", None) == pos:
        ctx.empty_count += 1
    else:
        ctx.empty_pos = pos
        ctx.empty_count = 1
    if ctx.empty_count <= MAX_EMPTY_MATCHES:
        return
    if pos < ctx.end:
        yield pos, token, ctx.text[pos]
        ctx.pos = pos + 1
    else:
        # an endpos before pos never matches, which ends the lexer loop
        ctx.pos = ctx.end + 1


def rule_callback(
    default: _TokenType, captures: dict[int, _TokenType] | None = None
) -> Callable[[ExtendedRegexLexer, re.Match, LexerContext], Iterator[tuple[int, _TokenType, str]]]:
    """Build the ExtendedRegexLexer callback for one grammar rule."""
    captures = dict(captures or {})

    def callback(lexer, match, ctx):
        start, stop = match.span()
        if start == stop:
            yield from _skip_empty_match(ctx, start, default)
            return
        yield from split_captures(match, default, captures)
        ctx.pos = stop

    callback.token = default
    callback.captures = captures
    return callback


class GrammarCompiler:
    """Turn one parsed TextMate grammar into a Pygments ``tokens`` table."""

    def __init__(self, grammar: dict[str, Any], source: str = "<grammar>") -> None:
        self.grammar = grammar
        self.source = source
        repository = grammar.get("repository")
        if repository is None:
            repository = {}
        elif not isinstance(repository, dict):
            raise GrammarError(f"{source}: 'repository' must be an object")
        self.repository = repository
        self.tokens: dict[str, list] = {}
        self._includes: dict[str, set[str]] = {}
        self._regions = 0

    def compile(self) -> dict[str, list]:
        for key, entry in self.repository.items():
            state = self._repository_state(key)
            self.tokens[state] = self._compile_entry(state, entry)

        self.tokens[SELF_STATE] = self._compile_patterns(SELF_STATE, self.grammar["patterns"])
        self.tokens[ROOT_STATE] = [include(SELF_STATE), (FALLBACK_REGEX, Text)]

        self._check_include_cycles()
        return self.tokens

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------
    def _compile_entry(self, owner: str, entry: Any) -> list:
        if isinstance(entry, dict) and not {"match", "begin", "include"} & entry.keys():
            return self._compile_patterns(owner, entry.get("patterns", []))
        return self._compile_rule(owner, entry)

    def _compile_patterns(self, owner: str, patterns: Any) -> list:
        if not isinstance(patterns, list):
            logger.warning("%s: ignoring non-list patterns in %s", self.source, owner)
            return []
        rules: list = []
        for rule in patterns:
            rules.extend(self._compile_rule(owner, rule))
        return rules

    def _compile_rule(self, owner: str, rule: Any) -> list:
        if not isinstance(rule, dict):
            logger.warning("%s: ignoring non-object rule in %s", self.source, owner)
            return []
        if rule.get("disabled"):
            return []

        if "include" in rule:
            target = self._resolve_include(rule["include"])
            if target is None:
                return []
            if target == owner:
                logger.warning("%s: ignoring self-include in %s", self.source, owner)
                return []
            self._includes.setdefault(owner, set()).add(target)
            return [include(target)]

        if "match" in rule:
            regex = self._regex(rule["match"])
            if regex is None:
                return []
            token = scope_token(rule.get("name")) or Text
            return [(regex, self._action(token, rule.get("captures")))]

        if "begin" in rule:
            return self._compile_region(owner, rule)

        if "patterns" in rule:
            return self._compile_patterns(owner, rule["patterns"])

        logger.warning("%s: ignoring rule without match/begin/include in %s", self.source, owner)
        return []

    def _compile_region(self, owner: str, rule: dict[str, Any]) -> list:
        begin = self._regex(rule["begin"])
        if "end" in rule:
            end = self._regex(rule["end"])
        elif "while" in rule:
            # while-regions continue line by line; approximated as one line
            end = "$"
        else:
            logger.warning("%s: begin rule without end in %s", self.source, owner)
            end = None
        if begin is None or end is None:
            return []

        name_token = scope_token(rule.get("name"))
        delimiter = name_token or Text
        content = scope_token(rule.get("contentName")) or name_token or Text
        begin_captures = rule.get("beginCaptures") or rule.get("captures")
        end_captures = rule.get("endCaptures") or rule.get("captures")

        self._regions += 1
        state = f"region-{self._regions}"
        end_rule = (end, self._action(delimiter, end_captures), "#pop")

        # registered before compiling nested patterns so they can reference it
        self.tokens[state] = []
        rules = self._compile_patterns(state, rule.get("patterns", []))
        if rule.get("applyEndPatternLast"):
            rules.append(end_rule)
        else:
            rules.insert(0, end_rule)
        rules.append((FALLBACK_REGEX, content))
        self.tokens[state] = rules

        return [(begin, self._action(delimiter, begin_captures), state)]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _action(self, default: _TokenType, captures: Any):
        if not isinstance(captures, dict):
            return rule_callback(default)
        groups: dict[int, _TokenType] = {}
        for key, capture in captures.items():
            if not str(key).isdigit() or not isinstance(capture, dict):
                continue
            token = scope_token(capture.get("name"))
            if token is not None:
                groups[int(key)] = token
        if 0 in groups:
            default = groups.pop(0)
        return rule_callback(default, groups)

    def _regex(self, pattern: Any) -> str | None:
        if not isinstance(pattern, str):
            logger.warning("%s: ignoring non-string regex %r", self.source, pattern)
            return None
        translated = translate_regex(pattern)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", FutureWarning)
            try:
                re.compile(translated, REGEX_FLAGS)
            except re.error as exc:
                logger.warning("%s: skipping rule, cannot compile %r: %s", self.source, pattern, exc)
                return None
        return translated

    def _resolve_include(self, ref: Any) -> str | None:
        if ref in ("$self", "$base"):
            return SELF_STATE
        if isinstance(ref, str) and ref.startswith("#"):
            key = ref[1:]
            if key in self.repository:
                return self._repository_state(key)
            logger.warning("%s: unknown repository entry %r", self.source, ref)
            return None
        logger.warning("%s: external include %r is not supported", self.source, ref)
        return None

    @staticmethod
    def _repository_state(key: str) -> str:
        return f"repo:{key}"

    def _check_include_cycles(self) -> None:
        """Pygments inlines each included state once, so a cycle would silently lose rules."""
        done: set[str] = set()

        def visit(state: str, trail: list[str]) -> None:
            if state in trail:
                cycle = " -> ".join(trail[trail.index(state):] + [state])
                raise GrammarError(f"{self.source}: include cycle {cycle}")
            if state in done:
                return
            for target in sorted(self._includes.get(state, ())):
                visit(target, trail + [state])
            done.add(state)

        for state in list(self._includes):
            visit(state, [])


def compile_grammar(grammar: dict[str, Any], source: str = "<grammar>") -> dict[str, list]:
    """Return the Pygments ``tokens`` table for a parsed TextMate grammar."""
    return GrammarCompiler(grammar, source).compile()


def make_lexer_class(
    name: str,
    tokens: dict[str, list],
    aliases: list[str] | None = None,
    filenames: list[str] | None = None,
) -> type[ExtendedRegexLexer]:
    """Create an ExtendedRegexLexer subclass serving *tokens*."""
    class_name = "".join(part.capitalize() for part in re.split(r"\W+", name) if part)
    namespace = {
        "name": name,
        "aliases": list(aliases or []),
        "filenames": list(filenames or []),
        "flags": REGEX_FLAGS,
        "tokens": tokens,
    }
    return type(ExtendedRegexLexer)(f"{class_name}GrammarLexer", (ExtendedRegexLexer,), namespace)
