"""Shared test fixtures for hlfilter tests."""

import json

import pytest
from pandocfilters import CodeBlock, Para, Str

from hlfilter.config import DEFAULT_GRAMMAR_PATH, DEFAULT_THEME
from hlfilter.grammar import load_grammar
from hlfilter.highlight import create_highlighter


@pytest.fixture
def janet_grammar():
    """The grammar bundled with the package."""
    return load_grammar(DEFAULT_GRAMMAR_PATH)


@pytest.fixture
def highlighter(janet_grammar):
    """A highlighter configured the way the CLI configures it by default."""
    return create_highlighter(["shell", janet_grammar], [DEFAULT_THEME])


@pytest.fixture
def code_block():
    """Factory for pandoc CodeBlock nodes."""
    def make(code, *classes, identifier="", attributes=None):
        return CodeBlock([identifier, list(classes), attributes or []], code)
    return make


@pytest.fixture
def para():
    """Factory for a simple pandoc Para node."""
    def make(text="hello"):
        return Para([Str(text)])
    return make


@pytest.fixture
def make_doc():
    """Factory for a pandoc document wrapping the given blocks."""
    def make(*blocks):
        return {
            "pandoc-api-version": [1, 23, 1],
            "meta": {},
            "blocks": list(blocks),
        }
    return make


@pytest.fixture
def write_grammar(tmp_path):
    """Write a grammar dict (or raw text) to a file and return its path."""
    def write(data, name="grammar.tmLanguage.json"):
        path = tmp_path / name
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return path
    return write
