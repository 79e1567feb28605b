"""Highlighting engine: built-in and grammar lexers rendered to HTML.

Public API
----------
- create_highlighter(langs, themes) -> Highlighter
- Highlighter.render(code, lang, theme) -> str
"""

from hlfilter.highlight.renderer import (  # noqa: F401
    Highlighter,
    create_highlighter,
)
