"""TextMate grammar support.

Public API
----------
- load_grammar(path) -> Grammar
- parse_grammar(data, source="<grammar>") -> Grammar
- compile_grammar(data, source="<grammar>") -> dict (Pygments token table)
"""

from hlfilter.grammar.loader import (  # noqa: F401
    Grammar,
    load_grammar,
    parse_grammar,
)
from hlfilter.grammar.compiler import compile_grammar  # noqa: F401
