"""Pandoc document model and the code-block highlighting pass.

Public API
----------
- highlight_document(doc, highlighter, theme) -> dict
- highlight_block(node, highlighter, theme) -> node
- make_block_filter(highlighter, theme) -> callable
- parse_block(node) -> Block / dump_block(block) -> node
"""

from hlfilter.document.nodes import (  # noqa: F401
    Block,
    CodeBlock,
    OpaqueBlock,
    RawBlock,
    dump_block,
    parse_block,
)
from hlfilter.document.transform import (  # noqa: F401
    highlight_block,
    highlight_document,
    make_block_filter,
)
