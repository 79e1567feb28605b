"""Rewrite top-level CodeBlocks of a pandoc document as highlighted RawBlocks."""

from __future__ import annotations

import logging
from typing import Any, Callable

from hlfilter.config import DEFAULT_THEME, HTML_FORMAT
from hlfilter.document.nodes import CodeBlock, RawBlock, dump_block, parse_block
from hlfilter.errors import MalformedDocumentError
from hlfilter.highlight import Highlighter

logger = logging.getLogger(__name__)


def highlight_block(node: Any, highlighter: Highlighter, theme: str = DEFAULT_THEME) -> Any:
    """Return an HTML RawBlock for a CodeBlock node, any other node unchanged.

    Only the code and its first class are used; the identifier, the other
    classes and the attributes do not carry over.
    """
    block = parse_block(node)
    if not isinstance(block, CodeBlock):
        return node

    logger.debug("Highlighting %d characters as %s", len(block.code), block.language or "plain text")
    html = highlighter.render(block.code, block.language, theme)
    return dump_block(RawBlock(format=HTML_FORMAT, text=html))


def make_block_filter(highlighter: Highlighter, theme: str = DEFAULT_THEME) -> Callable[[Any], Any]:
    """Bind *highlighter* and *theme* into a one-argument block transform."""

    def block_filter(node: Any) -> Any:
        return highlight_block(node, highlighter, theme)

    return block_filter


def highlight_document(
    doc: Any, highlighter: Highlighter, theme: str = DEFAULT_THEME
) -> dict[str, Any]:
    """Transform every top-level block in order.

    Returns a new document; fields other than ``blocks`` are passed through.
    Raises MalformedDocumentError if *doc* has no ``blocks`` list.
    """
    if not isinstance(doc, dict):
        raise MalformedDocumentError(
            f"Expected a pandoc document object, got {type(doc).__name__}"
        )
    blocks = doc.get("blocks")
    if not isinstance(blocks, list):
        raise MalformedDocumentError("Pandoc document has no 'blocks' list")

    block_filter = make_block_filter(highlighter, theme)
    return {**doc, "blocks": [block_filter(block) for block in blocks]}
