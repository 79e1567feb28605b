"""Pandoc block nodes as a closed set of variants.

Only the variants the filter acts on are modelled. Every other node is kept
as an OpaqueBlock holding the original JSON value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import pandocfilters

from hlfilter.errors import MalformedBlockError

CODE_BLOCK_TAG = "CodeBlock"
RAW_BLOCK_TAG = "RawBlock"


@dataclass(frozen=True)
class CodeBlock:
    identifier: str
    classes: tuple[str, ...]
    attributes: tuple[tuple[str, str], ...]
    code: str

    @property
    def language(self) -> str | None:
        """First class of the block, which names its language."""
        return self.classes[0] if self.classes else None


@dataclass(frozen=True)
class RawBlock:
    format: str
    text: str


@dataclass(frozen=True)
class OpaqueBlock:
    node: Any


Block = Union[CodeBlock, RawBlock, OpaqueBlock]


def parse_block(node: Any) -> Block:
    """Classify a decoded JSON block node."""
    tag = node.get("t") if isinstance(node, dict) else None

    if tag == CODE_BLOCK_TAG:
        return _parse_code_block(node)

    if tag == RAW_BLOCK_TAG and set(node) == {"t", "c"}:
        content = node["c"]
        if (
            isinstance(content, list)
            and len(content) == 2
            and all(isinstance(part, str) for part in content)
        ):
            return RawBlock(format=content[0], text=content[1])

    return OpaqueBlock(node)


def dump_block(block: Block) -> Any:
    """Encode a block back into its pandoc JSON value."""
    if isinstance(block, CodeBlock):
        attr = [block.identifier, list(block.classes), [list(kv) for kv in block.attributes]]
        return pandocfilters.CodeBlock(attr, block.code)
    if isinstance(block, RawBlock):
        return pandocfilters.RawBlock(block.format, block.text)
    return block.node


def _parse_code_block(node: dict[str, Any]) -> CodeBlock:
    content = node.get("c")
    try:
        (identifier, classes, attributes), code = content
    except (TypeError, ValueError) as exc:
        raise MalformedBlockError(
            f"CodeBlock content must be [[id, classes, attributes], code], got {content!r}"
        ) from exc

    if not isinstance(identifier, str) or not isinstance(code, str):
        raise MalformedBlockError(f"CodeBlock identifier and code must be strings: {content!r}")
    if not isinstance(classes, list) or not all(isinstance(c, str) for c in classes):
        raise MalformedBlockError(f"CodeBlock classes must be a list of strings: {classes!r}")
    if not isinstance(attributes, list) or not all(
        isinstance(kv, list) and len(kv) == 2 and all(isinstance(x, str) for x in kv)
        for kv in attributes
    ):
        raise MalformedBlockError(f"CodeBlock attributes must be [key, value] pairs: {attributes!r}")

    return CodeBlock(
        identifier=identifier,
        classes=tuple(classes),
        attributes=tuple((k, v) for k, v in attributes),
        code=code,
    )
