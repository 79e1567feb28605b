"""CLI entry point: a pandoc JSON filter that highlights code blocks."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import TextIO

from hlfilter.config import DEFAULT_THEME, FilterConfig
from hlfilter.document import highlight_document
from hlfilter.errors import HlFilterError
from hlfilter.grammar import load_grammar
from hlfilter.highlight import Highlighter, create_highlighter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hlfilter",
        description="Pandoc filter: replace code blocks with syntax-highlighted HTML",
    )
    parser.add_argument(
        "target_format",
        nargs="?",
        default=None,
        help="Output format passed by pandoc (output is always HTML)",
    )
    parser.add_argument(
        "--grammar",
        action="append",
        default=None,
        metavar="PATH",
        help="TextMate JSON grammar to load (repeatable; default: bundled Janet grammar)",
    )
    parser.add_argument(
        "--lang",
        action="append",
        default=None,
        metavar="NAME",
        help="Additional built-in Pygments language (repeatable; shell is always loaded)",
    )
    parser.add_argument(
        "--theme",
        default=DEFAULT_THEME,
        help=f"Pygments style name (default: {DEFAULT_THEME})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    return parser


def build_highlighter(config: FilterConfig) -> Highlighter:
    """Load grammars and create the highlighter once for the whole run."""
    grammars = [load_grammar(path) for path in config.grammar_paths]
    return create_highlighter([*config.languages, *grammars], [config.theme])


def _read_input(stream: TextIO) -> str:
    # pandoc always writes UTF-8, whatever the locale says
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        return buffer.read().decode("utf-8")
    return stream.read()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config = FilterConfig.from_args(args)
    if config.target_format:
        logger.debug("Target format %s; emitting HTML raw blocks", config.target_format)

    try:
        highlighter = build_highlighter(config)
        doc = json.loads(_read_input(sys.stdin))
        result = highlight_document(doc, highlighter, config.theme)
    except (HlFilterError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("%s", exc)
        return 1

    json.dump(result, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
