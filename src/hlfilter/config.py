"""Filter defaults and the settings resolved from the command line."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path

ASSETS_DIR = Path(__file__).resolve().parent / "assets"

DEFAULT_GRAMMAR_PATH = ASSETS_DIR / "janet.tmLanguage.json"
DEFAULT_LANGUAGES = ("shell",)
DEFAULT_THEME = "solarized-light"

# Format tag of the RawBlock nodes the filter emits
HTML_FORMAT = "html"


@dataclass
class FilterConfig:
    """Everything needed to build the highlighter and run one pass."""

    grammar_paths: list[Path] = field(default_factory=lambda: [DEFAULT_GRAMMAR_PATH])
    languages: list[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    theme: str = DEFAULT_THEME
    target_format: str | None = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> FilterConfig:
        grammars = [Path(p) for p in args.grammar] if args.grammar else [DEFAULT_GRAMMAR_PATH]

        languages = list(DEFAULT_LANGUAGES)
        for name in args.lang or []:
            if name not in languages:
                languages.append(name)

        return cls(
            grammar_paths=grammars,
            languages=languages,
            theme=args.theme,
            target_format=args.target_format,
        )
