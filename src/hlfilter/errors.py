"""Shared exception classes for hlfilter."""

from __future__ import annotations


class HlFilterError(Exception):
    """Base class for every error the filter reports as a failed run."""


class GrammarError(HlFilterError):
    """Raised when a grammar file is missing, unreadable or not a usable grammar."""


class UnknownLanguageError(HlFilterError):
    """Raised when a language name is not known to the highlighter."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        message = f"Language {name!r} is not loaded"
        if available:
            message += f" (available: {', '.join(sorted(available))})"
        super().__init__(message)


class UnknownThemeError(HlFilterError):
    """Raised when a theme name is not a known Pygments style."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Theme {name!r} is not loaded")


class MalformedDocumentError(HlFilterError):
    """Raised when the input is not a pandoc document with a ``blocks`` list."""


class MalformedBlockError(HlFilterError):
    """Raised when a CodeBlock node does not have the expected content shape."""
