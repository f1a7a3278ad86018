"""
codecolor - scope-based source code colorizer.

Source text is tokenized by language grammars into a stream of captures,
each carrying its text and scope path, and rendered by a formatter with a
style sheet.

Usage:
    import codecolor
    html = codecolor.colorize("print('hi')", "python")
    for capture in codecolor.parse("a = 1", "python"):
        ...
"""

from __future__ import annotations

from typing import Iterator, Optional, Union

from codecolor.colorizer import CodeColorizer
from codecolor.core import (
    Capture,
    CodeColorError,
    GrammarError,
    Language,
    LanguageCompiler,
    LanguageParser,
    NestingDepthExceededError,
    PreconditionError,
    Rule,
    ScopeName,
    UnknownLanguageError,
)
from codecolor.formatting import (
    Formatter,
    HtmlClassFormatter,
    HtmlFormatter,
    StyleSheet,
    StyleSheets,
)
from codecolor.languages import LanguageRepository, default_repository

__version__ = "1.0.0"


def parse(
    source_text: str,
    language: Union[Language, str],
    max_depth: Optional[int] = None
) -> Iterator[Capture]:
    """Tokenize with the shared compiler; see ``LanguageParser.parse``."""
    return LanguageParser().parse(source_text, language, max_depth)


def colorize(
    source_text: str,
    language: Union[Language, str],
    formatter: Optional[Union[Formatter, str]] = None,
    style_sheet: Optional[Union[StyleSheet, str]] = None
) -> str:
    """Format ``source_text`` as a string; see ``CodeColorizer.colorize``."""
    return CodeColorizer().colorize(source_text, language, formatter, style_sheet)


__all__ = [
    'parse',
    'colorize',
    'CodeColorizer',
    'Capture',
    'Rule',
    'Language',
    'ScopeName',
    'LanguageCompiler',
    'LanguageParser',
    'LanguageRepository',
    'default_repository',
    'Formatter',
    'HtmlFormatter',
    'HtmlClassFormatter',
    'StyleSheet',
    'StyleSheets',
    'CodeColorError',
    'PreconditionError',
    'UnknownLanguageError',
    'GrammarError',
    'NestingDepthExceededError',
]
