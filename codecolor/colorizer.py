"""
High-level entry point: source text in, formatted text out.
"""

from __future__ import annotations

import io
from typing import Optional, Union

from codecolor.core import guard
from codecolor.core.compiler import LanguageCompiler, default_compiler
from codecolor.core.errors import PreconditionError
from codecolor.core.models import Language
from codecolor.core.parser import LanguageParser
from codecolor.formatting.base import Formatter, Formatters, FormatterSink, TextWriter
from codecolor.formatting.styles import StyleSheet, StyleSheets
from codecolor.services.settings import HighlightSettings


class CodeColorizer:
    """
    Colorizes source code with a formatter and a style sheet.

    Usage:
        colorizer = CodeColorizer()
        html = colorizer.colorize("x = 1", "python")

    Without an explicit parser, colorizers share the process-wide compiler,
    so compiled languages are built once no matter how many instances exist.
    """

    def __init__(
        self,
        parser: Optional[LanguageParser] = None,
        settings: Optional[HighlightSettings] = None
    ):
        self.settings = settings if settings is not None else HighlightSettings()
        if parser is None:
            parser = LanguageParser(
                compiler=self._compiler_for(self.settings),
                max_depth=self.settings.max_nesting_depth,
            )
        self.parser = parser

    @staticmethod
    def _compiler_for(settings: HighlightSettings) -> LanguageCompiler:
        compiler = default_compiler()
        if settings.combine_rules == compiler.combine_rules:
            return compiler
        return LanguageCompiler(repository=compiler.repository, combine_rules=settings.combine_rules)

    def colorize(
        self,
        source_text: str,
        language: Union[Language, str],
        formatter: Optional[Union[Formatter, str]] = None,
        style_sheet: Optional[Union[StyleSheet, str]] = None,
        writer: Optional[TextWriter] = None
    ) -> Optional[str]:
        """
        Format ``source_text``.

        Writes header, every capture, then footer to ``writer``. When no
        writer is given the output is collected and returned as a string.

        Raises:
            PreconditionError: if an argument is missing or invalid
            GrammarError: if a reachable language is malformed
            NestingDepthExceededError: if nested regions exceed the depth bound
        """
        guard.arg_is_str(source_text, "source_text")
        resolved = self.parser.resolve_language(language)
        formatter = self._resolve_formatter(formatter)
        style_sheet = self._resolve_style_sheet(style_sheet)

        buffer = None
        if writer is None:
            buffer = writer = io.StringIO()
        elif not callable(getattr(writer, 'write', None)):
            raise PreconditionError("writer", "Argument 'writer' must have a write() method")

        # compile before anything is written
        captures = self.parser.parse(source_text, resolved)

        formatter.write_header(style_sheet, resolved, writer)
        sink = FormatterSink(formatter, style_sheet, writer)
        for capture in captures:
            sink.write(capture)
        formatter.write_footer(style_sheet, resolved, writer)

        return buffer.getvalue() if buffer is not None else None

    def _resolve_formatter(self, formatter: Optional[Union[Formatter, str]]) -> Formatter:
        if formatter is None:
            formatter = self.settings.formatter.value
        if isinstance(formatter, Formatter):
            return formatter
        if isinstance(formatter, str):
            try:
                return Formatters.create(formatter, tab_width=self.settings.tab_width)
            except KeyError as e:
                raise PreconditionError("formatter", str(e.args[0])) from e
        raise PreconditionError("formatter", "Argument 'formatter' must be a Formatter or name")

    def _resolve_style_sheet(self, style_sheet: Optional[Union[StyleSheet, str]]) -> StyleSheet:
        if isinstance(style_sheet, StyleSheet):
            return style_sheet
        if style_sheet is None:
            style_sheet = self.settings.style_sheet
        if not isinstance(style_sheet, str):
            raise PreconditionError("style_sheet", "Argument 'style_sheet' must be a StyleSheet or name")
        sheet = StyleSheets.get(style_sheet)
        sheet.css_class_prefix = self.settings.css_class_prefix
        return sheet
