"""
Syntax highlighting for Qt text documents.

Provides:
- QtFormatRangeFormatter: capture sink producing (start, length, format) ranges
- ScopeSyntaxHighlighter: QSyntaxHighlighter driven by the tokenizer
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from PyQt6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat, QTextDocument

from codecolor.core.errors import CodeColorError
from codecolor.core.models import Capture, Language
from codecolor.core.parser import LanguageParser
from codecolor.formatting.styles import Style, StyleSheet, StyleSheets


@dataclass
class FormatRange:
    """A styled span in UTF-16 code units, as Qt counts positions."""
    start: int
    length: int
    format: QTextCharFormat

    @property
    def end(self) -> int:
        return self.start + self.length


def style_to_format(style: Style) -> QTextCharFormat:
    """Convert a style into a QTextCharFormat."""
    fmt = QTextCharFormat()

    if style.foreground:
        fmt.setForeground(QColor(style.foreground))
    if style.background:
        fmt.setBackground(QColor(style.background))
    if style.bold:
        fmt.setFontWeight(QFont.Weight.Bold)
    if style.italic:
        fmt.setFontItalic(True)
    if style.underline:
        fmt.setFontUnderline(True)

    return fmt


def _utf16_length(text: str) -> int:
    return len(text.encode('utf-16-le')) // 2


class QtFormatRangeFormatter:
    """
    Collects format ranges for styled captures.

    Positions are converted from Python string indices to UTF-16 offsets;
    captures whose style is the sheet's plain style produce no range.
    """

    def __init__(self, style_sheet: StyleSheet):
        self.style_sheet = style_sheet
        self.ranges: List[FormatRange] = []
        self._formats: Dict[Tuple[str, ...], Optional[QTextCharFormat]] = {}
        self._position = 0

    def reset(self) -> None:
        self.ranges = []
        self._position = 0

    def format_for(self, scopes: Tuple[str, ...]) -> Optional[QTextCharFormat]:
        if scopes not in self._formats:
            style = self.style_sheet.style_for(scopes) if scopes else None
            if style is None or style == self.style_sheet.plain_style:
                self._formats[scopes] = None
            else:
                self._formats[scopes] = style_to_format(style)
        return self._formats[scopes]

    def write(self, capture: Capture) -> None:
        length = _utf16_length(capture.text)
        start = self._position
        self._position += length

        fmt = self.format_for(capture.scopes)
        if fmt is None:
            return

        last = self.ranges[-1] if self.ranges else None
        if last is not None and last.end == start and last.format is fmt:
            last.length += length
        else:
            self.ranges.append(FormatRange(start, length, fmt))


class ScopeSyntaxHighlighter(QSyntaxHighlighter):
    """
    Syntax highlighter for QTextDocument using language grammars.

    The whole document is tokenized once per document revision, so nested
    regions (strings, comments, embedded languages) may span any number of
    blocks. Each block then applies the ranges that overlap it.
    """

    def __init__(
        self,
        document: QTextDocument,
        language: Optional[Union[Language, str]] = None,
        style_sheet: Optional[StyleSheet] = None,
        parser: Optional[LanguageParser] = None
    ):
        super().__init__(document)

        self._parser = parser or LanguageParser()
        self._language: Optional[Language] = None
        self._formatter = QtFormatRangeFormatter(style_sheet or StyleSheets.default())
        self._ends: List[int] = []
        self._revision = -1
        self._enabled = True

        if language:
            self.set_language(language)

    @property
    def parser(self) -> LanguageParser:
        return self._parser

    @property
    def language(self) -> Optional[Language]:
        return self._language

    @property
    def style_sheet(self) -> StyleSheet:
        return self._formatter.style_sheet

    @property
    def ranges(self) -> List[FormatRange]:
        """Ranges from the most recent tokenization."""
        return self._formatter.ranges

    def set_language(self, language: Optional[Union[Language, str]]) -> None:
        """Set the language; unknown ids disable highlighting."""
        if language is None:
            self._language = None
        elif isinstance(language, Language):
            self._language = language
        else:
            self._language = self._parser.compiler.repository.find(language)
            if self._language is None:
                logging.warning(f"ScopeSyntaxHighlighter - Unknown language {language!r}")
        self._invalidate()

    def set_language_for_file(self, filename: str) -> bool:
        """Set language based on file extension."""
        language = self._parser.compiler.repository.find_for_file(filename)
        self.set_language(language)
        return language is not None

    def set_style_sheet(self, style_sheet: StyleSheet) -> None:
        self._formatter = QtFormatRangeFormatter(style_sheet)
        self._invalidate()

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable highlighting."""
        self._enabled = enabled
        self._invalidate()

    def _invalidate(self) -> None:
        self._revision = -1
        self.rehighlight()

    def _tokenize(self) -> None:
        document = self.document()
        self._formatter.reset()
        self._ends = []
        self._revision = document.revision()

        if not self._enabled or self._language is None:
            return

        try:
            self._parser.parse_into(document.toPlainText(), self._language, self._formatter)
        except CodeColorError as e:
            # keep whatever was produced before the failure
            logging.warning(f"ScopeSyntaxHighlighter - Tokenizing failed: {e}")
        self._ends = [r.end for r in self._formatter.ranges]

    def highlightBlock(self, text: str) -> None:
        """Apply the ranges that overlap the current block."""
        if self._revision != self.document().revision():
            self._tokenize()

        block = self.currentBlock()
        block_start = block.position()
        block_end = block_start + block.length()

        ranges = self._formatter.ranges
        index = bisect.bisect_right(self._ends, block_start)
        state = 0
        while index < len(ranges) and ranges[index].start < block_end:
            fmt_range = ranges[index]
            start = max(fmt_range.start, block_start)
            end = min(fmt_range.end, block_end)
            self.setFormat(start - block_start, end - start, fmt_range.format)
            if fmt_range.end >= block_end:
                state = (fmt_range.start * 31 + fmt_range.length) & 0x7FFFFFFF
            index += 1

        # a changed state makes Qt re-highlight the following block too
        self.setCurrentBlockState(state)

    def get_language_name(self) -> Optional[str]:
        return self._language.name if self._language else None


def create_highlighter_for_file(
    document: QTextDocument,
    filename: str,
    style_sheet: Optional[StyleSheet] = None
) -> ScopeSyntaxHighlighter:
    """
    Create a syntax highlighter for a file.

    Detects the language from the file extension, then from the
    document's first line.
    """
    highlighter = ScopeSyntaxHighlighter(document, style_sheet=style_sheet)
    if not highlighter.set_language_for_file(filename):
        repository = highlighter.parser.compiler.repository
        detected = repository.detect(document.toPlainText())
        if detected is not None:
            highlighter.set_language(detected)
    return highlighter
