import pytest

pytest.importorskip("PyQt6.QtGui")

from PyQt6.QtGui import QFont, QTextDocument

from codecolor.core.models import Capture
from codecolor.core.scopes import ScopeName as S
from codecolor.formatting import Style, StyleSheets
from codecolor.ui import (
    QtFormatRangeFormatter,
    ScopeSyntaxHighlighter,
    create_highlighter_for_file,
    style_to_format,
)

STRING_COLOR = "#a31515"


def _document(text):
    document = QTextDocument()
    document.setPlainText(text)
    return document


def _colored(ranges, color):
    return [r for r in ranges if r.format.foreground().color().name() == color]


class TestStyleToFormat:
    def test_attributes(self, qapp):
        fmt = style_to_format(Style(foreground="#010203", background="#ffffff",
                                    bold=True, italic=True, underline=True))
        assert fmt.foreground().color().name() == "#010203"
        assert fmt.background().color().name() == "#ffffff"
        assert fmt.fontWeight() == QFont.Weight.Bold
        assert fmt.fontItalic()
        assert fmt.fontUnderline()


class TestQtFormatRangeFormatter:
    def test_offsets_are_utf16(self, qapp):
        formatter = QtFormatRangeFormatter(StyleSheets.default_light())
        formatter.write(Capture(0, 1, "\U0001F600", ()))
        formatter.write(Capture(1, 3, "if", (S.KEYWORD,)))

        assert len(formatter.ranges) == 1
        assert (formatter.ranges[0].start, formatter.ranges[0].length) == (2, 2)

    def test_adjacent_equal_styles_merge(self, qapp):
        formatter = QtFormatRangeFormatter(StyleSheets.default_light())
        formatter.write(Capture(0, 1, '"', (S.STRING_QUOTED_DOUBLE,)))
        formatter.write(Capture(1, 2, "a", (S.STRING_QUOTED_DOUBLE,)))
        formatter.write(Capture(2, 3, " ", ()))
        formatter.write(Capture(3, 5, "if", (S.KEYWORD,)))

        assert [(r.start, r.length) for r in formatter.ranges] == [(0, 2), (3, 2)]

    def test_unstyled_scopes_produce_no_range(self, qapp):
        formatter = QtFormatRangeFormatter(StyleSheets.default_light())
        formatter.write(Capture(0, 3, "abc", ("Unknown",)))
        assert formatter.ranges == []

    def test_reset(self, qapp):
        formatter = QtFormatRangeFormatter(StyleSheets.default_light())
        formatter.write(Capture(0, 2, "if", (S.KEYWORD,)))
        formatter.reset()
        formatter.write(Capture(0, 2, "if", (S.KEYWORD,)))
        assert [(r.start, r.length) for r in formatter.ranges] == [(0, 2)]


class TestScopeSyntaxHighlighter:
    def test_highlights_document(self, qapp, parser):
        document = _document('x = "s"\n')
        highlighter = ScopeSyntaxHighlighter(document, "python", parser=parser)

        assert highlighter.language.id == "python"
        assert highlighter.get_language_name() == "Python"
        strings = _colored(highlighter.ranges, STRING_COLOR)
        assert [(r.start, r.length) for r in strings] == [(4, 3)]

    def test_region_spanning_blocks(self, qapp, parser):
        document = _document('x = """a\nb"""\ny = 1\n')
        highlighter = ScopeSyntaxHighlighter(document, "python", parser=parser)

        assert highlighter.ranges
        second = document.findBlockByNumber(1)
        formats = second.layout().formats()
        assert any(
            r.start == 0 and r.length == 4
            and r.format.foreground().color().name() == STRING_COLOR
            for r in formats
        )
        third = document.findBlockByNumber(2)
        assert not any(
            r.format.foreground().color().name() == STRING_COLOR
            for r in third.layout().formats()
        )

    def test_edit_retokenizes(self, qapp, parser):
        document = _document("x = 1\n")
        highlighter = ScopeSyntaxHighlighter(document, "python", parser=parser)
        assert _colored(highlighter.ranges, STRING_COLOR) == []

        document.setPlainText("x = 'a'\n")
        highlighter.rehighlight()
        assert len(_colored(highlighter.ranges, STRING_COLOR)) == 1

    def test_unknown_language_disables(self, qapp, parser, caplog):
        document = _document("x = 1")
        highlighter = ScopeSyntaxHighlighter(document, "python", parser=parser)
        assert highlighter.ranges

        highlighter.set_language("cobol")
        assert highlighter.language is None
        assert highlighter.ranges == []
        assert "Unknown language" in caplog.text

    def test_set_enabled(self, qapp, parser):
        document = _document("x = 1")
        highlighter = ScopeSyntaxHighlighter(document, "python", parser=parser)
        highlighter.set_enabled(False)
        assert highlighter.ranges == []
        highlighter.set_enabled(True)
        assert highlighter.ranges

    def test_set_style_sheet(self, qapp, parser):
        document = _document("'s'")
        highlighter = ScopeSyntaxHighlighter(document, "python", parser=parser)
        highlighter.set_style_sheet(StyleSheets.monokai())
        assert highlighter.style_sheet.name == "Monokai"
        assert _colored(highlighter.ranges, STRING_COLOR) == []
        assert _colored(highlighter.ranges, "#e6db74")

    def test_set_language_for_file(self, qapp, parser):
        document = _document("{}")
        highlighter = ScopeSyntaxHighlighter(document, parser=parser)
        assert highlighter.language is None
        assert highlighter.set_language_for_file("data.json")
        assert highlighter.language.id == "json"
        assert not highlighter.set_language_for_file("notes.unknown")
        assert highlighter.language is None


class TestCreateHighlighterForFile:
    def test_by_extension(self, qapp):
        document = _document("x = 1")
        highlighter = create_highlighter_for_file(document, "a.py")
        assert highlighter.language.id == "python"

    def test_by_first_line(self, qapp):
        document = _document("#!/usr/bin/env python3\nprint(1)\n")
        assert create_highlighter_for_file(document, "script").language.id == "python"

    def test_no_match(self, qapp):
        document = _document("hello")
        assert create_highlighter_for_file(document, "notes").language is None
