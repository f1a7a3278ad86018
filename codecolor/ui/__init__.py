"""
Qt integration.

Provides:
- ScopeSyntaxHighlighter: live highlighting of QTextDocument contents
- QtFormatRangeFormatter: capture sink producing Qt format ranges
"""

from codecolor.ui.syntax_highlighter import (
    FormatRange,
    QtFormatRangeFormatter,
    ScopeSyntaxHighlighter,
    create_highlighter_for_file,
    style_to_format,
)

__all__ = [
    'FormatRange',
    'QtFormatRangeFormatter',
    'ScopeSyntaxHighlighter',
    'create_highlighter_for_file',
    'style_to_format',
]
