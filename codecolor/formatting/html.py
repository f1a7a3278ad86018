"""
HTML formatters.

Provides:
- HtmlFormatter: spans with inline ``style`` attributes
- HtmlClassFormatter: spans with CSS class names, plus ``get_css``
"""

from __future__ import annotations

import html
from typing import Optional

from codecolor.core.models import Capture, Language
from codecolor.formatting.base import Formatter, Formatters, TextWriter
from codecolor.formatting.styles import StyleSheet


class HtmlFormatter(Formatter):
    """
    Writes self-contained HTML with inline styles.

    Output is ``<div style="..."><pre>`` followed by one span per styled
    capture and ``</pre></div>``. Unstyled text is written escaped, without
    a span.
    """

    name = "html"

    def write_header(self, style_sheet: StyleSheet, language: Language, writer: TextWriter) -> None:
        super().write_header(style_sheet, language, writer)
        writer.write(
            f'<div style="color:{style_sheet.foreground};'
            f'background-color:{style_sheet.background};"><pre>'
        )

    def write(self, capture: Capture, style_sheet: StyleSheet, writer: TextWriter) -> None:
        text = html.escape(self.expand_tabs(capture.text), quote=False)
        if not capture.scopes:
            writer.write(text)
            return

        style = style_sheet.style_for(capture.scopes)
        css = style.to_css() if style != style_sheet.plain_style else ""
        if css:
            writer.write(f'<span style="{css}">{text}</span>')
        else:
            writer.write(text)

    def write_footer(self, style_sheet: StyleSheet, language: Language, writer: TextWriter) -> None:
        writer.write('</pre></div>')


class HtmlClassFormatter(Formatter):
    """
    Writes HTML that is styled by an external stylesheet.

    Each scoped capture becomes a span whose classes name its innermost
    scope and that scope's ancestors, so CSS written for ``String`` also
    applies to ``String.Quoted.Double``. Use ``get_css`` for the matching
    stylesheet.
    """

    name = "html-class"

    def __init__(self, tab_width: Optional[int] = None, container_class: str = "codecolor"):
        super().__init__(tab_width)
        self.container_class = container_class

    def write_header(self, style_sheet: StyleSheet, language: Language, writer: TextWriter) -> None:
        super().write_header(style_sheet, language, writer)
        writer.write(
            f'<div class="{self.container_class} '
            f'{style_sheet.css_class_prefix}lang-{language.id}"><pre>'
        )

    def write(self, capture: Capture, style_sheet: StyleSheet, writer: TextWriter) -> None:
        text = html.escape(self.expand_tabs(capture.text), quote=False)
        if capture.scope is None:
            writer.write(text)
            return
        classes = ' '.join(style_sheet.css_classes(capture.scope))
        writer.write(f'<span class="{html.escape(classes)}">{text}</span>')

    def write_footer(self, style_sheet: StyleSheet, language: Language, writer: TextWriter) -> None:
        writer.write('</pre></div>')

    def get_css(self, style_sheet: StyleSheet) -> str:
        """CSS rules for ``style_sheet`` scoped to this formatter's container."""
        return style_sheet.to_css(self.container_class)


Formatters.register(HtmlFormatter.name, HtmlFormatter)
Formatters.register(HtmlClassFormatter.name, HtmlClassFormatter)
