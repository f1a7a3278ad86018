"""
Formatting of capture streams.

Provides:
- StyleSheet / StyleSheets: scope → style lookup with ancestor fallback
- Formatter: header / capture / footer protocol used by the colorizer
- HtmlFormatter, HtmlClassFormatter: HTML output
"""

from codecolor.formatting.styles import Style, StyleSheet, StyleSheets
from codecolor.formatting.base import Formatter, Formatters, FormatterSink
from codecolor.formatting.html import HtmlClassFormatter, HtmlFormatter

__all__ = [
    'Style',
    'StyleSheet',
    'StyleSheets',
    'Formatter',
    'Formatters',
    'FormatterSink',
    'HtmlFormatter',
    'HtmlClassFormatter',
]
