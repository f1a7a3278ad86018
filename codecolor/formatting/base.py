"""
Formatter base class and formatter registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Protocol

from codecolor.core.models import Capture, Language
from codecolor.formatting.styles import StyleSheet


class TextWriter(Protocol):
    """Anything with a ``write(str)`` method, e.g. ``io.StringIO`` or a file."""

    def write(self, text: str) -> object:
        ...


class Formatter(ABC):
    """
    Base class for capture formatters.

    The colorizer calls ``write_header`` once, ``write`` for every capture in
    document order, then ``write_footer``. A formatter never looks ahead.
    """

    name: str = ""

    def __init__(self, tab_width: Optional[int] = None):
        self.tab_width = tab_width
        self._column = 0

    def write_header(self, style_sheet: StyleSheet, language: Language, writer: TextWriter) -> None:
        self._column = 0

    @abstractmethod
    def write(self, capture: Capture, style_sheet: StyleSheet, writer: TextWriter) -> None:
        """Render one capture."""

    def write_footer(self, style_sheet: StyleSheet, language: Language, writer: TextWriter) -> None:
        pass

    def expand_tabs(self, text: str) -> str:
        """
        Replace tabs with spaces when ``tab_width`` is set.

        The column carries over from one capture to the next, so tab stops
        line up across capture boundaries.
        """
        if not self.tab_width:
            return text

        out = []
        column = self._column
        for char in text:
            if char == '\t':
                spaces = self.tab_width - (column % self.tab_width)
                out.append(' ' * spaces)
                column += spaces
            elif char == '\n':
                out.append(char)
                column = 0
            else:
                out.append(char)
                column += 1
        self._column = column
        return ''.join(out)


class FormatterSink:
    """Adapts a formatter to the single-argument capture sink interface."""

    def __init__(self, formatter: Formatter, style_sheet: StyleSheet, writer: TextWriter):
        self.formatter = formatter
        self.style_sheet = style_sheet
        self.writer = writer

    def write(self, capture: Capture) -> None:
        self.formatter.write(capture, self.style_sheet, self.writer)


class Formatters:
    """Registry of formatter factories by name."""

    _factories: Dict[str, Callable[..., Formatter]] = {}

    @classmethod
    def register(cls, name: str, factory: Callable[..., Formatter]) -> None:
        cls._factories[name.lower()] = factory

    @classmethod
    def names(cls) -> List[str]:
        return list(cls._factories)

    @classmethod
    def create(cls, name: str, **kwargs) -> Formatter:
        """Create a formatter by name; raises KeyError for unknown names."""
        try:
            factory = cls._factories[name.lower()]
        except KeyError:
            raise KeyError(f"Unknown formatter: {name!r}") from None
        return factory(**kwargs)
