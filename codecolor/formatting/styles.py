"""
Style sheets for rendering captures.

Provides:
- Style: colors and font flags for one scope
- StyleSheet: scope → style mapping with prefix fallback
- StyleSheets: predefined sheets (Default Light/Dark, Monokai, Solarized, GitHub)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from codecolor.core.scopes import Scope, ScopeName as S


def _rgb(red: int, green: int, blue: int) -> str:
    return f"#{red:02x}{green:02x}{blue:02x}"


@dataclass(frozen=True)
class Style:
    """Presentation attributes for one scope."""
    foreground: Optional[str] = None
    background: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    css_class: Optional[str] = None

    @property
    def is_plain(self) -> bool:
        return not (self.foreground or self.background or self.bold
                    or self.italic or self.underline)

    def to_css(self) -> str:
        """Inline CSS declarations, e.g. ``color:#0000c8;font-weight:bold;``."""
        parts = []
        if self.foreground:
            parts.append(f"color:{self.foreground};")
        if self.background:
            parts.append(f"background-color:{self.background};")
        if self.bold:
            parts.append("font-weight:bold;")
        if self.italic:
            parts.append("font-style:italic;")
        if self.underline:
            parts.append("text-decoration:underline;")
        return ''.join(parts)


@dataclass
class StyleSheet:
    """
    Maps scope names to styles.

    Lookup falls back along the scope's ancestors, so an entry for
    ``String`` covers ``String.Quoted.Double`` unless a closer entry exists.
    """
    name: str
    background: str = "#ffffff"
    foreground: str = "#000000"
    styles: Dict[str, Style] = field(default_factory=dict)
    css_class_prefix: str = "cc-"

    @classmethod
    def from_colors(
        cls,
        name: str,
        background: str,
        foreground: str,
        colors: Mapping[str, str],
        bold: Iterable[str] = (),
        italic: Iterable[str] = (),
        underline: Iterable[str] = ()
    ) -> StyleSheet:
        """Build a sheet from a color table plus sets of bold/italic/underlined scopes."""
        bold, italic, underline = set(bold), set(italic), set(underline)
        styles = {}
        for scope in set(colors) | bold | italic | underline:
            styles[scope] = Style(
                foreground=colors.get(scope),
                bold=scope in bold,
                italic=scope in italic,
                underline=scope in underline,
            )
        return cls(name=name, background=background, foreground=foreground, styles=styles)

    @property
    def plain_style(self) -> Style:
        return Style(foreground=self.foreground, background=self.background)

    def lookup(self, scope: str) -> Optional[Style]:
        """Style for one scope name, or its nearest ancestor, or None."""
        for name in Scope(scope).lineage():
            style = self.styles.get(name)
            if style is not None:
                return style
        return None

    def style_for(self, scopes: Sequence[str]) -> Style:
        """
        Resolve a scope path, innermost scope first.

        Falls back to the sheet's plain style when no scope on the path
        has an entry.
        """
        for scope in reversed(scopes):
            style = self.lookup(scope)
            if style is not None:
                return style
        return self.plain_style

    def css_class(self, scope: str) -> str:
        style = self.styles.get(scope)
        if style is not None and style.css_class:
            return style.css_class
        return self.css_class_prefix + scope.lower().replace('.', '-')

    def css_classes(self, scope: str) -> List[str]:
        """Classes for a scope and its ancestors, most specific first."""
        return [self.css_class(name) for name in Scope(scope).lineage()]

    def to_css(self, container_class: str = "codecolor") -> str:
        """A stylesheet for class-based HTML output; ancestors come first."""
        lines = [
            f".{container_class} {{ color:{self.foreground};"
            f"background-color:{self.background}; }}"
        ]
        for scope in sorted(self.styles, key=lambda s: (s.count('.'), s)):
            css = self.styles[scope].to_css()
            if css:
                lines.append(f".{container_class} .{self.css_class(scope)} {{ {css} }}")
        return '\n'.join(lines) + '\n'


class StyleSheets:
    """Predefined style sheets."""

    @staticmethod
    def default_light() -> StyleSheet:
        """Default light style sheet."""
        return StyleSheet.from_colors(
            name="Default Light",
            background=_rgb(255, 255, 255),
            foreground=_rgb(0, 0, 0),
            colors={
                S.KEYWORD: _rgb(0, 0, 200),
                S.KEYWORD_TYPE: _rgb(0, 128, 128),
                S.KEYWORD_CONTROL: _rgb(128, 0, 128),

                S.STRING: _rgb(163, 21, 21),
                S.STRING_ESCAPE: _rgb(200, 100, 0),
                S.STRING_INTERPOLATION: _rgb(200, 50, 50),
                S.STRING_REGEX: _rgb(200, 100, 0),

                S.NUMBER: _rgb(0, 128, 0),

                S.COMMENT: _rgb(0, 128, 0),
                S.COMMENT_DOC: _rgb(64, 128, 128),
                S.COMMENT_TODO: _rgb(200, 100, 0),

                S.OPERATOR: _rgb(0, 0, 0),
                S.DELIMITER: _rgb(0, 0, 0),

                S.FUNCTION: _rgb(128, 0, 0),
                S.FUNCTION_BUILTIN: _rgb(0, 100, 150),
                S.CLASS: _rgb(0, 100, 100),
                S.DECORATOR: _rgb(128, 64, 0),
                S.VARIABLE_SPECIAL: _rgb(128, 0, 128),
                S.CONSTANT: _rgb(0, 100, 0),

                S.PREPROCESSOR: _rgb(128, 64, 0),

                S.HTML_TAG: _rgb(163, 21, 21),
                S.HTML_TAG_DELIMITER: _rgb(0, 0, 200),
                S.HTML_ATTRIBUTE: _rgb(200, 0, 0),
                S.HTML_ATTRIBUTE_VALUE: _rgb(0, 0, 200),
                S.HTML_ENTITY: _rgb(200, 100, 0),
                S.HTML_DOCTYPE: _rgb(128, 64, 0),

                S.CSS_SELECTOR: _rgb(128, 0, 0),
                S.CSS_PROPERTY: _rgb(200, 0, 0),
                S.CSS_VALUE: _rgb(0, 0, 200),

                S.JSON_KEY: _rgb(46, 117, 182),

                S.ERROR: _rgb(255, 0, 0),
            },
            bold={S.KEYWORD},
            italic={S.COMMENT},
        )

    @staticmethod
    def default_dark() -> StyleSheet:
        """Default dark style sheet."""
        return StyleSheet.from_colors(
            name="Default Dark",
            background=_rgb(30, 30, 30),
            foreground=_rgb(212, 212, 212),
            colors={
                S.KEYWORD: _rgb(86, 156, 214),
                S.KEYWORD_TYPE: _rgb(78, 201, 176),
                S.KEYWORD_CONTROL: _rgb(197, 134, 192),

                S.STRING: _rgb(206, 145, 120),
                S.STRING_ESCAPE: _rgb(215, 186, 125),
                S.STRING_INTERPOLATION: _rgb(220, 160, 100),
                S.STRING_REGEX: _rgb(215, 186, 125),

                S.NUMBER: _rgb(181, 206, 168),

                S.COMMENT: _rgb(106, 153, 85),
                S.COMMENT_DOC: _rgb(96, 139, 78),
                S.COMMENT_TODO: _rgb(200, 150, 80),

                S.OPERATOR: _rgb(212, 212, 212),
                S.DELIMITER: _rgb(212, 212, 212),

                S.FUNCTION: _rgb(220, 220, 170),
                S.FUNCTION_BUILTIN: _rgb(200, 200, 150),
                S.CLASS: _rgb(78, 201, 176),
                S.DECORATOR: _rgb(220, 220, 170),
                S.VARIABLE: _rgb(156, 220, 254),
                S.CONSTANT: _rgb(100, 200, 200),

                S.PREPROCESSOR: _rgb(155, 155, 155),

                S.HTML_TAG: _rgb(86, 156, 214),
                S.HTML_TAG_DELIMITER: _rgb(128, 128, 128),
                S.HTML_ATTRIBUTE: _rgb(156, 220, 254),
                S.HTML_ATTRIBUTE_VALUE: _rgb(206, 145, 120),

                S.CSS_SELECTOR: _rgb(215, 186, 125),
                S.CSS_PROPERTY: _rgb(156, 220, 254),
                S.CSS_VALUE: _rgb(206, 145, 120),

                S.JSON_KEY: _rgb(156, 220, 254),

                S.ERROR: _rgb(244, 71, 71),
            },
            bold={S.KEYWORD},
            italic={S.COMMENT},
        )

    @staticmethod
    def monokai() -> StyleSheet:
        """Monokai style sheet."""
        return StyleSheet.from_colors(
            name="Monokai",
            background=_rgb(39, 40, 34),
            foreground=_rgb(248, 248, 242),
            colors={
                S.KEYWORD: _rgb(249, 38, 114),
                S.KEYWORD_CONSTANT: _rgb(174, 129, 255),
                S.KEYWORD_TYPE: _rgb(102, 217, 239),

                S.STRING: _rgb(230, 219, 116),
                S.STRING_ESCAPE: _rgb(174, 129, 255),

                S.NUMBER: _rgb(174, 129, 255),

                S.COMMENT: _rgb(117, 113, 94),

                S.FUNCTION: _rgb(166, 226, 46),
                S.CLASS: _rgb(102, 217, 239),
                S.DECORATOR: _rgb(166, 226, 46),
                S.CONSTANT: _rgb(174, 129, 255),

                S.HTML_TAG: _rgb(249, 38, 114),
                S.HTML_ATTRIBUTE: _rgb(166, 226, 46),
                S.CSS_PROPERTY: _rgb(102, 217, 239),
                S.JSON_KEY: _rgb(249, 38, 114),
            },
            italic={S.COMMENT},
        )

    @staticmethod
    def solarized_light() -> StyleSheet:
        """Solarized Light style sheet."""
        return StyleSheet.from_colors(
            name="Solarized Light",
            background=_rgb(253, 246, 227),
            foreground=_rgb(101, 123, 131),
            colors={
                S.KEYWORD: _rgb(133, 153, 0),
                S.KEYWORD_CONSTANT: _rgb(42, 161, 152),
                S.KEYWORD_TYPE: _rgb(181, 137, 0),

                S.STRING: _rgb(42, 161, 152),
                S.NUMBER: _rgb(42, 161, 152),

                S.COMMENT: _rgb(147, 161, 161),

                S.FUNCTION: _rgb(38, 139, 210),
                S.CLASS: _rgb(181, 137, 0),
                S.VARIABLE: _rgb(38, 139, 210),
                S.CONSTANT: _rgb(203, 75, 22),

                S.HTML_TAG: _rgb(38, 139, 210),
                S.HTML_ATTRIBUTE: _rgb(181, 137, 0),
            },
            bold={S.KEYWORD},
            italic={S.COMMENT},
        )

    @staticmethod
    def github() -> StyleSheet:
        """GitHub-style style sheet."""
        return StyleSheet.from_colors(
            name="GitHub",
            background=_rgb(255, 255, 255),
            foreground=_rgb(36, 41, 46),
            colors={
                S.KEYWORD: _rgb(215, 58, 73),
                S.KEYWORD_CONSTANT: _rgb(0, 92, 197),
                S.KEYWORD_TYPE: _rgb(0, 92, 197),

                S.STRING: _rgb(3, 47, 98),
                S.NUMBER: _rgb(0, 92, 197),

                S.COMMENT: _rgb(106, 115, 125),

                S.FUNCTION: _rgb(111, 66, 193),
                S.CLASS: _rgb(111, 66, 193),
                S.DECORATOR: _rgb(227, 98, 9),
                S.CONSTANT: _rgb(0, 92, 197),

                S.HTML_TAG: _rgb(34, 134, 58),
                S.HTML_ATTRIBUTE: _rgb(111, 66, 193),
            },
            bold={S.KEYWORD},
            italic={S.COMMENT},
        )

    _FACTORIES = {
        "Default Light": default_light,
        "Default Dark": default_dark,
        "Monokai": monokai,
        "Solarized Light": solarized_light,
        "GitHub": github,
    }

    @classmethod
    def names(cls) -> List[str]:
        """Names of the available style sheets."""
        return list(cls._FACTORIES)

    @classmethod
    def get(cls, name: str) -> StyleSheet:
        """Get a style sheet by name (case-insensitive); unknown names get the default."""
        for key, factory in cls._FACTORIES.items():
            if key.lower() == (name or "").lower():
                return factory.__func__()
        return cls.default_light()

    @classmethod
    def default(cls) -> StyleSheet:
        return cls.default_light()
