"""
Scope names for lexical categories.

A scope is a dotted name such as ``String.Quoted.Double``. Each dotted
prefix is an ancestor, so a style registered for ``String`` also covers
``String.Quoted.Double`` unless something more specific exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class Scope:
    """An immutable, hierarchical scope name."""
    name: str

    def __post_init__(self) -> None:
        if not self.name or any(not part for part in self.name.split('.')):
            raise ValueError(f"Invalid scope name: {self.name!r}")

    def __str__(self) -> str:
        return self.name

    @property
    def parts(self) -> tuple[str, ...]:
        return tuple(self.name.split('.'))

    @property
    def parent(self) -> Optional[Scope]:
        """The enclosing scope, or None for a root scope."""
        head, sep, _ = self.name.rpartition('.')
        return Scope(head) if sep else None

    def lineage(self) -> Iterator[str]:
        """Yield this name, then each ancestor name, innermost first."""
        name = self.name
        while True:
            yield name
            name, sep, _ = name.rpartition('.')
            if not sep:
                return

    def is_within(self, other: Scope | str) -> bool:
        """True if this scope equals ``other`` or descends from it."""
        other_name = other.name if isinstance(other, Scope) else other
        return self.name == other_name or self.name.startswith(other_name + '.')


class ScopeName:
    """Well-known scope names used by the built-in grammars and style sheets."""

    PLAIN = "Plain"

    KEYWORD = "Keyword"
    KEYWORD_CONSTANT = "Keyword.Constant"
    KEYWORD_TYPE = "Keyword.Type"
    KEYWORD_CONTROL = "Keyword.Control"
    KEYWORD_OPERATOR = "Keyword.Operator"
    KEYWORD_DECLARATION = "Keyword.Declaration"

    STRING = "String"
    STRING_QUOTED = "String.Quoted"
    STRING_QUOTED_DOUBLE = "String.Quoted.Double"
    STRING_QUOTED_SINGLE = "String.Quoted.Single"
    STRING_QUOTED_TRIPLE = "String.Quoted.Triple"
    STRING_TEMPLATE = "String.Template"
    STRING_ESCAPE = "String.Escape"
    STRING_INTERPOLATION = "String.Interpolation"
    STRING_REGEX = "String.Regex"

    NUMBER = "Number"
    NUMBER_FLOAT = "Number.Float"
    NUMBER_HEX = "Number.Hex"
    NUMBER_BINARY = "Number.Binary"
    NUMBER_OCTAL = "Number.Octal"

    COMMENT = "Comment"
    COMMENT_LINE = "Comment.Line"
    COMMENT_BLOCK = "Comment.Block"
    COMMENT_DOC = "Comment.Doc"
    COMMENT_TODO = "Comment.Todo"

    OPERATOR = "Operator"
    DELIMITER = "Delimiter"
    BRACKET = "Delimiter.Bracket"

    FUNCTION = "Name.Function"
    FUNCTION_BUILTIN = "Name.Function.Builtin"
    CLASS = "Name.Class"
    DECORATOR = "Name.Decorator"
    VARIABLE = "Name.Variable"
    VARIABLE_SPECIAL = "Name.Variable.Special"
    CONSTANT = "Name.Constant"

    PREPROCESSOR = "Preprocessor"

    HTML_TAG_DELIMITER = "Markup.Tag.Delimiter"
    HTML_TAG = "Markup.Tag"
    HTML_ATTRIBUTE = "Markup.Attribute"
    HTML_ATTRIBUTE_VALUE = "Markup.Attribute.Value"
    HTML_ENTITY = "Markup.Entity"
    HTML_COMMENT = "Comment.Markup"
    HTML_DOCTYPE = "Markup.Doctype"

    CSS_SELECTOR = "Css.Selector"
    CSS_PROPERTY = "Css.Property"
    CSS_VALUE = "Css.Value"

    JSON_KEY = "Json.Key"

    EMBEDDED = "Embedded"

    ERROR = "Error"
