"""
Core data models for the tokenization engine.

This module defines the grammar and output structures:
- Rule and Language (grammar definitions, supplied by language tables)
- CompiledRule and CompiledLanguage (build-once matching artifacts)
- Capture (one scoped span of the tokenizer's output)

Grammar definitions and compiled artifacts are immutable; compiled
artifacts are shared between threads by reference.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from re import Pattern
from typing import Mapping, Optional, Sequence, Union


CaptureKey = Union[int, str]


# =============================================================================
# Grammar Models
# =============================================================================

@dataclass(frozen=True)
class Rule:
    """
    A matching rule owned by a Language.

    ``captures`` maps a group of ``pattern`` (index or name) to a scope
    name; a plain string is shorthand for ``{0: scope}``. When
    ``nested_language`` is set, a match opens a region scanned with that
    language until ``end_pattern`` matches. Patterns are always compiled
    with ``re.MULTILINE`` in addition to ``flags``.
    """
    pattern: str
    captures: Union[Mapping[CaptureKey, str], str] = field(default_factory=dict)
    nested_language: Optional[Union[str, Language]] = None
    end_pattern: Optional[str] = None
    end_captures: Optional[Union[Mapping[CaptureKey, str], str]] = None
    nested_scope: Optional[str] = None
    flags: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, 'captures', _normalize_captures(self.captures))
        if self.end_captures is not None:
            object.__setattr__(self, 'end_captures', _normalize_captures(self.end_captures))

    @property
    def is_nesting(self) -> bool:
        return self.nested_language is not None

    @property
    def nested_language_id(self) -> Optional[str]:
        if self.nested_language is None:
            return None
        if isinstance(self.nested_language, Language):
            return self.nested_language.id
        return self.nested_language.lower()

    @property
    def effective_end_captures(self) -> Mapping[CaptureKey, str]:
        """Scopes for the end pattern; inherits ``captures`` when unset."""
        if self.end_captures is None:
            return self.captures
        return self.end_captures


def _normalize_captures(captures: Union[Mapping[CaptureKey, str], str, None]) -> dict:
    if captures is None:
        return {}
    if isinstance(captures, str):
        return {0: captures}
    return dict(captures)


@dataclass(frozen=True)
class Language:
    """
    An ordered, named set of rules.

    Rule priority is list order: when two rules match at the same
    position, the earlier one wins.
    """
    id: str
    rules: Sequence[Rule] = ()
    name: str = ""
    first_line_pattern: Optional[str] = None
    aliases: Sequence[str] = ()
    file_extensions: Sequence[str] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("Language id cannot be empty")
        object.__setattr__(self, 'id', self.id.strip().lower())
        object.__setattr__(self, 'rules', tuple(self.rules))
        object.__setattr__(self, 'aliases', tuple(a.lower() for a in self.aliases))
        object.__setattr__(
            self, 'file_extensions', tuple(e.lower() for e in self.file_extensions)
        )
        if not self.name:
            object.__setattr__(self, 'name', self.id)

    def matches_first_line(self, source: str) -> bool:
        """Check the detection pattern against the first line of ``source``."""
        if not self.first_line_pattern or not source:
            return False
        first_line = source.split('\n', 1)[0]
        return re.search(self.first_line_pattern, first_line) is not None

    def __repr__(self) -> str:
        return f"Language(id={self.id!r}, rules={len(self.rules)})"


# =============================================================================
# Compiled Models
# =============================================================================

@dataclass(frozen=True)
class CompiledRule:
    """
    A rule with its patterns compiled and capture keys resolved.

    ``group_offset`` is where the rule's group 0 lives in the match object
    that located it: 0 when the rule is matched on its own, the wrapper
    group's index when matched through a combined pattern. Rule group ``k``
    is then match group ``group_offset + k``.
    """
    index: int
    rule: Rule
    regex: Pattern
    group_offset: int
    scopes: tuple[tuple[int, str], ...]
    nested_language: Optional[Language] = None
    end_regex: Optional[Pattern] = None
    end_scopes: tuple[tuple[int, str], ...] = ()

    @property
    def is_nesting(self) -> bool:
        return self.nested_language is not None


@dataclass(frozen=True)
class CompiledLanguage:
    """
    Build-once matching artifact for a Language.

    When ``combined`` is set, one search over it finds the earliest match of
    any rule, and ``rule_for_group`` maps the wrapper group that matched back
    to the rule. Without it, rules are searched one by one in priority order.
    """
    language: Language
    rules: tuple[CompiledRule, ...]
    combined: Optional[Pattern] = None
    rule_for_group: Mapping[int, CompiledRule] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.language.id

    @property
    def is_combined(self) -> bool:
        return self.combined is not None


# =============================================================================
# Output Models
# =============================================================================

@dataclass(frozen=True)
class Capture:
    """
    One span of tokenizer output.

    ``scopes`` is the scope path, outermost first; it is empty for unscoped
    text. ``depth`` is the number of nested-language regions open around
    the span.
    """
    start: int
    end: int
    text: str
    scopes: tuple[str, ...] = ()
    depth: int = 0

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def scope(self) -> Optional[str]:
        """Innermost scope, or None for unscoped text."""
        return self.scopes[-1] if self.scopes else None

    def as_tuple(self) -> tuple[str, list[str]]:
        """(text, scope path) pair, handy for comparisons."""
        return (self.text, list(self.scopes))
