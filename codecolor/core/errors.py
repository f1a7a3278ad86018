"""
Exceptions raised by the tokenization engine.

- PreconditionError: a required argument is missing or invalid
- UnknownLanguageError: a language id is not registered
- GrammarError: a language definition is malformed (raised at compile time)
- NestingDepthExceededError: nested-language activations exceeded the bound
"""

from __future__ import annotations

from typing import Optional, Sequence


class CodeColorError(Exception):
    """Base class for all codecolor errors."""
    pass


class PreconditionError(CodeColorError, ValueError):
    """Raised when a required argument is missing or has the wrong type."""

    def __init__(self, argument: str, message: Optional[str] = None):
        self.argument = argument
        super().__init__(message or f"Argument '{argument}' is required")


class UnknownLanguageError(PreconditionError, LookupError):
    """Raised when a language id or alias is not registered."""

    def __init__(self, language_id: str):
        self.language_id = language_id
        super().__init__("language", f"Unknown language: {language_id!r}")


class GrammarError(CodeColorError):
    """
    Raised when a language definition cannot be compiled.

    Carries the offending language id and, when the problem belongs to a
    single rule, that rule's index in the language's rule list.
    """

    def __init__(
        self,
        language_id: str,
        message: str,
        rule_index: Optional[int] = None
    ):
        self.language_id = language_id
        self.rule_index = rule_index
        where = f"language {language_id!r}"
        if rule_index is not None:
            where += f", rule {rule_index}"
        super().__init__(f"{where}: {message}")


class NestingDepthExceededError(CodeColorError):
    """
    Raised when a scan would push more nested languages than allowed.

    Captures produced before the failure have already been delivered.
    """

    def __init__(self, max_depth: int, position: int, language_stack: Sequence[str]):
        self.max_depth = max_depth
        self.position = position
        self.language_stack = tuple(language_stack)
        super().__init__(
            f"Nested language depth exceeded {max_depth} at position {position} "
            f"(stack: {' > '.join(self.language_stack)})"
        )
