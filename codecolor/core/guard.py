"""
Argument checks shared by the public entry points.
"""

from __future__ import annotations

from typing import Any

from codecolor.core.errors import PreconditionError


def arg_not_none(value: Any, name: str) -> None:
    """Fail if a required argument is None."""
    if value is None:
        raise PreconditionError(name)


def arg_is_str(value: Any, name: str) -> None:
    """Fail unless the argument is a string (empty is fine)."""
    if value is None:
        raise PreconditionError(name)
    if not isinstance(value, str):
        raise PreconditionError(
            name, f"Argument '{name}' must be a str, not {type(value).__name__}"
        )


def arg_not_empty(value: Any, name: str) -> None:
    """Fail if a required string argument is None or blank."""
    arg_is_str(value, name)
    if not value.strip():
        raise PreconditionError(name, f"Argument '{name}' cannot be empty")


def arg_positive(value: int, name: str) -> None:
    """Fail unless the argument is a positive int."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise PreconditionError(name, f"Argument '{name}' must be a positive integer")
