"""
Language registry and built-in language definitions.

Provides:
- LanguageRepository: lookup by id, alias, file extension, first line
- default_repository(): the shared repository loaded with built-in languages
"""

from __future__ import annotations

from threading import Lock
from typing import Optional

from codecolor.languages.definitions import BUILTIN_LANGUAGES, SUPPORT_LANGUAGES
from codecolor.languages.repository import LanguageRepository


_default_repository: Optional[LanguageRepository] = None
_default_lock = Lock()


def load_builtin_languages(repository: LanguageRepository) -> LanguageRepository:
    """Register every built-in language (all as compiled languages)."""
    for language in BUILTIN_LANGUAGES + SUPPORT_LANGUAGES:
        repository.register(language, compiled=True)
    return repository


def default_repository() -> LanguageRepository:
    """The process-wide repository, created and loaded on first use."""
    global _default_repository
    repository = _default_repository
    if repository is not None:
        return repository
    with _default_lock:
        if _default_repository is None:
            _default_repository = load_builtin_languages(LanguageRepository())
        return _default_repository


__all__ = [
    'LanguageRepository',
    'default_repository',
    'load_builtin_languages',
]
