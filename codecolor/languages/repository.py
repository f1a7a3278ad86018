"""
Registry of available languages.
"""

from __future__ import annotations

import os
from threading import RLock
from typing import Callable, Iterable, List, Optional

from codecolor.core import guard
from codecolor.core.errors import UnknownLanguageError
from codecolor.core.models import Language


class LanguageRepository:
    """
    Registry of language definitions.

    Languages are looked up by id, alias, file extension or first-line
    detection pattern. Languages registered with ``compiled=True`` are the
    ones the compiler caches and matches through a combined pattern.
    Observers are called with a language id whenever that id is replaced
    or removed.
    """

    def __init__(self, languages: Optional[Iterable[Language]] = None):
        self._languages: dict[str, Language] = {}
        self._compiled: set[str] = set()
        self._aliases: dict[str, str] = {}
        self._extension_map: dict[str, str] = {}
        self._observers: list[Callable[[str], None]] = []
        self._lock = RLock()

        for language in languages or ():
            self.register(language)

    def __contains__(self, language_id: str) -> bool:
        return self.find(language_id) is not None

    def __len__(self) -> int:
        return len(self._languages)

    def register(self, language: Language, compiled: bool = True) -> None:
        """Register (or replace) a language definition."""
        guard.arg_not_none(language, "language")
        with self._lock:
            replaced = language.id in self._languages
            if replaced:
                self._forget(language.id)

            self._languages[language.id] = language
            if compiled:
                self._compiled.add(language.id)
            for alias in language.aliases:
                self._aliases[alias] = language.id
            for ext in language.file_extensions:
                self._extension_map[ext] = language.id

        if replaced:
            self._notify_observers(language.id)

    def unregister(self, language_id: str) -> bool:
        """Remove a language; returns False if it was not registered."""
        key = language_id.lower()
        with self._lock:
            if key not in self._languages:
                return False
            self._forget(key)
        self._notify_observers(key)
        return True

    def _forget(self, language_id: str) -> None:
        del self._languages[language_id]
        self._compiled.discard(language_id)
        self._aliases = {a: i for a, i in self._aliases.items() if i != language_id}
        self._extension_map = {
            e: i for e, i in self._extension_map.items() if i != language_id
        }

    def find(self, id_or_alias: str) -> Optional[Language]:
        """Get a language by id or alias, or None."""
        if not isinstance(id_or_alias, str):
            return None
        key = id_or_alias.strip().lower()
        with self._lock:
            language = self._languages.get(key)
            if language is None and key in self._aliases:
                language = self._languages.get(self._aliases[key])
            return language

    def get(self, id_or_alias: str) -> Language:
        """Get a language by id or alias, raising if it is unknown."""
        guard.arg_not_none(id_or_alias, "language_id")
        language = self.find(id_or_alias)
        if language is None:
            raise UnknownLanguageError(str(id_or_alias))
        return language

    def is_compiled(self, language_id: str) -> bool:
        with self._lock:
            return language_id.lower() in self._compiled

    def find_for_file(self, filename: str) -> Optional[Language]:
        """Get a language for a file based on its extension."""
        _, ext = os.path.splitext(filename)
        ext = ext.lower()
        if not ext:
            return None

        with self._lock:
            language_id = self._extension_map.get(ext)
            if language_id:
                return self._languages.get(language_id)
        return None

    def detect(self, source: str) -> Optional[Language]:
        """Get the first language whose first-line pattern matches ``source``."""
        for language in self.all():
            if language.matches_first_line(source):
                return language
        return None

    def all(self) -> List[Language]:
        """All registered languages, in registration order."""
        with self._lock:
            return list(self._languages.values())

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._languages.keys())

    def extensions(self) -> List[str]:
        """All supported file extensions."""
        with self._lock:
            return list(self._extension_map.keys())

    def add_observer(self, callback: Callable[[str], None]) -> None:
        """Add a callback notified with the id of a replaced or removed language."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self, language_id: str) -> None:
        for callback in list(self._observers):
            callback(language_id)
