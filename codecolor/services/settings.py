"""
Highlighting settings, persisted as JSON.

Unknown keys in the file are ignored, and missing or invalid values fall
back to their defaults, so a hand-edited file never stops the colorizer
from starting.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional


class OutputFormat(Enum):
    """Output formats; values are formatter registry names."""
    HTML = "html"
    HTML_CLASS = "html-class"

    @classmethod
    def from_string(cls, value: str) -> 'OutputFormat':
        """Match by value, then by name; anything else is HTML."""
        try:
            for fmt in cls:
                if fmt.value == value.lower():
                    return fmt
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.HTML


@dataclass
class HighlightSettings:
    """Settings for tokenizing and formatting."""
    max_nesting_depth: int = 64
    combine_rules: bool = True
    formatter: OutputFormat = OutputFormat.HTML
    style_sheet: str = "Default Light"
    css_class_prefix: str = "cc-"
    tab_width: Optional[int] = None


@dataclass
class EditorSettings:
    """Settings for live highlighting in Qt text documents."""
    style_sheet: str = "Default Light"
    font_family: str = "Consolas"
    font_size: int = 10
    prewarm_languages: list[str] = field(default_factory=lambda: [
        'python', 'javascript', 'html', 'css'
    ])


@dataclass
class ApplicationSettings:
    highlight: HighlightSettings = field(default_factory=HighlightSettings)
    editor: EditorSettings = field(default_factory=EditorSettings)


# =============================================================================
# Value checks
# =============================================================================

def _non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _positive_int(value: Any) -> bool:
    return _non_negative_int(value) and value > 0


def _string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


_CHECKS: dict[str, Callable[[Any], bool]] = {
    'max_nesting_depth': _non_negative_int,
    'combine_rules': lambda value: isinstance(value, bool),
    'style_sheet': lambda value: isinstance(value, str) and bool(value.strip()),
    'css_class_prefix': lambda value: isinstance(value, str),
    'tab_width': lambda value: value is None or _positive_int(value),
    'font_family': lambda value: isinstance(value, str) and bool(value.strip()),
    'font_size': _positive_int,
    'prewarm_languages': _string_list,
}


def _encode(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


def _load_section(section_type: type, data: Any, section: str) -> Any:
    """Build one settings dataclass from its JSON object."""
    defaults = section_type()
    if not isinstance(data, dict):
        if data is not None:
            logging.warning(f"SettingsManager - Section '{section}' is not an object; using defaults")
        return defaults

    values = {}
    for item in fields(section_type):
        if item.name not in data:
            continue
        value = data[item.name]
        if item.name == 'formatter':
            value = OutputFormat.from_string(value)
        elif not _CHECKS.get(item.name, lambda _: True)(value):
            logging.warning(
                f"SettingsManager - Ignoring invalid {section}.{item.name}: {value!r}"
            )
            continue
        values[item.name] = value
    return replace(defaults, **values)


class SettingsManager:
    """
    Loads and saves ``ApplicationSettings``.

    Observers are called with the new settings after every successful save.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None
        self._observers: list[Callable[[ApplicationSettings], None]] = []

    @staticmethod
    def _get_default_path() -> Path:
        if os.name == 'nt':
            base = Path(os.environ.get('APPDATA', os.path.expanduser('~')))
            return base / 'CodeColor' / 'settings.json'
        base = Path(os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config')))
        return base / 'codecolor' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Current settings, loaded on first access."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.error(f"SettingsManager - Failed to load {self.settings_path}: {e}")
            return ApplicationSettings()

        if not isinstance(data, dict):
            logging.error(f"SettingsManager - Failed to load {self.settings_path}: not a JSON object")
            return ApplicationSettings()

        return ApplicationSettings(
            highlight=_load_section(HighlightSettings, data.get('highlight'), 'highlight'),
            editor=_load_section(EditorSettings, data.get('editor'), 'editor'),
        )

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(settings), f, indent=2, default=_encode)
        except OSError as e:
            logging.error(f"SettingsManager - Failed to save {self.settings_path}: {e}")
            return False

        self._settings = settings
        self._notify_observers()
        return True

    def update_highlight(self, **changes: Any) -> bool:
        """Change some highlight settings and save."""
        current = self.settings
        return self.save(replace(current, highlight=replace(current.highlight, **changes)))

    def reset(self) -> ApplicationSettings:
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def add_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        for callback in list(self._observers):
            try:
                callback(self._settings)
            except Exception as e:
                logging.error(f"SettingsManager - Settings observer failed: {e}")
