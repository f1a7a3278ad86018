"""
Application services.

Provides:
- SettingsManager: JSON-backed settings with change observers
"""

from codecolor.services.settings import (
    ApplicationSettings,
    EditorSettings,
    HighlightSettings,
    OutputFormat,
    SettingsManager,
)

__all__ = [
    'ApplicationSettings',
    'EditorSettings',
    'HighlightSettings',
    'OutputFormat',
    'SettingsManager',
]
