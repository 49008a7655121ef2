"""
Editor settings backed by QSettings.
"""

from .editor_settings import (
    EditorSettings,
    EDITOR_SETTINGS,
    DEFAULTS,
)

__all__ = [
    'EditorSettings',
    'EDITOR_SETTINGS',
    'DEFAULTS',
]
