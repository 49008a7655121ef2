"""
Editor defaults stored in QSettings.

Usage:
    from botpath.settings import EDITOR_SETTINGS

    radius = EDITOR_SETTINGS.get("spline/radius")
    EDITOR_SETTINGS.set("editor/snap_value", 32.0)
    EDITOR_SETTINGS.reset_to_defaults()

Values not stored yet fall back to DEFAULTS, as do reads while Qt's
settings object is unavailable.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from PyQt5.QtCore import QSettings

ORGANIZATION = "Botpath"
APPLICATION = "Editor"

DEFAULTS: Dict[str, Any] = {
    "spline/radius": 4.0,
    "spline/sides": 3,
    "spline/subdivisions": 16,
    "spline/name": "",
    "point/tangent_magnitude": 512.0,
    "editor/snap_value": 64.0,
    "export/material_dir": "spline-gen",
}


class EditorSettings:
    """Persistent editor defaults.

    Pass an ini file path to keep the values out of the user's profile
    (tests, portable installs); otherwise the platform store is used.
    """

    def __init__(self, ini_path: Optional[str] = None):
        self._ini_path = ini_path
        self._settings = None

    def _get_settings(self) -> QSettings:
        """Get or create the QSettings instance.

        Recreated when the underlying C++ object has been deleted.
        """
        try:
            if self._settings is not None:
                self._settings.organizationName()
                return self._settings
        except RuntimeError:
            pass

        if self._ini_path is not None:
            self._settings = QSettings(str(self._ini_path), QSettings.IniFormat)
        else:
            self._settings = QSettings(ORGANIZATION, APPLICATION)
        return self._settings

    def get(self, key: str) -> Any:
        if key not in DEFAULTS:
            raise KeyError(f"unknown editor setting '{key}'")
        default = DEFAULTS[key]
        try:
            settings = self._get_settings()
            return settings.value(key, default, type=type(default))
        except RuntimeError:
            return default

    def set(self, key: str, value: Any):
        if key not in DEFAULTS:
            raise KeyError(f"unknown editor setting '{key}'")
        value = type(DEFAULTS[key])(value)
        try:
            settings = self._get_settings()
            settings.setValue(key, value)
            settings.sync()
        except RuntimeError:
            pass

    def get_all(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in DEFAULTS}

    def reset_to_defaults(self):
        try:
            settings = self._get_settings()
            for key in DEFAULTS:
                settings.remove(key)
            settings.sync()
        except RuntimeError:
            pass

    # Typed shortcuts for the values read on every edit
    @property
    def radius(self) -> float:
        return self.get("spline/radius")

    @property
    def sides(self) -> int:
        return self.get("spline/sides")

    @property
    def subdivisions(self) -> int:
        return self.get("spline/subdivisions")

    @property
    def spline_name(self) -> str:
        return self.get("spline/name")

    @property
    def tangent_magnitude(self) -> float:
        return self.get("point/tangent_magnitude")

    @property
    def snap_value(self) -> float:
        return self.get("editor/snap_value")

    @property
    def material_dir(self) -> str:
        return self.get("export/material_dir")


# Global singleton instance
EDITOR_SETTINGS = EditorSettings()
