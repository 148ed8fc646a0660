"""Persistence for the user-facing plugin settings."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from imgman.models.settings import PluginSettings


logger = logging.getLogger(__name__)


class SettingsError(Exception):
    """Raised when the settings file cannot be read or is invalid."""
    pass


class SettingsStore:
    """Loads and saves :class:`PluginSettings` as JSON.

    Stored values are merged over the defaults, so a file written by an older
    version (or a partial file written by hand) still loads. Every change made
    through :meth:`update` is written to disk immediately.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._settings: Optional[PluginSettings] = None

    @property
    def settings(self) -> PluginSettings:
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> PluginSettings:
        if not self.path.exists():
            logger.debug(f"No settings file at {self.path}, using defaults")
            self._settings = PluginSettings()
            return self._settings

        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsError(f"Cannot read settings file {self.path}: {e}")

        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {self.path} must contain a JSON object")

        try:
            self._settings = PluginSettings.model_validate(data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings in {self.path}: {e}")

        logger.debug(f"Loaded settings from {self.path}: {self._settings.model_dump()}")
        return self._settings

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.settings.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Saved settings to {self.path}")

    def update(self, **changes: Any) -> PluginSettings:
        """Apply changes to the current settings and persist them.

        All changes are validated together; on error the current settings
        are left as they were.
        """
        unknown = [key for key in changes if key not in PluginSettings.model_fields]
        if unknown:
            raise SettingsError(f"Unknown setting: {', '.join(unknown)}")

        try:
            updated = PluginSettings.model_validate({**self.settings.model_dump(), **changes})
        except ValidationError as e:
            raise SettingsError(f"Invalid setting value: {e}")

        self._settings = updated
        self.save()
        return updated
