"""User settings store for DoFive."""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any

from dofive.errors import InvalidFieldError
from dofive.models import THEMES, WEEK_START_DAYS, Settings
from dofive.storage import SETTINGS_SLOT, SlotStorage, load_slot, save_slot

logger = logging.getLogger(__name__)

_FIELD_NAMES = {f.name for f in fields(Settings)}


def validate_settings(s: Settings) -> None:
    """Raise InvalidFieldError for values the rest of the core can't handle."""
    if s.theme not in THEMES:
        raise InvalidFieldError(f"Invalid theme: {s.theme!r}")
    if s.week_starts_on not in WEEK_START_DAYS:
        raise InvalidFieldError(f"week_starts_on must be one of {WEEK_START_DAYS}")
    if not isinstance(s.max_daily_tasks, int) or s.max_daily_tasks < 1:
        raise InvalidFieldError("max_daily_tasks must be a positive integer")


class SettingsStore:
    """Single settings object, persisted to the settings slot on every change."""

    def __init__(self, storage: SlotStorage) -> None:
        self._storage = storage
        self.settings = Settings.from_dict(load_slot(storage, SETTINGS_SLOT))

    def _save(self) -> None:
        save_slot(self._storage, SETTINGS_SLOT, self.settings.to_dict())

    def get(self) -> Settings:
        return self.settings

    def update(self, **changes: Any) -> Settings:
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise InvalidFieldError(f"Unknown settings: {', '.join(sorted(unknown))}")
        candidate = Settings(**{**self.settings.__dict__, **changes})
        validate_settings(candidate)
        self.settings = candidate
        self._save()
        return self.settings

    def reset(self) -> Settings:
        self.settings = Settings()
        self._save()
        logger.info("Settings reset to defaults")
        return self.settings
