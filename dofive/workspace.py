"""Workspace root, timezone, and clock helpers for DoFive."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from dofive.storage import SETTINGS_SLOT, read_yaml, slot_filename

Clock = Callable[[], datetime]


def workspace_root() -> Path:
    """Directory holding the slot files; DOFIVE_ROOT overrides ~/dofive."""
    return Path(
        os.environ.get("DOFIVE_ROOT", str(Path.home() / "dofive"))
    ).expanduser().resolve()


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / slot_filename(SETTINGS_SLOT)


def resolve_timezone(name: str | None) -> ZoneInfo:
    """ZoneInfo for *name*, falling back to UTC for unknown or empty names."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Timezone from the settings slot, defaulting to UTC."""
    try:
        doc = read_yaml(settings_path(root)) or {}
    except (OSError, yaml.YAMLError):
        doc = {}
    state = doc.get("state", doc)
    name = state.get("timezone") if isinstance(state, dict) else None
    return resolve_timezone(name)


def make_clock(tz: ZoneInfo) -> Clock:
    def clock() -> datetime:
        return datetime.now(tz)

    return clock


def now_local(root: Path | None = None) -> datetime:
    return datetime.now(get_user_timezone(root))


def today_str(root: Path | None = None) -> str:
    """Today's date string (YYYY-MM-DD) in the user's timezone."""
    return now_local(root).date().isoformat()


def timestamp(now: datetime) -> str:
    return now.isoformat(timespec="milliseconds")
