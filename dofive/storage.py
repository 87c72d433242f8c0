"""Slot persistence for the DoFive stores.

Each store serializes its whole collection into one named slot. A slot
holds a versioned envelope::

    {"version": 1, "state": {...}}

Documents without a version (or with ``version: 0``, the shape the mobile
app persisted) are migrated on load.
"""

from __future__ import annotations

import copy
import fcntl
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Protocol

import yaml

from dofive.errors import SchemaVersionError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

TASKS_SLOT = "dofive-tasks"
GOALS_SLOT = "dofive-goals"
HISTORY_SLOT = "dofive-history"
SETTINGS_SLOT = "dofive-settings"

# Where the collection lives inside a slot's state, for migrating bare lists.
_COLLECTION_KEYS = {
    TASKS_SLOT: "tasks",
    GOALS_SLOT: "goals",
    HISTORY_SLOT: "dailyProgress",
}

YAML_SLOTS = {SETTINGS_SLOT}


# ── File helpers ──────────────────────────────────────────────


def read_json(path: Path) -> dict[str, Any] | None:
    """Read a JSON file, returning None if missing or empty."""
    if not path.exists():
        return None
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return None
    return json.loads(text)


def read_yaml(path: Path) -> dict[str, Any] | None:
    """Read a YAML mapping, returning None if missing, empty or not a mapping."""
    if not path.exists():
        return None
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return None
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else None


def _atomic_write(path: Path, content: str, suffix: str) -> None:
    """Temp file + flock + rename, so readers never see a half-written slot."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.rename(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    _atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", suffix=".json")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, suffix=".yaml")


# ── Storage backends ──────────────────────────────────────────


class SlotStorage(Protocol):
    """Key-value blob store: one JSON-compatible document per slot key."""

    def load(self, key: str) -> dict[str, Any] | None: ...

    def save(self, key: str, doc: dict[str, Any]) -> None: ...


def slot_filename(key: str) -> str:
    return f"{key}.yaml" if key in YAML_SLOTS else f"{key}.json"


class FileSlotStorage:
    """One file per slot inside a workspace directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / slot_filename(key)

    def load(self, key: str) -> dict[str, Any] | None:
        path = self.path_for(key)
        if key in YAML_SLOTS:
            return read_yaml(path)
        return read_json(path)

    def save(self, key: str, doc: dict[str, Any]) -> None:
        path = self.path_for(key)
        if key in YAML_SLOTS:
            write_yaml_atomic(path, doc)
        else:
            write_json_atomic(path, doc)


class MemorySlotStorage:
    """In-process storage; documents are copied in and out like real blobs."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self.slots: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})
        self.save_count = 0

    def load(self, key: str) -> dict[str, Any] | None:
        doc = self.slots.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    def save(self, key: str, doc: dict[str, Any]) -> None:
        self.slots[key] = copy.deepcopy(doc)
        self.save_count += 1


# ── Envelope & migrations ─────────────────────────────────────


def _migrate_v0(key: str, state: Any) -> dict[str, Any]:
    """v0 slots carried the collection directly, sometimes as a bare list."""
    collection_key = _COLLECTION_KEYS.get(key)
    if isinstance(state, list):
        return {collection_key or "items": state}
    if not isinstance(state, dict):
        return {}
    if collection_key and not isinstance(state.get(collection_key), list):
        state = dict(state)
        state[collection_key] = []
    return state


MIGRATIONS: dict[int, Callable[[str, Any], dict[str, Any]]] = {
    0: _migrate_v0,
}


def unwrap(key: str, doc: Any) -> dict[str, Any] | None:
    """Return the current-version state held in a slot document."""
    if doc is None:
        return None
    if isinstance(doc, dict) and "state" in doc:
        version = int(doc.get("version", 0) or 0)
        state = doc["state"]
    else:
        version = 0
        state = doc

    if version > SCHEMA_VERSION:
        raise SchemaVersionError(
            f"Slot {key!r} was written by schema version {version}; "
            f"this build understands up to {SCHEMA_VERSION}."
        )
    if version < SCHEMA_VERSION:
        logger.info("Migrating slot %s from schema v%d to v%d", key, version, SCHEMA_VERSION)
    while version < SCHEMA_VERSION:
        state = MIGRATIONS[version](key, state)
        version += 1
    return state


def wrap(state: dict[str, Any]) -> dict[str, Any]:
    return {"version": SCHEMA_VERSION, "state": state}


def load_slot(storage: SlotStorage, key: str) -> dict[str, Any]:
    """Load and migrate a slot; an absent slot is an empty state."""
    return unwrap(key, storage.load(key)) or {}


def save_slot(storage: SlotStorage, key: str, state: dict[str, Any]) -> None:
    storage.save(key, wrap(state))
