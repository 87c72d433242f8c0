"""Shared test fixtures for DoFive tests."""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from dofive.context import AppContext
from dofive.storage import MemorySlotStorage


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, days: int = 0) -> None:
        self.now = self.now + timedelta(seconds=seconds, days=days)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 10, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage() -> MemorySlotStorage:
    return MemorySlotStorage()


@pytest.fixture
def ctx(storage: MemorySlotStorage, clock: FakeClock) -> AppContext:
    return AppContext.create(storage, clock)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace directory with settings and one task already on disk."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    settings = {
        "version": 1,
        "state": {"timezone": "UTC", "maxDailyTasks": 3, "weekStartsOn": 1},
    }
    (root / "dofive-settings.yaml").write_text(
        yaml.safe_dump(settings, default_flow_style=False), encoding="utf-8"
    )

    tasks = {
        "version": 1,
        "state": {
            "tasks": [
                {
                    "id": "task_seed",
                    "title": "Write report",
                    "priority": 2,
                    "status": "pending",
                    "date": "2024-01-10",
                    "timeSpent": 600,
                    "tags": ["work"],
                    "createdAt": "2024-01-09T08:00:00.000+00:00",
                    "updatedAt": "2024-01-09T08:00:00.000+00:00",
                }
            ]
        },
    }
    (root / "dofive-tasks.json").write_text(json.dumps(tasks, indent=2), encoding="utf-8")

    os.environ["DOFIVE_ROOT"] = str(root)
    yield root
    if "DOFIVE_ROOT" in os.environ:
        del os.environ["DOFIVE_ROOT"]
