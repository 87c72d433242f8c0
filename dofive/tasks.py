"""Task store for DoFive: CRUD, tags, and per-day aggregates.

Operations addressed to an unknown id are no-ops that return None/False.
Cross-store effects (goal progress, timer commits) live in
dofive.coordination, never here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from dofive.dates import is_valid_date, parse_date
from dofive.errors import InvalidFieldError, InvalidTimeDeltaError
from dofive.models import TASK_PRIORITIES, TASK_STATUSES, Task, new_id
from dofive.storage import TASKS_SLOT, SlotStorage, load_slot, save_slot
from dofive.workspace import Clock, make_clock, resolve_timezone, timestamp

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {"id", "createdAt"}


# ── Validation ────────────────────────────────────────────────


def validate_task(task: Task) -> None:
    """Raise InvalidFieldError if *task* breaks a data-model invariant."""
    if task.status not in TASK_STATUSES:
        raise InvalidFieldError(f"Invalid status: {task.status!r}")
    if task.priority not in TASK_PRIORITIES:
        raise InvalidFieldError(f"priority must be 1-5, got {task.priority!r}")
    if not is_valid_date(task.date):
        raise InvalidFieldError(f"Invalid task date: {task.date!r}")
    if task.time_spent < 0:
        raise InvalidTimeDeltaError("time_spent cannot be negative")


def _created_instant(created_at: str) -> datetime:
    """Creation time as an aware UTC datetime; unparseable values sort first."""
    try:
        dt = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _sort_key(task: Task) -> tuple[int, datetime]:
    return task.priority, _created_instant(task.created_at)


# ── Store ─────────────────────────────────────────────────────


class TaskStore:
    """Owns the task collection; writes through to the tasks slot."""

    def __init__(self, storage: SlotStorage, clock: Clock | None = None) -> None:
        self._storage = storage
        self._clock = clock or make_clock(resolve_timezone("UTC"))
        state = load_slot(storage, TASKS_SLOT)
        self.tasks: list[Task] = [Task.from_dict(t) for t in state.get("tasks", [])]

    def _save(self) -> None:
        save_slot(self._storage, TASKS_SLOT, {"tasks": [t.to_dict() for t in self.tasks]})

    def _now(self) -> str:
        return timestamp(self._clock())

    def _today(self) -> str:
        return self._clock().date().isoformat()

    def _touch(self, task: Task) -> Task:
        task.updated_at = self._now()
        self._save()
        return task

    # ── Commands ──

    def add(self, draft: dict[str, Any]) -> str:
        """Create a task from a draft; status starts pending with no time logged."""
        task = Task.from_dict(draft)
        now = self._now()
        task.id = new_id("task")
        task.status = "pending"
        task.time_spent = 0
        task.created_at = now
        task.updated_at = now
        validate_task(task)
        self.tasks.append(task)
        self._save()
        logger.debug("Added task %s for %s", task.id, task.date)
        return task.id

    def update(self, task_id: str, updates: dict[str, Any]) -> Task | None:
        """Merge camelCase *updates* into a task. id and createdAt are never changed."""
        task = self.get(task_id)
        if task is None:
            logger.debug("update: task %s not found", task_id)
            return None

        ignored = PROTECTED_FIELDS & set(updates)
        if ignored:
            logger.warning("update: ignoring protected fields %s on %s", sorted(ignored), task_id)
        merged = task.to_dict()
        merged.update({k: v for k, v in updates.items() if k not in PROTECTED_FIELDS})

        updated = Task.from_dict(merged)
        validate_task(updated)
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                self.tasks[i] = updated
                break
        return self._touch(updated)

    def delete(self, task_id: str) -> bool:
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                self.tasks.pop(i)
                self._save()
                return True
        logger.debug("delete: task %s not found", task_id)
        return False

    def set_status(self, task_id: str, status: str) -> Task | None:
        if status not in TASK_STATUSES:
            raise InvalidFieldError(f"Invalid status: {status!r}")
        task = self.get(task_id)
        if task is None:
            logger.debug("set_status: task %s not found", task_id)
            return None
        task.status = status
        return self._touch(task)

    def add_time(self, task_id: str, seconds: int) -> Task | None:
        """Add *seconds* to a task's running total. Negative deltas are rejected."""
        if seconds < 0:
            logger.warning("add_time: rejected negative delta %s for %s", seconds, task_id)
            raise InvalidTimeDeltaError(f"Time delta must be non-negative, got {seconds}")
        task = self.get(task_id)
        if task is None:
            logger.debug("add_time: task %s not found", task_id)
            return None
        if seconds == 0:
            return task
        task.time_spent += int(seconds)
        return self._touch(task)

    def move_to_date(self, task_id: str, day: str) -> Task | None:
        parse_date(day)
        task = self.get(task_id)
        if task is None:
            logger.debug("move_to_date: task %s not found", task_id)
            return None
        task.date = day
        return self._touch(task)

    def duplicate(self, task_id: str, new_date: str | None = None) -> str | None:
        """Copy a task (optionally onto another day) with status and time reset."""
        source = self.get(task_id)
        if source is None:
            logger.debug("duplicate: task %s not found", task_id)
            return None
        draft = source.to_dict()
        if new_date is not None:
            draft["date"] = new_date
        return self.add(draft)

    def add_tag(self, task_id: str, tag: str) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        if tag in task.tags:
            return task
        task.tags.append(tag)
        return self._touch(task)

    def remove_tag(self, task_id: str, tag: str) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        if tag not in task.tags:
            return task
        task.tags.remove(tag)
        return self._touch(task)

    # ── Queries ──

    def all(self) -> list[Task]:
        return list(self.tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def by_date(self, day: str) -> list[Task]:
        """Tasks for a day, highest priority first, then oldest first.

        The first max_daily_tasks entries of this ordering are the day's cap.
        """
        return sorted((t for t in self.tasks if t.date == day), key=_sort_key)

    def by_goal(self, goal_id: str) -> list[Task]:
        return [t for t in self.tasks if t.goal_id == goal_id]

    def by_tag(self, tag: str) -> list[Task]:
        return [t for t in self.tasks if tag in t.tags]

    def by_priority(self, priority: int) -> list[Task]:
        return [t for t in self.tasks if t.priority == priority]

    def count_by_date(self, day: str) -> int:
        return sum(1 for t in self.tasks if t.date == day)

    def completed_count_by_date(self, day: str) -> int:
        return sum(1 for t in self.tasks if t.date == day and t.is_completed)

    def time_spent_by_date(self, day: str) -> int:
        return sum(t.time_spent for t in self.tasks if t.date == day)

    def overdue(self, today: str | None = None) -> list[Task]:
        today = today or self._today()
        return [t for t in self.tasks if t.date < today and not t.is_completed]

    def search(self, query: str) -> list[Task]:
        """Case-insensitive substring match over title, description and tags."""
        q = query.lower()
        return [
            t
            for t in self.tasks
            if q in t.title.lower()
            or (t.description and q in t.description.lower())
            or any(q in tag.lower() for tag in t.tags)
        ]

    def all_tags(self) -> list[str]:
        return sorted({tag for t in self.tasks for tag in t.tags})
