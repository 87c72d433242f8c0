"""Goal store for DoFive: goals, progress, and embedded milestones."""

from __future__ import annotations

import logging
from typing import Any

from dofive.dates import is_valid_date
from dofive.errors import InvalidFieldError
from dofive.models import GOAL_TIMEFRAMES, GOAL_TYPES, Goal, Milestone, new_id
from dofive.scoring import clamp_progress, completion_percentage
from dofive.storage import GOALS_SLOT, SlotStorage, load_slot, save_slot
from dofive.workspace import Clock, make_clock, resolve_timezone, timestamp

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {"id", "createdAt", "updatedAt", "milestones"}
MILESTONE_PROTECTED_FIELDS = {"id", "createdAt"}


def validate_goal(goal: Goal) -> None:
    if goal.type not in GOAL_TYPES:
        raise InvalidFieldError(f"Invalid goal type: {goal.type!r}")
    if goal.timeframe not in GOAL_TIMEFRAMES:
        raise InvalidFieldError(f"Invalid timeframe: {goal.timeframe!r}")
    for label, day in (("startDate", goal.start_date), ("endDate", goal.end_date)):
        if not is_valid_date(day):
            raise InvalidFieldError(f"Invalid {label}: {day!r}")


class GoalStore:
    """Owns the goal collection; writes through to the goals slot."""

    def __init__(self, storage: SlotStorage, clock: Clock | None = None) -> None:
        self._storage = storage
        self._clock = clock or make_clock(resolve_timezone("UTC"))
        state = load_slot(storage, GOALS_SLOT)
        self.goals: list[Goal] = [Goal.from_dict(g) for g in state.get("goals", [])]

    def _save(self) -> None:
        save_slot(self._storage, GOALS_SLOT, {"goals": [g.to_dict() for g in self.goals]})

    def _now(self) -> str:
        return timestamp(self._clock())

    def _today(self) -> str:
        return self._clock().date().isoformat()

    def _touch(self, goal: Goal) -> Goal:
        goal.updated_at = self._now()
        self._save()
        return goal

    # ── Goal commands ──

    def add(self, draft: dict[str, Any]) -> str:
        """Create a goal; progress starts at 0 with no milestones, unarchived."""
        goal = Goal.from_dict(draft)
        now = self._now()
        goal.id = new_id("goal")
        goal.current = 0
        goal.milestones = []
        goal.archived = False
        goal.created_at = now
        goal.updated_at = now
        validate_goal(goal)
        self.goals.append(goal)
        self._save()
        return goal.id

    def update(self, goal_id: str, updates: dict[str, Any]) -> Goal | None:
        goal = self.get(goal_id)
        if goal is None:
            logger.debug("update: goal %s not found", goal_id)
            return None
        merged = goal.to_dict()
        merged.update({k: v for k, v in updates.items() if k not in PROTECTED_FIELDS})
        updated = Goal.from_dict(merged)
        validate_goal(updated)
        updated.current = clamp_progress(updated.current)
        for i, g in enumerate(self.goals):
            if g.id == goal_id:
                self.goals[i] = updated
                break
        return self._touch(updated)

    def delete(self, goal_id: str) -> bool:
        """Remove a goal. Tasks that point at it keep a dangling reference."""
        for i, g in enumerate(self.goals):
            if g.id == goal_id:
                self.goals.pop(i)
                self._save()
                return True
        logger.debug("delete: goal %s not found", goal_id)
        return False

    def archive(self, goal_id: str) -> Goal | None:
        return self._set_archived(goal_id, True)

    def unarchive(self, goal_id: str) -> Goal | None:
        return self._set_archived(goal_id, False)

    def _set_archived(self, goal_id: str, archived: bool) -> Goal | None:
        goal = self.get(goal_id)
        if goal is None:
            return None
        goal.archived = archived
        return self._touch(goal)

    def adjust_progress(self, goal_id: str, delta: float) -> Goal | None:
        """Add *delta* (may be negative); the result never drops below 0."""
        goal = self.get(goal_id)
        if goal is None:
            logger.debug("adjust_progress: goal %s not found", goal_id)
            return None
        goal.current = clamp_progress(goal.current + delta)
        return self._touch(goal)

    def reset_progress(self, goal_id: str) -> Goal | None:
        goal = self.get(goal_id)
        if goal is None:
            return None
        goal.current = 0
        return self._touch(goal)

    # ── Milestones ──

    def add_milestone(self, goal_id: str, title: str, due_date: str | None = None) -> str | None:
        goal = self.get(goal_id)
        if goal is None:
            logger.debug("add_milestone: goal %s not found", goal_id)
            return None
        if due_date is not None and not is_valid_date(due_date):
            raise InvalidFieldError(f"Invalid dueDate: {due_date!r}")
        milestone = Milestone(
            id=new_id("ms"),
            title=title,
            due_date=due_date,
            created_at=self._now(),
        )
        goal.milestones.append(milestone)
        self._touch(goal)
        return milestone.id

    def update_milestone(self, goal_id: str, milestone_id: str, updates: dict[str, Any]) -> Milestone | None:
        goal, idx = self._find_milestone(goal_id, milestone_id)
        if goal is None or idx is None:
            return None
        merged = goal.milestones[idx].to_dict()
        merged.update({k: v for k, v in updates.items() if k not in MILESTONE_PROTECTED_FIELDS})
        updated = Milestone.from_dict(merged)
        if updated.due_date is not None and not is_valid_date(updated.due_date):
            raise InvalidFieldError(f"Invalid dueDate: {updated.due_date!r}")
        goal.milestones[idx] = updated
        self._touch(goal)
        return updated

    def toggle_milestone(self, goal_id: str, milestone_id: str) -> Milestone | None:
        goal, idx = self._find_milestone(goal_id, milestone_id)
        if goal is None or idx is None:
            return None
        milestone = goal.milestones[idx]
        milestone.completed = not milestone.completed
        self._touch(goal)
        return milestone

    def delete_milestone(self, goal_id: str, milestone_id: str) -> bool:
        goal, idx = self._find_milestone(goal_id, milestone_id)
        if goal is None or idx is None:
            return False
        goal.milestones.pop(idx)
        self._touch(goal)
        return True

    def _find_milestone(self, goal_id: str, milestone_id: str) -> tuple[Goal | None, int | None]:
        goal = self.get(goal_id)
        if goal is None:
            logger.debug("milestone op: goal %s not found", goal_id)
            return None, None
        for i, m in enumerate(goal.milestones):
            if m.id == milestone_id:
                return goal, i
        logger.debug("milestone op: milestone %s not found on %s", milestone_id, goal_id)
        return goal, None

    # ── Queries ──

    def all(self) -> list[Goal]:
        return list(self.goals)

    def get(self, goal_id: str) -> Goal | None:
        for g in self.goals:
            if g.id == goal_id:
                return g
        return None

    def active(self, today: str | None = None) -> list[Goal]:
        today = today or self._today()
        return [g for g in self.goals if g.is_active(today)]

    def completed(self) -> list[Goal]:
        return [g for g in self.goals if g.is_completed()]

    def archived(self) -> list[Goal]:
        return [g for g in self.goals if g.archived]

    def overdue(self, today: str | None = None) -> list[Goal]:
        today = today or self._today()
        return [g for g in self.goals if g.is_overdue(today)]

    def by_timeframe(self, timeframe: str) -> list[Goal]:
        return [g for g in self.goals if g.timeframe == timeframe]

    def by_type(self, goal_type: str) -> list[Goal]:
        return [g for g in self.goals if g.type == goal_type]

    def search(self, query: str) -> list[Goal]:
        q = query.lower()
        return [
            g
            for g in self.goals
            if q in g.title.lower() or (g.description and q in g.description.lower())
        ]

    def progress(self, goal_id: str) -> float | None:
        goal = self.get(goal_id)
        return goal.current if goal else None

    def completion_percentage(self, goal_id: str) -> float | None:
        goal = self.get(goal_id)
        if goal is None:
            return None
        return completion_percentage(goal.current, goal.target)
