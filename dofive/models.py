"""Typed dataclasses for the DoFive data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase on disk is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any


TASK_STATUSES = ("pending", "in_progress", "completed")
TASK_PRIORITIES = (1, 2, 3, 4, 5)  # 1 = highest

GOAL_TYPES = ("effort", "quantity", "hybrid")
GOAL_TIMEFRAMES = ("daily", "weekly", "monthly", "quarterly", "yearly", "custom")
DEFAULT_GOAL_COLOR = "#6366F1"

SESSION_TYPES = ("focus", "break")

THEMES = ("light", "dark", "system")
WEEK_START_DAYS = (0, 1, 6)  # Sunday, Monday, Saturday


def _opt_str(v: Any) -> str | None:
    return None if v is None else str(v)


def _number(v: Any, default: float = 0) -> float:
    if v is None:
        return default
    if isinstance(v, (int, float)):
        return v
    f = float(v)
    return int(f) if f.is_integer() else f


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    id: str = ""
    title: str = ""
    description: str | None = None
    priority: int = 3
    status: str = "pending"  # pending, in_progress, completed
    date: str = ""  # calendar day, YYYY-MM-DD
    goal_id: str | None = None
    time_spent: int = 0  # seconds
    estimated_time: int | None = None  # seconds
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        tags: list[str] = []
        for t in d.get("tags") or []:
            if str(t) not in tags:
                tags.append(str(t))
        est = d.get("estimatedTime")
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            description=_opt_str(d.get("description")),
            priority=int(d.get("priority", 3)),
            status=str(d.get("status", "pending")),
            date=str(d.get("date", "")),
            goal_id=_opt_str(d.get("goalId")),
            time_spent=int(d.get("timeSpent", 0) or 0),
            estimated_time=int(est) if est is not None else None,
            tags=tags,
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "status": self.status,
            "date": self.date,
            "timeSpent": self.time_spent,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            d["description"] = self.description
        if self.goal_id is not None:
            d["goalId"] = self.goal_id
        if self.estimated_time is not None:
            d["estimatedTime"] = self.estimated_time
        return d


# ── Goals ─────────────────────────────────────────────────────


@dataclass
class Milestone:
    id: str = ""
    title: str = ""
    completed: bool = False
    due_date: str | None = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Milestone:
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            completed=bool(d.get("completed", False)),
            due_date=_opt_str(d.get("dueDate")),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.due_date is not None:
            d["dueDate"] = self.due_date
        return d


@dataclass
class Goal:
    id: str = ""
    title: str = ""
    description: str | None = None
    type: str = "effort"  # effort, quantity, hybrid
    timeframe: str = "weekly"
    start_date: str = ""
    end_date: str = ""
    target: float = 0  # seconds for effort goals, units otherwise
    current: float = 0
    unit: str | None = None
    milestones: list[Milestone] = field(default_factory=list)
    color: str = DEFAULT_GOAL_COLOR
    archived: bool = False
    created_at: str = ""
    updated_at: str = ""

    def is_completed(self) -> bool:
        return not self.archived and self.current >= self.target

    def is_active(self, today: str) -> bool:
        return not self.archived and self.end_date >= today and self.current < self.target

    def is_overdue(self, today: str) -> bool:
        return not self.archived and self.end_date < today and self.current < self.target

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Goal:
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            description=_opt_str(d.get("description")),
            type=str(d.get("type", "effort")),
            timeframe=str(d.get("timeframe", "weekly")),
            start_date=str(d.get("startDate", "")),
            end_date=str(d.get("endDate", "")),
            target=_number(d.get("target")),
            current=_number(d.get("current")),
            unit=_opt_str(d.get("unit")),
            milestones=[Milestone.from_dict(m) for m in (d.get("milestones") or [])],
            color=str(d.get("color") or DEFAULT_GOAL_COLOR),
            archived=bool(d.get("archived", False)),
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "timeframe": self.timeframe,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "target": self.target,
            "current": self.current,
            "milestones": [m.to_dict() for m in self.milestones],
            "color": self.color,
            "archived": self.archived,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            d["description"] = self.description
        if self.unit is not None:
            d["unit"] = self.unit
        return d


# ── History ───────────────────────────────────────────────────


@dataclass
class DailyProgress:
    date: str = ""
    tasks_completed: int = 0
    time_spent: int = 0  # seconds
    focus_score: int = 0  # 0-100
    streak_count: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DailyProgress:
        return cls(
            date=str(d.get("date", "")),
            tasks_completed=int(d.get("tasksCompleted", 0) or 0),
            time_spent=int(d.get("timeSpent", 0) or 0),
            focus_score=int(d.get("focusScore", 0) or 0),
            streak_count=int(d.get("streakCount", 0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "tasksCompleted": self.tasks_completed,
            "timeSpent": self.time_spent,
            "focusScore": self.focus_score,
            "streakCount": self.streak_count,
        }


# ── Timer ─────────────────────────────────────────────────────


@dataclass
class TimerSession:
    id: str = ""
    task_id: str = ""
    start_time: str = ""
    end_time: str | None = None
    duration: int = 0  # seconds
    session_type: str = "focus"  # focus, break
    completed: bool = False

    @property
    def is_open(self) -> bool:
        return self.end_time is None and not self.completed

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "type": self.session_type,
            "completed": self.completed,
        }


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    theme: str = "system"
    reminder_enabled: bool = True
    reminder_time: str = "09:00"
    week_starts_on: int = 1  # 0 Sunday, 1 Monday, 6 Saturday
    show_completed_tasks: bool = True
    focus_mode: bool = False
    sound_enabled: bool = True
    vibration_enabled: bool = True
    max_daily_tasks: int = 5
    timezone: str = "UTC"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        defaults = cls()
        return cls(
            theme=str(d.get("theme", defaults.theme)),
            reminder_enabled=bool(d.get("reminderEnabled", defaults.reminder_enabled)),
            reminder_time=str(d.get("reminderTime", defaults.reminder_time)),
            week_starts_on=int(d.get("weekStartsOn", defaults.week_starts_on)),
            show_completed_tasks=bool(d.get("showCompletedTasks", defaults.show_completed_tasks)),
            focus_mode=bool(d.get("focusMode", defaults.focus_mode)),
            sound_enabled=bool(d.get("soundEnabled", defaults.sound_enabled)),
            vibration_enabled=bool(d.get("vibrationEnabled", defaults.vibration_enabled)),
            max_daily_tasks=int(d.get("maxDailyTasks", defaults.max_daily_tasks)),
            timezone=str(d.get("timezone", defaults.timezone)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "theme": self.theme,
            "reminderEnabled": self.reminder_enabled,
            "reminderTime": self.reminder_time,
            "weekStartsOn": self.week_starts_on,
            "showCompletedTasks": self.show_completed_tasks,
            "focusMode": self.focus_mode,
            "soundEnabled": self.sound_enabled,
            "vibrationEnabled": self.vibration_enabled,
            "maxDailyTasks": self.max_daily_tasks,
            "timezone": self.timezone,
        }


# ── Analytics ─────────────────────────────────────────────────


@dataclass
class PeriodStats:
    start: str = ""
    end: str = ""
    total_tasks: int = 0
    total_time: int = 0
    average_focus_score: float = 0.0
    active_days: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "totalTasks": self.total_tasks,
            "totalTime": self.total_time,
            "averageFocusScore": round(self.average_focus_score, 1),
            "activeDays": self.active_days,
        }


@dataclass
class AnalyticsSummary:
    today: str = ""
    current_streak: int = 0
    longest_streak: int = 0
    total_tasks_completed: int = 0
    total_time_spent: int = 0
    average_focus_score: float = 0.0
    productive_days: int = 0
    week: PeriodStats = field(default_factory=PeriodStats)
    month: PeriodStats = field(default_factory=PeriodStats)
    overdue_tasks: int = 0
    active_goals: int = 0
    completed_goals: int = 0
    overdue_goals: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "totalTasksCompleted": self.total_tasks_completed,
            "totalTimeSpent": self.total_time_spent,
            "averageFocusScore": round(self.average_focus_score, 1),
            "productiveDays": self.productive_days,
            "week": self.week.to_dict(),
            "month": self.month.to_dict(),
            "overdueTasks": self.overdue_tasks,
            "activeGoals": self.active_goals,
            "completedGoals": self.completed_goals,
            "overdueGoals": self.overdue_goals,
        }


def new_id(prefix: str) -> str:
    """Opaque unique id such as 'task_3f9c2a1b7d4e'."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
