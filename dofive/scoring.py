"""Streaks, heatmap intensity, focus score, and progress clamps for DoFive.

Pure functions over DailyProgress-like rows (anything with ``date``,
``tasks_completed`` and ``time_spent`` attributes).
"""

from __future__ import annotations

from typing import Any, Iterable

from dofive.dates import add_days, days_between

# Heatmap levels
NONE, LOW, MEDIUM, HIGH, MAX = 0, 1, 2, 3, 4
LEVEL_NAMES = {NONE: "none", LOW: "low", MEDIUM: "medium", HIGH: "high", MAX: "max"}

DEFAULT_MAX_TASKS = 5
DEFAULT_MAX_TIME = 8 * 60 * 60


def qualifying_dates(rows: Iterable[Any]) -> set[str]:
    """Days that count toward a streak: at least one task completed."""
    return {r.date for r in rows if r.tasks_completed > 0}


def current_streak(rows: Iterable[Any], today: str) -> int:
    """Consecutive qualifying days walking backward from *today*.

    A missing or empty row for *today* yields 0.
    """
    days = qualifying_dates(rows)
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor = add_days(cursor, -1)
    return streak


def longest_streak(rows: Iterable[Any]) -> int:
    ordered = sorted(qualifying_dates(rows))
    if not ordered:
        return 0
    best = run = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if days_between(prev, cur) == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
    return best


def heatmap_ratio(
    row: Any | None,
    max_tasks: int = DEFAULT_MAX_TASKS,
    max_time: int = DEFAULT_MAX_TIME,
) -> float:
    if row is None:
        return 0.0
    task_part = row.tasks_completed / max_tasks if max_tasks > 0 else 0.0
    time_part = row.time_spent / max_time if max_time > 0 else 0.0
    return (task_part + time_part) / 2


def heatmap_level(
    row: Any | None,
    max_tasks: int = DEFAULT_MAX_TASKS,
    max_time: int = DEFAULT_MAX_TIME,
) -> int:
    """Bucket a day into 0..4; an absent row is level 0."""
    ratio = heatmap_ratio(row, max_tasks, max_time)
    if ratio <= 0:
        return NONE
    if ratio < 0.25:
        return LOW
    if ratio < 0.5:
        return MEDIUM
    if ratio < 0.75:
        return HIGH
    return MAX


def focus_score(
    tasks_completed: int,
    time_spent: int,
    max_tasks: int = DEFAULT_MAX_TASKS,
    max_time: int = DEFAULT_MAX_TIME,
) -> int:
    """0-100 score derived from the same blend the heatmap uses."""
    task_part = min(tasks_completed / max_tasks, 1.0) if max_tasks > 0 else 0.0
    time_part = min(time_spent / max_time, 1.0) if max_time > 0 else 0.0
    return round((task_part + time_part) / 2 * 100)


# ── Clamps ────────────────────────────────────────────────────


def clamp_progress(value: float) -> float:
    """Goal progress never goes below zero; there is no ceiling."""
    return max(0, value)


def completion_percentage(current: float, target: float) -> float:
    """min(current/target, 1) * 100, with a zero target meaning 0%."""
    if target <= 0:
        return 0.0
    return min(current / target, 1.0) * 100
