"""Per-day progress history for DoFive: streaks, totals, period stats, heatmap.

One DailyProgress row per calendar day. Rows are upserted by the caller
whenever today's task aggregates change. The stored ``streak_count`` is
informational; streak queries always recompute from the rows.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dofive.dates import date_span, month_range, parse_date, week_range
from dofive.errors import InvalidFieldError, InvalidTimeDeltaError
from dofive.models import DailyProgress, PeriodStats
from dofive.scoring import (
    DEFAULT_MAX_TASKS,
    DEFAULT_MAX_TIME,
    current_streak,
    heatmap_level,
    longest_streak,
)
from dofive.storage import HISTORY_SLOT, SlotStorage, load_slot, save_slot
from dofive.workspace import Clock, make_clock, resolve_timezone

logger = logging.getLogger(__name__)


def average_focus_score(rows: Iterable[DailyProgress]) -> float:
    """Mean over rows with a positive score; rows scoring 0 are not samples."""
    scores = [r.focus_score for r in rows if r.focus_score > 0]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def period_stats(rows: list[DailyProgress], start: str, end: str) -> PeriodStats:
    scoped = [r for r in rows if start <= r.date <= end]
    return PeriodStats(
        start=start,
        end=end,
        total_tasks=sum(r.tasks_completed for r in scoped),
        total_time=sum(r.time_spent for r in scoped),
        average_focus_score=average_focus_score(scoped),
        active_days=sum(1 for r in scoped if r.tasks_completed > 0),
    )


class HistoryStore:
    """Owns the daily progress rows; writes through to the history slot."""

    def __init__(self, storage: SlotStorage, clock: Clock | None = None) -> None:
        self._storage = storage
        self._clock = clock or make_clock(resolve_timezone("UTC"))
        state = load_slot(storage, HISTORY_SLOT)
        self.rows: list[DailyProgress] = [
            DailyProgress.from_dict(r) for r in state.get("dailyProgress", [])
        ]

    def _save(self) -> None:
        save_slot(
            self._storage,
            HISTORY_SLOT,
            {"dailyProgress": [r.to_dict() for r in self.rows]},
        )

    def _today(self) -> str:
        return self._clock().date().isoformat()

    # ── Commands ──

    def upsert_daily_progress(
        self,
        day: str,
        tasks_completed: int,
        time_spent: int,
        focus_score: int | None = None,
    ) -> DailyProgress:
        """Update the row for *day* in place, or insert it.

        Leaving *focus_score* as None keeps the row's existing score.
        """
        parse_date(day)
        if tasks_completed < 0 or time_spent < 0:
            raise InvalidTimeDeltaError("Daily totals cannot be negative")
        if focus_score is not None and not 0 <= focus_score <= 100:
            raise InvalidFieldError(f"focus_score must be 0-100, got {focus_score}")

        row = self.get(day)
        if row is None:
            row = DailyProgress(date=day)
            self.rows.append(row)
        row.tasks_completed = int(tasks_completed)
        row.time_spent = int(time_spent)
        if focus_score is not None:
            row.focus_score = int(focus_score)
        row.streak_count = current_streak(self.rows, day)
        self._save()
        return row

    # ── Queries ──

    def get(self, day: str) -> DailyProgress | None:
        for r in self.rows:
            if r.date == day:
                return r
        return None

    def for_range(self, start: str, end: str) -> list[DailyProgress]:
        """Rows inside [start, end], oldest first."""
        return sorted((r for r in self.rows if start <= r.date <= end), key=lambda r: r.date)

    def current_streak(self, today: str | None = None) -> int:
        return current_streak(self.rows, today or self._today())

    def longest_streak(self) -> int:
        return longest_streak(self.rows)

    def total_tasks_completed(self) -> int:
        return sum(r.tasks_completed for r in self.rows)

    def total_time_spent(self) -> int:
        return sum(r.time_spent for r in self.rows)

    def average_focus_score(self) -> float:
        return average_focus_score(self.rows)

    def productive_days(self) -> int:
        return sum(1 for r in self.rows if r.tasks_completed > 0)

    def weekly_stats(self, week_start: str) -> PeriodStats:
        start, end = week_range(week_start)
        return period_stats(self.rows, start, end)

    def monthly_stats(self, year: int, month: int) -> PeriodStats:
        start, end = month_range(year, month)
        return period_stats(self.rows, start, end)

    def heatmap(
        self,
        start: str,
        end: str,
        max_tasks: int = DEFAULT_MAX_TASKS,
        max_time: int = DEFAULT_MAX_TIME,
    ) -> list[tuple[str, int]]:
        """(day, level) for every day in the range; days without a row are 0."""
        by_date = {r.date: r for r in self.rows}
        return [(day, heatmap_level(by_date.get(day), max_tasks, max_time)) for day in date_span(start, end)]
