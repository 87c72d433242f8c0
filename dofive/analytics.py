"""Analytics read model for DoFive.

Combines the history, goal and task stores into one summary for the
analytics screen: streaks, all-time totals, this week and this month.
"""

from __future__ import annotations

from dofive.dates import parse_date, week_dates
from dofive.goals import GoalStore
from dofive.history import HistoryStore
from dofive.models import AnalyticsSummary, Settings
from dofive.tasks import TaskStore


def compute_analytics(
    history: HistoryStore,
    goals: GoalStore,
    tasks: TaskStore,
    today: str,
    settings: Settings | None = None,
) -> AnalyticsSummary:
    """Compute the analytics summary as of *today*."""
    settings = settings or Settings()
    today_date = parse_date(today)
    week_start = week_dates(settings.week_starts_on, today)[0]

    return AnalyticsSummary(
        today=today,
        current_streak=history.current_streak(today),
        longest_streak=history.longest_streak(),
        total_tasks_completed=history.total_tasks_completed(),
        total_time_spent=history.total_time_spent(),
        average_focus_score=history.average_focus_score(),
        productive_days=history.productive_days(),
        week=history.weekly_stats(week_start),
        month=history.monthly_stats(today_date.year, today_date.month),
        overdue_tasks=len(tasks.overdue(today)),
        active_goals=len(goals.active(today)),
        completed_goals=len(goals.completed()),
        overdue_goals=len(goals.overdue(today)),
    )
