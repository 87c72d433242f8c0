"""Cross-store rules for DoFive.

Each rule is a plain function that takes the store handles it touches and
issues the calls in order. No store calls into another store.
"""

from __future__ import annotations

import logging

from dofive.errors import HybridProgressError
from dofive.goals import GoalStore
from dofive.history import HistoryStore
from dofive.models import DailyProgress, Goal, Settings, Task, TimerSession
from dofive.scoring import DEFAULT_MAX_TASKS, focus_score
from dofive.tasks import TaskStore
from dofive.timer import TimerStore

logger = logging.getLogger(__name__)


# ── Task completion → goal progress ───────────────────────────


def goal_progress_amount(task: Task, goal: Goal, amount: float | None = None) -> float:
    """How much completing *task* moves *goal*.

    Effort goals gain the task's logged seconds, quantity goals gain one
    unit. Hybrid goals have no implicit rule and need *amount*.
    """
    if amount is not None:
        return amount
    if goal.type == "effort":
        return task.time_spent
    if goal.type == "quantity":
        return 1
    raise HybridProgressError(
        f"Goal {goal.id!r} is hybrid; pass an explicit amount when completing {task.id!r}."
    )


def complete_task_and_apply_goal_progress(
    tasks: TaskStore,
    goals: GoalStore,
    task_id: str,
    amount: float | None = None,
) -> Task | None:
    """Mark a task completed and credit its linked goal once.

    Missing or already-completed tasks are left alone. A goal reference
    that no longer resolves is skipped; archived goals are still credited.
    """
    task = tasks.get(task_id)
    if task is None:
        logger.debug("complete: task %s not found", task_id)
        return None
    if task.is_completed:
        return task

    goal = goals.get(task.goal_id) if task.goal_id else None
    progress = None
    if goal is not None:
        progress = goal_progress_amount(task, goal, amount)
    elif task.goal_id:
        logger.info("complete: task %s has orphaned goal %s", task_id, task.goal_id)

    tasks.set_status(task_id, "completed")
    if goal is not None and progress is not None:
        goals.adjust_progress(goal.id, progress)
    return tasks.get(task_id)


# ── Timer → task time ─────────────────────────────────────────


def stop_timer_and_commit(timer: TimerStore, tasks: TaskStore) -> TimerSession | None:
    """Stop the timer and add the session's seconds to its task exactly once."""
    session = timer.stop()
    if session is None:
        return None
    if session.duration > 0:
        tasks.add_time(session.task_id, session.duration)
    return session


def switch_timer(
    timer: TimerStore,
    tasks: TaskStore,
    task_id: str,
    session_type: str = "focus",
) -> tuple[TimerSession | None, TimerSession]:
    """Commit whatever is being timed, then start *task_id*.

    Returns (closed_previous_session_or_None, new_session).
    """
    previous = None
    if timer.task_id is not None and timer.task_id != task_id:
        previous = stop_timer_and_commit(timer, tasks)
    return previous, timer.start(task_id, session_type=session_type)


# ── Today's history row ───────────────────────────────────────


def refresh_today_progress(
    tasks: TaskStore,
    history: HistoryStore,
    today: str,
    settings: Settings | None = None,
) -> DailyProgress:
    """Recompute the history row for *today* from the task store."""
    completed = tasks.completed_count_by_date(today)
    seconds = tasks.time_spent_by_date(today)
    max_tasks = settings.max_daily_tasks if settings else DEFAULT_MAX_TASKS
    return history.upsert_daily_progress(
        today,
        completed,
        seconds,
        focus_score=focus_score(completed, seconds, max_tasks=max_tasks),
    )


# ── Daily cap ─────────────────────────────────────────────────


def remaining_daily_slots(tasks: TaskStore, settings: Settings, day: str) -> int:
    return max(0, settings.max_daily_tasks - tasks.count_by_date(day))


def is_within_daily_cap(tasks: TaskStore, settings: Settings, day: str) -> bool:
    return remaining_daily_slots(tasks, settings, day) > 0


def visible_tasks_for_date(tasks: TaskStore, settings: Settings, day: str) -> list[Task]:
    """The day's first max_daily_tasks tasks, hiding completed ones if configured."""
    capped = tasks.by_date(day)[: settings.max_daily_tasks]
    if settings.show_completed_tasks:
        return capped
    return [t for t in capped if not t.is_completed]
