"""DoFive JSON API: tasks, goals, timer, history and settings over one AppContext."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from dofive import __version__
from dofive.analytics import compute_analytics
from dofive.context import AppContext
from dofive.coordination import (
    goal_progress_amount,
    is_within_daily_cap,
    remaining_daily_slots,
    visible_tasks_for_date,
)
from dofive.dates import tomorrow_str
from dofive.errors import DofiveError, TimerConflictError
from dofive.log import configure_logging
from dofive.models import TASK_STATUSES, Settings, Task
from dofive.scoring import DEFAULT_MAX_TIME, LEVEL_NAMES

app = FastAPI(title="DoFive API", version=__version__)


@lru_cache(maxsize=1)
def get_context() -> AppContext:
    configure_logging()
    return AppContext.open()


@app.exception_handler(TimerConflictError)
def _timer_conflict(request: Request, exc: TimerConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(DofiveError)
def _bad_input(request: Request, exc: DofiveError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def _not_found(kind: str, item_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{kind} not found: {item_id}")


def _payload_number(payload: dict[str, Any], key: str, cast: Any, default: Any) -> Any:
    value = payload.get(key)
    if value is None:
        return default
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"{key} must be a number: {value!r}")


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


# ── Tasks ─────────────────────────────────────────────────────


@app.get("/api/tasks")
def api_list_tasks(date: str | None = None, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """All tasks, or one day's tasks in display order with the cap applied."""
    if date is None:
        return {"tasks": [t.to_dict() for t in ctx.tasks.all()]}
    settings = ctx.settings.get()
    return {
        "date": date,
        "tasks": [t.to_dict() for t in ctx.tasks.by_date(date)],
        "visible": [t.id for t in visible_tasks_for_date(ctx.tasks, settings, date)],
        "completed": ctx.tasks.completed_count_by_date(date),
        "timeSpent": ctx.tasks.time_spent_by_date(date),
        "remainingSlots": remaining_daily_slots(ctx.tasks, settings, date),
    }


@app.get("/api/tasks/overdue")
def api_overdue_tasks(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"tasks": [t.to_dict() for t in ctx.tasks.overdue(ctx.today())]}


@app.get("/api/tasks/search")
def api_search_tasks(q: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"tasks": [t.to_dict() for t in ctx.tasks.search(q)]}


@app.get("/api/tasks/tags")
def api_all_tags(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"tags": ctx.tasks.all_tags()}


@app.post("/api/tasks")
def api_create_task(
    payload: dict[str, Any] = Body(...),
    force: bool = False,
    ctx: AppContext = Depends(get_context),
) -> dict[str, Any]:
    """Create a task. Today's list refuses new tasks past max_daily_tasks unless forced."""
    if not str(payload.get("title", "")).strip():
        raise HTTPException(status_code=400, detail="title is required")
    day = payload.get("date") or ctx.today()
    payload = {**payload, "date": day}
    settings = ctx.settings.get()
    if not force and day == ctx.today() and not is_within_daily_cap(ctx.tasks, settings, day):
        raise HTTPException(
            status_code=409,
            detail=f"Daily limit of {settings.max_daily_tasks} tasks reached; move one to tomorrow.",
        )
    task_id = ctx.tasks.add(payload)
    return {"ok": True, "task": ctx.tasks.get(task_id).to_dict()}


@app.get("/api/tasks/{task_id}")
def api_get_task(task_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    task = ctx.tasks.get(task_id)
    if task is None:
        raise _not_found("Task", task_id)
    return {
        "task": task.to_dict(),
        "sessions": [s.to_dict() for s in ctx.timer.sessions_for_task(task_id)],
    }


@app.put("/api/tasks/{task_id}")
def api_update_task(task_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Edit fields; a status change goes through the same path as /status."""
    task = ctx.tasks.get(task_id)
    if task is None:
        raise _not_found("Task", task_id)
    fields = dict(payload)
    status_value = fields.pop("status", None)
    amount = _payload_number(fields, "amount", float, None)
    fields.pop("amount", None)

    if status_value is not None:
        status_value = str(status_value)
        if status_value not in TASK_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status_value}")
        if status_value == "completed" and not task.is_completed:
            goal_id = fields.get("goalId", task.goal_id)
            goal = ctx.goals.get(str(goal_id)) if goal_id else None
            if goal is not None:
                # Raises for hybrid goals before any field is written
                goal_progress_amount(task, goal, amount)

    if fields:
        task = ctx.tasks.update(task_id, fields)
    if status_value is not None:
        task = _apply_status(ctx, task_id, status_value, amount)
    ctx.refresh_today()
    return {"ok": True, "task": task.to_dict()}


@app.delete("/api/tasks/{task_id}")
def api_delete_task(task_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if not ctx.tasks.delete(task_id):
        raise _not_found("Task", task_id)
    ctx.refresh_today()
    return {"ok": True, "task_id": task_id}


def _apply_status(ctx: AppContext, task_id: str, status_value: str, amount: float | None) -> Task:
    if status_value == "completed":
        if ctx.timer.task_id == task_id:
            ctx.stop_timer()
        return ctx.complete_task(task_id, amount)
    return ctx.tasks.set_status(task_id, status_value)


@app.post("/api/tasks/{task_id}/status")
def api_set_task_status(task_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Change status; completing a task also credits its goal."""
    if ctx.tasks.get(task_id) is None:
        raise _not_found("Task", task_id)
    amount = _payload_number(payload, "amount", float, None)
    task = _apply_status(ctx, task_id, str(payload.get("status", "")), amount)
    ctx.refresh_today()
    return {"ok": True, "task": task.to_dict()}


@app.post("/api/tasks/{task_id}/time")
def api_add_time(task_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    task = ctx.tasks.add_time(task_id, _payload_number(payload, "seconds", int, 0))
    if task is None:
        raise _not_found("Task", task_id)
    ctx.refresh_today()
    return {"ok": True, "task": task.to_dict()}


@app.post("/api/tasks/{task_id}/move")
def api_move_task(task_id: str, payload: dict[str, Any] = Body(default={}), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Move to payload['date'], or to tomorrow when no date is given."""
    day = payload.get("date") or tomorrow_str(ctx.clock())
    task = ctx.tasks.move_to_date(task_id, day)
    if task is None:
        raise _not_found("Task", task_id)
    ctx.refresh_today()
    return {"ok": True, "task": task.to_dict()}


@app.post("/api/tasks/{task_id}/duplicate")
def api_duplicate_task(task_id: str, payload: dict[str, Any] = Body(default={}), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    new_id = ctx.tasks.duplicate(task_id, payload.get("date"))
    if new_id is None:
        raise _not_found("Task", task_id)
    return {"ok": True, "task": ctx.tasks.get(new_id).to_dict()}


@app.post("/api/tasks/{task_id}/tags/{tag}")
def api_add_tag(task_id: str, tag: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    task = ctx.tasks.add_tag(task_id, tag)
    if task is None:
        raise _not_found("Task", task_id)
    return {"ok": True, "task": task.to_dict()}


@app.delete("/api/tasks/{task_id}/tags/{tag}")
def api_remove_tag(task_id: str, tag: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    task = ctx.tasks.remove_tag(task_id, tag)
    if task is None:
        raise _not_found("Task", task_id)
    return {"ok": True, "task": task.to_dict()}


# ── Goals ─────────────────────────────────────────────────────


def _goal_view(ctx: AppContext, goal_id: str) -> dict[str, Any]:
    goal = ctx.goals.get(goal_id)
    if goal is None:
        raise _not_found("Goal", goal_id)
    d = goal.to_dict()
    d["percentage"] = round(ctx.goals.completion_percentage(goal_id), 1)
    d["taskIds"] = [t.id for t in ctx.tasks.by_goal(goal_id)]
    return d


@app.get("/api/goals")
def api_list_goals(filter: str | None = None, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    today = ctx.today()
    partitions = {
        None: ctx.goals.all,
        "active": lambda: ctx.goals.active(today),
        "completed": ctx.goals.completed,
        "archived": ctx.goals.archived,
        "overdue": lambda: ctx.goals.overdue(today),
    }
    if filter not in partitions:
        raise HTTPException(status_code=400, detail=f"Unknown filter: {filter}")
    return {"goals": [_goal_view(ctx, g.id) for g in partitions[filter]()]}


@app.post("/api/goals")
def api_create_goal(payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if not str(payload.get("title", "")).strip():
        raise HTTPException(status_code=400, detail="title is required")
    target = payload.get("target")
    if not isinstance(target, (int, float)) or target <= 0:
        raise HTTPException(status_code=400, detail="target must be a positive number")
    if payload.get("type", "effort") != "effort" and not payload.get("unit"):
        raise HTTPException(status_code=400, detail="unit is required for quantity and hybrid goals")
    goal_id = ctx.goals.add(payload)
    return {"ok": True, "goal": _goal_view(ctx, goal_id)}


@app.get("/api/goals/{goal_id}")
def api_get_goal(goal_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"goal": _goal_view(ctx, goal_id)}


@app.put("/api/goals/{goal_id}")
def api_update_goal(goal_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if ctx.goals.update(goal_id, payload) is None:
        raise _not_found("Goal", goal_id)
    return {"ok": True, "goal": _goal_view(ctx, goal_id)}


@app.delete("/api/goals/{goal_id}")
def api_delete_goal(goal_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if not ctx.goals.delete(goal_id):
        raise _not_found("Goal", goal_id)
    return {"ok": True, "goal_id": goal_id}


@app.post("/api/goals/{goal_id}/archive")
def api_archive_goal(goal_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if ctx.goals.archive(goal_id) is None:
        raise _not_found("Goal", goal_id)
    return {"ok": True, "goal": _goal_view(ctx, goal_id)}


@app.post("/api/goals/{goal_id}/unarchive")
def api_unarchive_goal(goal_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if ctx.goals.unarchive(goal_id) is None:
        raise _not_found("Goal", goal_id)
    return {"ok": True, "goal": _goal_view(ctx, goal_id)}


@app.post("/api/goals/{goal_id}/progress")
def api_adjust_goal(goal_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if payload.get("reset"):
        goal = ctx.goals.reset_progress(goal_id)
    else:
        goal = ctx.goals.adjust_progress(goal_id, _payload_number(payload, "delta", float, 0.0))
    if goal is None:
        raise _not_found("Goal", goal_id)
    return {"ok": True, "goal": _goal_view(ctx, goal_id)}


@app.post("/api/goals/{goal_id}/milestones")
def api_add_milestone(goal_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    milestone_id = ctx.goals.add_milestone(goal_id, str(payload.get("title", "")), payload.get("dueDate"))
    if milestone_id is None:
        raise _not_found("Goal", goal_id)
    return {"ok": True, "milestone_id": milestone_id, "goal": _goal_view(ctx, goal_id)}


@app.put("/api/goals/{goal_id}/milestones/{milestone_id}")
def api_update_milestone(
    goal_id: str, milestone_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)
) -> dict[str, Any]:
    milestone = ctx.goals.update_milestone(goal_id, milestone_id, payload)
    if milestone is None:
        raise _not_found("Milestone", milestone_id)
    return {"ok": True, "milestone": milestone.to_dict()}


@app.post("/api/goals/{goal_id}/milestones/{milestone_id}/toggle")
def api_toggle_milestone(goal_id: str, milestone_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    milestone = ctx.goals.toggle_milestone(goal_id, milestone_id)
    if milestone is None:
        raise _not_found("Milestone", milestone_id)
    return {"ok": True, "milestone": milestone.to_dict()}


@app.delete("/api/goals/{goal_id}/milestones/{milestone_id}")
def api_delete_milestone(goal_id: str, milestone_id: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    if not ctx.goals.delete_milestone(goal_id, milestone_id):
        raise _not_found("Milestone", milestone_id)
    return {"ok": True, "milestone_id": milestone_id}


# ── Timer ─────────────────────────────────────────────────────


def _timer_view(ctx: AppContext) -> dict[str, Any]:
    session = ctx.timer.open_session()
    return {
        "state": ctx.timer.state,
        "taskId": ctx.timer.task_id,
        "elapsed": ctx.timer.elapsed_seconds(),
        "session": session.to_dict() if session else None,
    }


@app.get("/api/timer")
def api_timer(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Current timer; safe to poll once a second."""
    return _timer_view(ctx)


@app.post("/api/timer/start")
def api_timer_start(payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Start timing a task. on_conflict='switch' commits the running task first."""
    task_id = str(payload.get("task_id", ""))
    if ctx.tasks.get(task_id) is None:
        raise _not_found("Task", task_id)
    session_type = str(payload.get("type", "focus"))
    previous = None
    if payload.get("on_conflict") == "switch" and ctx.timer.task_id not in (None, task_id):
        previous = ctx.stop_timer()
    ctx.timer.start(task_id, session_type=session_type)
    if ctx.tasks.get(task_id).status == "pending":
        ctx.tasks.set_status(task_id, "in_progress")
    view = _timer_view(ctx)
    view["previous"] = previous.to_dict() if previous else None
    return view


@app.post("/api/timer/pause")
def api_timer_pause(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    ctx.timer.pause()
    return _timer_view(ctx)


@app.post("/api/timer/resume")
def api_timer_resume(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    ctx.timer.resume()
    return _timer_view(ctx)


@app.post("/api/timer/stop")
def api_timer_stop(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Stop and commit the elapsed seconds to the task."""
    session = ctx.stop_timer()
    view = _timer_view(ctx)
    view["stopped"] = session.to_dict() if session else None
    return view


@app.post("/api/timer/reset")
def api_timer_reset(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    """Cancel without committing any time."""
    ctx.timer.reset()
    return _timer_view(ctx)


# ── History & analytics ───────────────────────────────────────


@app.get("/api/history")
def api_history(start: str, end: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"dailyProgress": [r.to_dict() for r in ctx.history.for_range(start, end)]}


@app.get("/api/history/heatmap")
def api_heatmap(start: str, end: str, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    max_tasks = ctx.settings.get().max_daily_tasks
    cells = ctx.history.heatmap(start, end, max_tasks=max_tasks, max_time=DEFAULT_MAX_TIME)
    return {"days": [{"date": d, "level": lvl, "label": LEVEL_NAMES[lvl]} for d, lvl in cells]}


@app.get("/api/analytics")
def api_analytics(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    ctx.refresh_today()
    summary = compute_analytics(ctx.history, ctx.goals, ctx.tasks, ctx.today(), ctx.settings.get())
    return summary.to_dict()


# ── Settings ──────────────────────────────────────────────────


@app.get("/api/settings")
def api_get_settings(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return ctx.settings.get().to_dict()


@app.put("/api/settings")
def api_update_settings(payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    try:
        merged = Settings.from_dict({**ctx.settings.get().to_dict(), **payload})
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid settings: {e}")
    return ctx.settings.update(**merged.__dict__).to_dict()


@app.post("/api/settings/reset")
def api_reset_settings(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return ctx.settings.reset().to_dict()


def main() -> None:
    import uvicorn

    uvicorn.run("ui.app:app", host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
