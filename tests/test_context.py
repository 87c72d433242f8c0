"""Tests for dofive/context.py and the workspace helpers."""

import json
from datetime import datetime

from dofive.context import AppContext
from dofive.log import configure_logging
from dofive.workspace import get_user_timezone, workspace_root


def test_workspace_root_from_env(workspace):
    assert workspace_root() == workspace.resolve()


def test_user_timezone_from_settings(workspace):
    assert get_user_timezone(workspace).key == "UTC"


def test_user_timezone_default(tmp_path):
    assert get_user_timezone(tmp_path).key == "UTC"


def test_open_loads_workspace(workspace, clock):
    ctx = AppContext.open(clock=clock)
    assert ctx.settings.get().max_daily_tasks == 3
    assert ctx.tasks.get("task_seed").time_spent == 600


def test_open_writes_back_to_files(workspace, clock):
    ctx = AppContext.open(workspace, clock)
    ctx.tasks.add_time("task_seed", 60)
    raw = json.loads((workspace / "dofive-tasks.json").read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["state"]["tasks"][0]["timeSpent"] == 660


def test_complete_task_refreshes_today(ctx):
    task_id = ctx.tasks.add({"title": "t", "date": "2024-01-10"})
    ctx.tasks.add_time(task_id, 600)
    ctx.complete_task(task_id)
    row = ctx.history.get("2024-01-10")
    assert row.tasks_completed == 1
    assert row.time_spent == 600


def test_complete_task_for_other_day_leaves_history(ctx):
    task_id = ctx.tasks.add({"title": "t", "date": "2024-01-09"})
    ctx.complete_task(task_id)
    assert ctx.history.rows == []


def test_stop_timer_commits_and_refreshes(ctx, clock):
    task_id = ctx.tasks.add({"title": "t", "date": "2024-01-10"})
    ctx.timer.start(task_id)
    clock.advance(seconds=65)
    ctx.stop_timer()
    assert ctx.tasks.get(task_id).time_spent == 65
    assert ctx.history.get("2024-01-10").time_spent == 65


def test_today_follows_clock(ctx, clock):
    assert ctx.today() == "2024-01-10"
    clock.advance(days=1)
    assert ctx.today() == "2024-01-11"


def test_in_memory(clock):
    ctx = AppContext.in_memory(clock)
    assert ctx.tasks.all() == []
    assert isinstance(ctx.clock(), datetime)


def test_configure_logging_is_idempotent(tmp_path):
    logger = configure_logging("DEBUG", tmp_path)
    configure_logging("DEBUG", tmp_path)
    handlers = [h for h in logger.handlers if h.__class__.__name__ == "RotatingFileHandler"]
    assert len(handlers) == 1
    logger.debug("hello")
    handlers[0].flush()
    assert (tmp_path / "dofive.log").exists()
    logger.removeHandler(handlers[0])
    handlers[0].close()
