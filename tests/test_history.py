"""Tests for dofive/history.py — daily rows, period stats, heatmap."""

import pytest

from dofive.errors import InvalidFieldError, InvalidTimeDeltaError
from dofive.history import HistoryStore
from dofive.scoring import MAX, NONE


def test_upsert_inserts_then_updates_in_place(ctx):
    ctx.history.upsert_daily_progress("2024-01-10", 1, 600, 20)
    ctx.history.upsert_daily_progress("2024-01-10", 3, 1800)
    assert len(ctx.history.rows) == 1
    row = ctx.history.get("2024-01-10")
    assert row.tasks_completed == 3
    assert row.time_spent == 1800
    # None keeps the previous score
    assert row.focus_score == 20


def test_upsert_records_streak(ctx):
    ctx.history.upsert_daily_progress("2024-01-08", 1, 0)
    ctx.history.upsert_daily_progress("2024-01-09", 1, 0)
    row = ctx.history.upsert_daily_progress("2024-01-10", 2, 0)
    assert row.streak_count == 3


def test_upsert_validation(ctx):
    with pytest.raises(InvalidTimeDeltaError):
        ctx.history.upsert_daily_progress("2024-01-10", -1, 0)
    with pytest.raises(InvalidFieldError):
        ctx.history.upsert_daily_progress("2024-01-10", 1, 0, 150)
    with pytest.raises(InvalidFieldError):
        ctx.history.upsert_daily_progress("Jan 10", 1, 0)
    assert ctx.history.rows == []


def test_streak_queries_use_clock(ctx):
    for day in ("2024-01-06", "2024-01-07", "2024-01-09", "2024-01-10"):
        ctx.history.upsert_daily_progress(day, 1, 60)
    assert ctx.history.current_streak() == 2
    assert ctx.history.current_streak("2024-01-07") == 2
    assert ctx.history.longest_streak() == 2


def test_totals_and_average_focus(ctx):
    ctx.history.upsert_daily_progress("2024-01-08", 2, 1200, 40)
    ctx.history.upsert_daily_progress("2024-01-09", 0, 0, 0)
    ctx.history.upsert_daily_progress("2024-01-10", 4, 2400, 80)
    assert ctx.history.total_tasks_completed() == 6
    assert ctx.history.total_time_spent() == 3600
    # the zero-score day is not a sample
    assert ctx.history.average_focus_score() == 60.0
    assert ctx.history.productive_days() == 2


def test_for_range_sorted(ctx):
    ctx.history.upsert_daily_progress("2024-01-10", 1, 0)
    ctx.history.upsert_daily_progress("2024-01-02", 1, 0)
    ctx.history.upsert_daily_progress("2024-01-05", 1, 0)
    assert [r.date for r in ctx.history.for_range("2024-01-01", "2024-01-05")] == [
        "2024-01-02",
        "2024-01-05",
    ]


def test_weekly_and_monthly_stats(ctx):
    ctx.history.upsert_daily_progress("2024-01-08", 2, 600, 30)
    ctx.history.upsert_daily_progress("2024-01-14", 1, 300, 50)
    ctx.history.upsert_daily_progress("2024-01-15", 5, 900)
    week = ctx.history.weekly_stats("2024-01-08")
    assert (week.start, week.end) == ("2024-01-08", "2024-01-14")
    assert week.total_tasks == 3
    assert week.total_time == 900
    assert week.average_focus_score == 40.0
    assert week.active_days == 2

    month = ctx.history.monthly_stats(2024, 1)
    assert month.total_tasks == 8
    assert month.to_dict()["activeDays"] == 3


def test_heatmap_fills_missing_days(ctx):
    ctx.history.upsert_daily_progress("2024-01-09", 5, 28800)
    cells = ctx.history.heatmap("2024-01-08", "2024-01-10")
    assert cells == [("2024-01-08", NONE), ("2024-01-09", MAX), ("2024-01-10", NONE)]


def test_reload_reproduces_rows(ctx, storage, clock):
    ctx.history.upsert_daily_progress("2024-01-09", 2, 600, 35)
    ctx.history.upsert_daily_progress("2024-01-10", 1, 60)
    assert HistoryStore(storage, clock).rows == ctx.history.rows
