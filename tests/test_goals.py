"""Tests for dofive/goals.py — goals, progress clamping and milestones."""

import pytest

from dofive.errors import InvalidFieldError
from dofive.goals import GoalStore


def _goal(store, **extra):
    draft = {
        "title": "Deep work",
        "type": "effort",
        "timeframe": "weekly",
        "startDate": "2024-01-08",
        "endDate": "2024-01-14",
        "target": 3600,
    }
    draft.update(extra)
    return store.add(draft)


class TestAdd:
    def test_starts_clean(self, ctx):
        goal_id = _goal(ctx.goals, current=500, archived=True, milestones=[{"id": "m"}])
        goal = ctx.goals.get(goal_id)
        assert goal.current == 0
        assert goal.archived is False
        assert goal.milestones == []
        assert goal.color == "#6366F1"

    def test_rejects_unknown_type(self, ctx):
        with pytest.raises(InvalidFieldError):
            _goal(ctx.goals, type="habit")

    def test_rejects_unknown_timeframe(self, ctx):
        with pytest.raises(InvalidFieldError):
            _goal(ctx.goals, timeframe="fortnightly")


class TestProgress:
    def test_adjust_and_clamp_at_zero(self, ctx):
        goal_id = _goal(ctx.goals)
        ctx.goals.adjust_progress(goal_id, 100)
        ctx.goals.adjust_progress(goal_id, -250)
        assert ctx.goals.progress(goal_id) == 0

    def test_may_exceed_target(self, ctx):
        goal_id = _goal(ctx.goals, target=10, type="quantity", unit="pages")
        ctx.goals.adjust_progress(goal_id, 15)
        assert ctx.goals.progress(goal_id) == 15
        assert ctx.goals.completion_percentage(goal_id) == 100.0

    def test_reset(self, ctx):
        goal_id = _goal(ctx.goals)
        ctx.goals.adjust_progress(goal_id, 1800)
        assert ctx.goals.completion_percentage(goal_id) == 50.0
        ctx.goals.reset_progress(goal_id)
        assert ctx.goals.progress(goal_id) == 0

    def test_update_clamps_current(self, ctx):
        goal_id = _goal(ctx.goals)
        ctx.goals.update(goal_id, {"current": -5})
        assert ctx.goals.progress(goal_id) == 0

    def test_zero_target_percentage(self, ctx):
        goal_id = _goal(ctx.goals, target=0)
        assert ctx.goals.completion_percentage(goal_id) == 0.0

    def test_unknown_goal(self, ctx):
        assert ctx.goals.adjust_progress("nope", 10) is None
        assert ctx.goals.progress("nope") is None
        assert ctx.goals.completion_percentage("nope") is None


def test_update_keeps_milestones(ctx):
    goal_id = _goal(ctx.goals)
    ctx.goals.add_milestone(goal_id, "Half")
    goal = ctx.goals.update(goal_id, {"title": "Renamed", "milestones": []})
    assert goal.title == "Renamed"
    assert len(goal.milestones) == 1


def test_partitions(ctx):
    active = _goal(ctx.goals)
    done = _goal(ctx.goals, target=1)
    late = _goal(ctx.goals, endDate="2024-01-05", startDate="2024-01-01")
    shelved = _goal(ctx.goals)
    ctx.goals.adjust_progress(done, 1)
    ctx.goals.archive(shelved)

    assert [g.id for g in ctx.goals.active("2024-01-10")] == [active]
    assert [g.id for g in ctx.goals.completed()] == [done]
    assert [g.id for g in ctx.goals.overdue("2024-01-10")] == [late]
    assert [g.id for g in ctx.goals.archived()] == [shelved]

    ctx.goals.unarchive(shelved)
    assert shelved in [g.id for g in ctx.goals.active("2024-01-10")]


def test_filters_and_search(ctx):
    _goal(ctx.goals, title="Read books", type="quantity", timeframe="monthly")
    _goal(ctx.goals, title="Meditate", description="morning reading")
    assert len(ctx.goals.by_type("quantity")) == 1
    assert len(ctx.goals.by_timeframe("weekly")) == 1
    assert len(ctx.goals.search("READ")) == 2


class TestMilestones:
    def test_add_and_toggle(self, ctx):
        goal_id = _goal(ctx.goals)
        ms_id = ctx.goals.add_milestone(goal_id, "First hour", "2024-01-09")
        assert ctx.goals.toggle_milestone(goal_id, ms_id).completed is True
        assert ctx.goals.toggle_milestone(goal_id, ms_id).completed is False

    def test_update(self, ctx):
        goal_id = _goal(ctx.goals)
        ms_id = ctx.goals.add_milestone(goal_id, "First")
        ms = ctx.goals.update_milestone(goal_id, ms_id, {"title": "Renamed", "id": "other"})
        assert ms.title == "Renamed"
        assert ms.id == ms_id

    def test_invalid_due_date(self, ctx):
        goal_id = _goal(ctx.goals)
        with pytest.raises(InvalidFieldError):
            ctx.goals.add_milestone(goal_id, "x", "next week")

    def test_delete(self, ctx):
        goal_id = _goal(ctx.goals)
        ms_id = ctx.goals.add_milestone(goal_id, "x")
        assert ctx.goals.delete_milestone(goal_id, ms_id) is True
        assert ctx.goals.delete_milestone(goal_id, ms_id) is False
        assert ctx.goals.get(goal_id).milestones == []

    def test_unknown_goal_or_milestone(self, ctx):
        goal_id = _goal(ctx.goals)
        assert ctx.goals.add_milestone("nope", "x") is None
        assert ctx.goals.toggle_milestone(goal_id, "ms_missing") is None
        assert ctx.goals.update_milestone("nope", "ms", {}) is None


def test_delete_goal(ctx):
    goal_id = _goal(ctx.goals)
    assert ctx.goals.delete(goal_id) is True
    assert ctx.goals.delete(goal_id) is False


def test_reload_reproduces_collection(ctx, storage, clock):
    goal_id = _goal(ctx.goals, unit="minutes")
    ctx.goals.add_milestone(goal_id, "m1", "2024-01-12")
    ctx.goals.adjust_progress(goal_id, 60)
    assert GoalStore(storage, clock).all() == ctx.goals.all()
