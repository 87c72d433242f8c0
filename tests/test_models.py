"""Tests for dofive/models.py — dataclass serialization."""

from dofive.models import (
    DEFAULT_GOAL_COLOR,
    DailyProgress,
    Goal,
    Milestone,
    Settings,
    Task,
    TimerSession,
)


def test_task_round_trip():
    data = {
        "id": "task_1",
        "title": "Read chapter",
        "description": "Chapter 4",
        "priority": 2,
        "status": "in_progress",
        "date": "2024-01-10",
        "goalId": "goal_1",
        "timeSpent": 900,
        "estimatedTime": 1800,
        "tags": ["reading", "study"],
        "createdAt": "2024-01-10T08:00:00.000+00:00",
        "updatedAt": "2024-01-10T09:00:00.000+00:00",
    }
    task = Task.from_dict(data)
    assert task.goal_id == "goal_1"
    assert task.time_spent == 900
    assert task.to_dict() == data


def test_task_from_sparse_dict():
    task = Task.from_dict({"title": "Quick"})
    assert task.status == "pending"
    assert task.priority == 3
    assert task.tags == []
    assert task.description is None
    assert "goalId" not in task.to_dict()


def test_task_tags_deduplicated():
    task = Task.from_dict({"tags": ["a", "b", "a"]})
    assert task.tags == ["a", "b"]


def test_goal_round_trip_with_milestones():
    data = {
        "id": "goal_1",
        "title": "Run 100km",
        "type": "quantity",
        "timeframe": "monthly",
        "startDate": "2024-01-01",
        "endDate": "2024-01-31",
        "target": 100,
        "current": 12.5,
        "unit": "km",
        "milestones": [
            {"id": "ms_1", "title": "First 25", "completed": True, "dueDate": "2024-01-08", "createdAt": "x"},
            {"id": "ms_2", "title": "Half way", "completed": False, "createdAt": "y"},
        ],
        "color": "#10B981",
        "archived": False,
        "createdAt": "2024-01-01T00:00:00.000+00:00",
        "updatedAt": "2024-01-01T00:00:00.000+00:00",
    }
    goal = Goal.from_dict(data)
    assert len(goal.milestones) == 2
    assert goal.milestones[0].due_date == "2024-01-08"
    assert goal.to_dict() == data


def test_goal_defaults():
    goal = Goal.from_dict({"title": "G"})
    assert goal.color == DEFAULT_GOAL_COLOR
    assert goal.archived is False
    assert goal.milestones == []


def test_goal_predicates():
    goal = Goal(target=10, current=5, end_date="2024-01-31")
    assert goal.is_active("2024-01-10") is True
    assert goal.is_overdue("2024-02-01") is True
    assert goal.is_completed() is False

    goal.current = 12
    assert goal.is_completed() is True
    assert goal.is_active("2024-01-10") is False

    goal.archived = True
    assert goal.is_completed() is False
    assert goal.is_overdue("2024-02-01") is False


def test_milestone_from_dict():
    m = Milestone.from_dict({"id": "m", "title": "T"})
    assert m.completed is False
    assert m.due_date is None


def test_daily_progress_round_trip():
    row = DailyProgress(date="2024-01-10", tasks_completed=3, time_spent=3600, focus_score=40, streak_count=2)
    assert DailyProgress.from_dict(row.to_dict()) == row


def test_daily_progress_legacy_row():
    row = DailyProgress.from_dict({"date": "2024-01-10", "tasksCompleted": 2, "timeSpent": 60})
    assert row.focus_score == 0
    assert row.streak_count == 0


def test_timer_session_is_open():
    s = TimerSession(id="s", task_id="t", start_time="x")
    assert s.is_open is True
    s.end_time = "y"
    assert s.is_open is False


def test_settings_defaults_and_round_trip():
    s = Settings.from_dict({})
    assert s.max_daily_tasks == 5
    assert s.week_starts_on == 1
    assert s.theme == "system"
    s2 = Settings.from_dict({"maxDailyTasks": 7, "weekStartsOn": 0, "focusMode": True})
    assert Settings.from_dict(s2.to_dict()) == s2
    assert s2.max_daily_tasks == 7
