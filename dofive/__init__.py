"""DoFive core library: task, goal, timer and history stores.

Public API re-exports for convenient imports:
    from dofive import AppContext, current_streak, heatmap_level, ...
"""

__version__ = "0.1.0"

# Workspace & configuration
from dofive.workspace import (
    workspace_root,
    get_user_timezone,
    today_str,
    now_local,
    make_clock,
)

# Persistence
from dofive.storage import (
    SCHEMA_VERSION,
    TASKS_SLOT,
    GOALS_SLOT,
    HISTORY_SLOT,
    SETTINGS_SLOT,
    SlotStorage,
    FileSlotStorage,
    MemorySlotStorage,
)

# Errors
from dofive.errors import (
    DofiveError,
    InvalidFieldError,
    InvalidTimeDeltaError,
    TimerConflictError,
    HybridProgressError,
    SchemaVersionError,
)

# Date utilities
from dofive.dates import (
    add_days,
    format_time,
    format_time_human,
    month_range,
    relative_date_label,
    week_dates,
    week_range,
)

# Scoring
from dofive.scoring import (
    current_streak,
    longest_streak,
    heatmap_level,
    focus_score,
    clamp_progress,
    completion_percentage,
)

# Stores
from dofive.settings import SettingsStore
from dofive.tasks import TaskStore
from dofive.goals import GoalStore
from dofive.timer import TimerStore
from dofive.history import HistoryStore

# Cross-store rules
from dofive.coordination import (
    complete_task_and_apply_goal_progress,
    stop_timer_and_commit,
    switch_timer,
    refresh_today_progress,
    remaining_daily_slots,
    is_within_daily_cap,
    visible_tasks_for_date,
)

from dofive.context import AppContext
from dofive.analytics import compute_analytics

# Models
from dofive.models import (
    Task,
    Goal,
    Milestone,
    DailyProgress,
    TimerSession,
    Settings,
    PeriodStats,
    AnalyticsSummary,
)
