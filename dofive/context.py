"""Application context: every DoFive store, built once and passed around."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dofive import coordination, dates
from dofive.goals import GoalStore
from dofive.history import HistoryStore
from dofive.models import DailyProgress, Task, TimerSession
from dofive.settings import SettingsStore
from dofive.storage import FileSlotStorage, MemorySlotStorage, SlotStorage
from dofive.tasks import TaskStore
from dofive.timer import TimerStore
from dofive.workspace import Clock, get_user_timezone, make_clock, resolve_timezone, workspace_root


@dataclass
class AppContext:
    storage: SlotStorage
    clock: Clock
    settings: SettingsStore
    tasks: TaskStore
    goals: GoalStore
    history: HistoryStore
    timer: TimerStore

    @classmethod
    def create(cls, storage: SlotStorage, clock: Clock | None = None) -> AppContext:
        settings = SettingsStore(storage)
        if clock is None:
            clock = make_clock(resolve_timezone(settings.get().timezone))
        return cls(
            storage=storage,
            clock=clock,
            settings=settings,
            tasks=TaskStore(storage, clock),
            goals=GoalStore(storage, clock),
            history=HistoryStore(storage, clock),
            timer=TimerStore(clock),
        )

    @classmethod
    def open(cls, root: Path | None = None, clock: Clock | None = None) -> AppContext:
        """Load every slot from the workspace directory."""
        if root is None:
            root = workspace_root()
        if clock is None:
            clock = make_clock(get_user_timezone(root))
        return cls.create(FileSlotStorage(root), clock)

    @classmethod
    def in_memory(cls, clock: Clock | None = None) -> AppContext:
        return cls.create(MemorySlotStorage(), clock)

    def today(self) -> str:
        return dates.today_str(self.clock())

    # ── Cross-store shortcuts ──

    def complete_task(self, task_id: str, amount: float | None = None) -> Task | None:
        task = coordination.complete_task_and_apply_goal_progress(
            self.tasks, self.goals, task_id, amount
        )
        if task is not None and task.date == self.today():
            self.refresh_today()
        return task

    def stop_timer(self) -> TimerSession | None:
        session = coordination.stop_timer_and_commit(self.timer, self.tasks)
        if session is not None:
            self.refresh_today()
        return session

    def refresh_today(self) -> DailyProgress:
        return coordination.refresh_today_progress(
            self.tasks, self.history, self.today(), self.settings.get()
        )
