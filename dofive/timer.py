"""Single-session focus timer for DoFive.

States: idle (no task), running (task + interval start), paused (task,
elapsed banked, no interval start). Elapsed time is computed from the
clock on demand; nothing ticks in the background.

The timer never touches the task store. stop() hands back the closed
session and the caller commits ``session.duration`` with
TaskStore.add_time (see dofive.coordination.stop_timer_and_commit).
The timer is not persisted.
"""

from __future__ import annotations

import logging
from datetime import datetime

from dofive.errors import InvalidFieldError, TimerConflictError
from dofive.models import SESSION_TYPES, TimerSession, new_id
from dofive.workspace import Clock, make_clock, resolve_timezone, timestamp

logger = logging.getLogger(__name__)

IDLE, RUNNING, PAUSED = "idle", "running", "paused"

# What start() does when another task is already being timed.
ON_CONFLICT = ("reject", "flush", "overwrite")


class TimerStore:
    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or make_clock(resolve_timezone("UTC"))
        self.task_id: str | None = None
        self.started_at: datetime | None = None
        self.elapsed: int = 0
        self.session: TimerSession | None = None
        self.sessions: list[TimerSession] = []
        self.last_flushed: TimerSession | None = None

    @property
    def state(self) -> str:
        if self.task_id is None:
            return IDLE
        return RUNNING if self.started_at is not None else PAUSED

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    def _flush(self, now: datetime) -> None:
        if self.started_at is not None:
            self.elapsed += max(0, int((now - self.started_at).total_seconds()))
            self.started_at = None

    def _clear(self) -> None:
        self.task_id = None
        self.started_at = None
        self.elapsed = 0
        self.session = None

    def _abandon(self, now: datetime) -> None:
        if self.session is not None:
            self.session.end_time = timestamp(now)
            self.session.completed = False

    # ── Transitions ──

    def start(self, task_id: str, session_type: str = "focus", on_conflict: str = "reject") -> TimerSession:
        """Begin timing *task_id*.

        If a different task is active, *on_conflict* decides: ``reject``
        raises TimerConflictError; ``flush`` stops the previous session as
        completed and leaves it in ``last_flushed`` for the caller to
        commit; ``overwrite`` abandons it and its elapsed time is lost.
        Starting the task already running is a no-op; starting the task
        that is paused resumes it.
        """
        if session_type not in SESSION_TYPES:
            raise InvalidFieldError(f"Invalid session type: {session_type!r}")
        if on_conflict not in ON_CONFLICT:
            raise InvalidFieldError(f"on_conflict must be one of {ON_CONFLICT}")

        if self.task_id == task_id and self.session is not None:
            if self.state == PAUSED:
                self.resume()
            return self.session

        self.last_flushed = None
        if self.task_id is not None:
            if on_conflict == "reject":
                raise TimerConflictError(self.task_id, task_id)
            if on_conflict == "flush":
                self.last_flushed = self.stop()
            else:
                logger.warning(
                    "Timer overwrite: abandoning %ss on task %s", self.elapsed_seconds(), self.task_id
                )
                self._abandon(self._clock())
                self._clear()

        now = self._clock()
        self.task_id = task_id
        self.started_at = now
        self.elapsed = 0
        self.session = TimerSession(
            id=new_id("session"),
            task_id=task_id,
            start_time=timestamp(now),
            session_type=session_type,
        )
        self.sessions.append(self.session)
        return self.session

    def pause(self) -> int:
        """Bank the running interval; returns elapsed seconds so far."""
        if self.state == RUNNING:
            self._flush(self._clock())
        return self.elapsed

    def resume(self) -> None:
        if self.state == PAUSED:
            self.started_at = self._clock()

    def stop(self) -> TimerSession | None:
        """Close the session as completed and return it (None when idle)."""
        if self.state == IDLE or self.session is None:
            return None
        now = self._clock()
        self._flush(now)
        session = self.session
        session.duration = self.elapsed
        session.end_time = timestamp(now)
        session.completed = True
        self._clear()
        logger.debug("Timer stopped for %s after %ss", session.task_id, session.duration)
        return session

    def reset(self) -> None:
        """Hard cancel: the open session is abandoned and nothing is committed."""
        if self.state == IDLE:
            return
        self._abandon(self._clock())
        self._clear()

    # ── Queries ──

    def elapsed_seconds(self) -> int:
        """Banked time plus the running interval; safe to poll."""
        if self.started_at is None:
            return self.elapsed
        return self.elapsed + max(0, int((self._clock() - self.started_at).total_seconds()))

    def sessions_for_task(self, task_id: str) -> list[TimerSession]:
        return [s for s in self.sessions if s.task_id == task_id]

    def total_time_for_task(self, task_id: str) -> int:
        """Sum of completed session durations; independent of Task.time_spent."""
        return sum(s.duration for s in self.sessions if s.task_id == task_id and s.completed)

    def open_session(self) -> TimerSession | None:
        return self.session
