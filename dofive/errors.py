"""Exception types raised by the DoFive stores.

Everything derives from ValueError so callers that only care about
"bad input" can keep catching that.
"""

from __future__ import annotations


class DofiveError(ValueError):
    """Base class for errors raised by the DoFive core."""


class InvalidFieldError(DofiveError):
    """A field value outside its allowed set (status, type, date, ...)."""


class InvalidTimeDeltaError(DofiveError):
    """A negative time increment; totals are never clamped silently."""


class TimerConflictError(DofiveError):
    """start() called while another task is being timed."""

    def __init__(self, active_task_id: str, requested_task_id: str) -> None:
        super().__init__(
            f"Timer already active for task {active_task_id!r}; "
            f"stop it before starting {requested_task_id!r}."
        )
        self.active_task_id = active_task_id
        self.requested_task_id = requested_task_id


class HybridProgressError(DofiveError):
    """A hybrid goal needs an explicit progress amount."""


class SchemaVersionError(DofiveError):
    """A persisted document was written by a newer schema version."""
