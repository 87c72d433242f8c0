"""Date arithmetic and duration formatting for DoFive.

All calendar days travel as ISO strings (YYYY-MM-DD) so they compare and
sort lexically; datetimes are only used at the edges.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from dofive.errors import InvalidFieldError


# ── Parsing / formatting ──────────────────────────────────────


def format_date(d: date | datetime) -> str:
    """Return the calendar-day string for a date or datetime."""
    if isinstance(d, datetime):
        d = d.date()
    return d.isoformat()


def parse_date(s: str) -> date:
    """Parse 'YYYY-MM-DD'. Raises InvalidFieldError on anything else."""
    try:
        return date.fromisoformat(s)
    except (TypeError, ValueError):
        raise InvalidFieldError(f"Invalid calendar day: {s!r}") from None


def is_valid_date(s: str) -> bool:
    try:
        parse_date(s)
    except InvalidFieldError:
        return False
    return True


def today_str(now: datetime) -> str:
    """Calendar day of *now*, an aware datetime from the caller's clock."""
    return format_date(now)


def tomorrow_str(now: datetime) -> str:
    return add_days(today_str(now), 1)


def yesterday_str(now: datetime) -> str:
    return add_days(today_str(now), -1)


# ── Arithmetic ────────────────────────────────────────────────


def add_days(day: str, days: int) -> str:
    return format_date(parse_date(day) + timedelta(days=days))


def days_between(start: str, end: str) -> int:
    """Signed number of days from *start* to *end*."""
    return (parse_date(end) - parse_date(start)).days


def days_until(target: str, today: str) -> int:
    return days_between(today, target)


def is_date_in_range(day: str, start: str, end: str) -> bool:
    """Inclusive on both ends."""
    return start <= day <= end


def week_dates(week_starts_on: int = 1, ref: str | None = None) -> list[str]:
    """The seven days of the week containing *ref*.

    *week_starts_on* uses the 0=Sunday .. 6=Saturday numbering.
    """
    ref_date = parse_date(ref) if ref else date.today()
    sunday_based = (ref_date.weekday() + 1) % 7
    diff = (sunday_based - week_starts_on) % 7
    start = ref_date - timedelta(days=diff)
    return [format_date(start + timedelta(days=i)) for i in range(7)]


def week_range(start: str) -> tuple[str, str]:
    """Seven consecutive days beginning at *start*."""
    return start, add_days(start, 6)


def month_range(year: int, month: int) -> tuple[str, str]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last).isoformat()


def month_dates(year: int, month: int) -> list[str]:
    start, end = month_range(year, month)
    return date_span(start, end)


def date_span(start: str, end: str) -> list[str]:
    """Every day from *start* to *end* inclusive (empty if end < start)."""
    n = days_between(start, end)
    return [add_days(start, i) for i in range(n + 1)]


# ── Durations ─────────────────────────────────────────────────


def format_time(seconds: int) -> str:
    """Clock-style duration: MM:SS, or HH:MM:SS once past an hour."""
    seconds = int(seconds)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_time_human(seconds: int) -> str:
    """Compact duration: '45s', '5m', '2h', '1h 30m'."""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    hours, rem = divmod(seconds, 3600)
    minutes = rem // 60
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def relative_date_label(day: str, today: str) -> str:
    """'Today', 'Yesterday', 'Tomorrow', else e.g. 'Mar 4' ('Mar 4, 2023' for other years)."""
    offset = days_between(today, day)
    if offset == 0:
        return "Today"
    if offset == -1:
        return "Yesterday"
    if offset == 1:
        return "Tomorrow"
    d = parse_date(day)
    label = f"{calendar.month_abbr[d.month]} {d.day}"
    if d.year != parse_date(today).year:
        label += f", {d.year}"
    return label
