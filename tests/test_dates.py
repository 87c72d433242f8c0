"""Tests for dofive/dates.py — date arithmetic and duration formatting."""

from datetime import datetime, timedelta, timezone

import pytest

from dofive.dates import (
    add_days,
    date_span,
    days_between,
    format_time,
    format_time_human,
    is_date_in_range,
    is_valid_date,
    month_range,
    parse_date,
    relative_date_label,
    today_str,
    tomorrow_str,
    week_dates,
    week_range,
    yesterday_str,
)
from dofive.errors import InvalidFieldError


def test_add_days_crosses_month_and_leap_day():
    assert add_days("2024-02-28", 1) == "2024-02-29"
    assert add_days("2024-03-01", -1) == "2024-02-29"
    assert add_days("2023-12-31", 1) == "2024-01-01"


def test_parse_date_rejects_garbage():
    with pytest.raises(InvalidFieldError):
        parse_date("2024-13-01")
    assert is_valid_date("2024-01-01") is True
    assert is_valid_date("tomorrow") is False


def test_days_between_and_range():
    assert days_between("2024-01-01", "2024-01-10") == 9
    assert days_between("2024-01-10", "2024-01-01") == -9
    assert is_date_in_range("2024-01-05", "2024-01-01", "2024-01-05") is True
    assert is_date_in_range("2024-01-06", "2024-01-01", "2024-01-05") is False


def test_week_dates_monday_start():
    # 2024-01-10 is a Wednesday
    dates = week_dates(1, "2024-01-10")
    assert dates[0] == "2024-01-08"
    assert dates[-1] == "2024-01-14"
    assert len(dates) == 7


def test_week_dates_sunday_and_saturday_start():
    assert week_dates(0, "2024-01-10")[0] == "2024-01-07"
    assert week_dates(6, "2024-01-10")[0] == "2024-01-06"
    # The start day itself begins its own week
    assert week_dates(6, "2024-01-06")[0] == "2024-01-06"


def test_week_and_month_range():
    assert week_range("2024-01-08") == ("2024-01-08", "2024-01-14")
    assert month_range(2024, 2) == ("2024-02-01", "2024-02-29")
    assert month_range(2023, 12) == ("2023-12-01", "2023-12-31")


def test_date_span():
    assert date_span("2024-01-30", "2024-02-02") == [
        "2024-01-30",
        "2024-01-31",
        "2024-02-01",
        "2024-02-02",
    ]
    assert date_span("2024-01-02", "2024-01-01") == []


def test_format_time():
    assert format_time(0) == "00:00"
    assert format_time(65) == "01:05"
    assert format_time(3661) == "01:01:01"


def test_format_time_human():
    assert format_time_human(45) == "45s"
    assert format_time_human(300) == "5m"
    assert format_time_human(7200) == "2h"
    assert format_time_human(5400) == "1h 30m"


def test_relative_date_label():
    assert relative_date_label("2024-01-10", "2024-01-10") == "Today"
    assert relative_date_label("2024-01-09", "2024-01-10") == "Yesterday"
    assert relative_date_label("2024-01-11", "2024-01-10") == "Tomorrow"
    assert relative_date_label("2024-03-04", "2024-01-10") == "Mar 4"
    assert relative_date_label("2023-03-04", "2024-01-10") == "Mar 4, 2023"


def test_day_helpers_use_the_given_clock_reading():
    # 01:30 on the 11th in UTC+9 is still the 10th in UTC
    tokyo = datetime(2024, 1, 11, 1, 30, tzinfo=timezone(timedelta(hours=9)))
    assert today_str(tokyo) == "2024-01-11"
    assert tomorrow_str(tokyo) == "2024-01-12"
    assert yesterday_str(tokyo) == "2024-01-10"
    assert today_str(tokyo.astimezone(timezone.utc)) == "2024-01-10"
