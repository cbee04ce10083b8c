"""Tests for the date/time helpers."""

from datetime import date, datetime

import pytest

from eventdesk.domain.errors import InvalidDate, InvalidFormat
from eventdesk.services.dates import (
    add_days,
    add_months,
    add_weeks,
    days_in_month,
    event_duration_hours,
    first_weekday_of_month,
    format_date,
    format_duration,
    format_time_12h,
    format_week_range,
    is_same_day,
    is_time_between,
    is_weekend,
    navigate_month,
    navigate_week,
    normalize_time,
    parse_date,
    sort_events_by_time,
    start_of_week,
    to_minutes,
    week_days,
)


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value, expected",
    [("00:00", 0), ("09:05", 545), ("9:05", 545), ("23:59", 1439)],
)
def test_to_minutes(value, expected):
    assert to_minutes(value) == expected


@pytest.mark.parametrize(
    "value",
    ["24:00", "12:60", "1200", "12:3", "ab:cd", "12:00:00", "", "-1:00", "０９:３０", "٠٩:٣٠"],
)
def test_to_minutes_rejects_bad_input(value):
    with pytest.raises(InvalidFormat):
        to_minutes(value)


def test_invalid_format_is_a_value_error():
    with pytest.raises(ValueError):
        to_minutes("noon")


def test_normalize_time_pads_hours():
    assert normalize_time("9:05") == "09:05"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("00:00", "12:00 AM"),
        ("00:05", "12:05 AM"),
        ("09:30", "9:30 AM"),
        ("12:00", "12:00 PM"),
        ("13:05", "1:05 PM"),
        ("23:59", "11:59 PM"),
    ],
)
def test_format_time_12h(value, expected):
    assert format_time_12h(value) == expected


def test_is_time_between_is_half_open():
    assert is_time_between("09:00", "09:00", "10:00")
    assert is_time_between("09:59", "09:00", "10:00")
    assert not is_time_between("10:00", "09:00", "10:00")


def test_durations():
    assert event_duration_hours("09:00", "10:30") == 1.5
    assert format_duration(0.75) == "45m"
    assert format_duration(2) == "2h"
    assert format_duration(1.5) == "1h 30m"


def test_sort_events_by_time_is_stable():
    events = [
        {"id": "a", "start_time": "10:00"},
        {"id": "b", "start_time": "09:00"},
        {"id": "c", "start_time": "10:00"},
    ]
    assert [e["id"] for e in sort_events_by_time(events)] == ["b", "a", "c"]


# ---------------------------------------------------------------------------
# Calendar dates
# ---------------------------------------------------------------------------


def test_parse_date():
    assert parse_date("2024-06-10") == date(2024, 6, 10)
    assert parse_date(datetime(2024, 6, 10, 15, 30)) == date(2024, 6, 10)
    assert parse_date(date(2024, 6, 10)) == date(2024, 6, 10)


@pytest.mark.parametrize(
    "value",
    ["2024-13-01", "June 10", "", None, 20240610, "20240610", "2024-W24-1", "２０２４-０６-１０"],
)
def test_parse_date_rejects_garbage(value):
    with pytest.raises(InvalidDate):
        parse_date(value)


def test_days_in_month():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2024, 12) == 31


def test_first_weekday_of_month_is_sunday_based():
    assert first_weekday_of_month(2024, 2) == 4  # Thursday
    assert first_weekday_of_month(2024, 6) == 6  # Saturday
    assert first_weekday_of_month(2024, 9) == 0  # Sunday


def test_is_same_day_ignores_time():
    assert is_same_day(datetime(2024, 6, 10, 8, 0), datetime(2024, 6, 10, 23, 59))
    assert is_same_day(date(2024, 6, 10), datetime(2024, 6, 10, 12, 0))
    assert not is_same_day(date(2024, 6, 10), date(2024, 6, 11))


def test_date_arithmetic_rolls_over():
    assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)
    assert add_weeks(date(2024, 2, 26), 1) == date(2024, 3, 4)
    assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)
    assert add_months(date(2024, 3, 15), -3) == date(2023, 12, 15)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)


def test_week_helpers():
    assert start_of_week(date(2024, 6, 10)) == date(2024, 6, 9)
    assert start_of_week(date(2024, 6, 9)) == date(2024, 6, 9)
    days = week_days(date(2024, 6, 12))
    assert days[0] == date(2024, 6, 9)
    assert days[-1] == date(2024, 6, 15)
    assert len(days) == 7


def test_is_weekend():
    assert is_weekend(date(2024, 6, 9))
    assert is_weekend(date(2024, 6, 15))
    assert not is_weekend(date(2024, 6, 10))


def test_navigation():
    assert navigate_month(date(2024, 6, 10), "next") == date(2024, 7, 10)
    assert navigate_month(date(2024, 6, 10), "prev") == date(2024, 5, 10)
    assert navigate_week(date(2024, 6, 10), "next") == date(2024, 6, 17)
    assert navigate_week(date(2024, 6, 10), "sideways") == date(2024, 6, 10)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "fmt, expected",
    [
        ("yyyy-MM-dd", "2024-06-10"),
        ("MMMM yyyy", "June 2024"),
        ("EEE, MMM d", "Mon, Jun 10"),
        ("EEEE, MMMM d, yyyy", "Monday, June 10, 2024"),
        ("MM/dd/yyyy", "06/10/2024"),
        ("unknown", "2024-06-10"),
    ],
)
def test_format_date(fmt, expected):
    assert format_date(date(2024, 6, 10), fmt) == expected


def test_format_week_range():
    assert format_week_range(date(2024, 6, 10)) == "Jun 9 - Jun 15"
    assert format_week_range(date(2024, 12, 31)) == "Dec 29 - Jan 4, 2025"
