"""Date and time helpers shared by the conflict detector, grid builder and dashboard.

Times of day travel through the system as ``HH:MM`` strings (minute
precision, 24-hour clock). Dates are plain :class:`datetime.date` values;
weekdays are numbered Sunday-first (0 = Sunday ... 6 = Saturday) to match
the calendar grid layout.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable, TypeVar

from dateutil.relativedelta import relativedelta

from eventdesk.domain.errors import InvalidDate, InvalidFormat

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------


def to_minutes(time: str) -> int:
    """Convert ``HH:MM`` into minutes since midnight.

    Raises ``InvalidFormat`` when the value is not two colon-separated
    integers or the hour/minute are out of range.
    """
    if not isinstance(time, str):
        raise InvalidFormat(f"Invalid time format: {time!r}")
    m = _TIME_RE.match(time.strip())
    if m is None:
        raise InvalidFormat(f"Invalid time format: {time!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidFormat(f"Invalid time value: {time!r}")
    return hours * 60 + minutes


def normalize_time(time: str) -> str:
    """Return *time* zero-padded as ``HH:MM`` (``"9:05"`` -> ``"09:05"``)."""
    total = to_minutes(time)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_time_12h(time: str) -> str:
    """Render a 24-hour ``HH:MM`` value as ``h:MM AM/PM``."""
    total = to_minutes(time)
    hours, minutes = divmod(total, 60)
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def is_time_between(time: str, start_time: str, end_time: str) -> bool:
    """True when *time* falls in the half-open range ``[start, end)``."""
    return to_minutes(start_time) <= to_minutes(time) < to_minutes(end_time)


def event_duration_hours(start_time: str, end_time: str) -> float:
    return (to_minutes(end_time) - to_minutes(start_time)) / 60


def format_duration(hours: float) -> str:
    """``0.75 -> "45m"``, ``2 -> "2h"``, ``1.5 -> "1h 30m"``."""
    if hours < 1:
        return f"{round(hours * 60)}m"
    whole = int(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h {minutes}m" if minutes else f"{whole}h"


def sort_events_by_time(events: Iterable[T]) -> list[T]:
    """Order events by ``start_time``; ties keep their input order."""
    return sorted(events, key=lambda e: to_minutes(_attr(e, "start_time")))


def _attr(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj[name]
    return getattr(obj, name)


# ---------------------------------------------------------------------------
# Calendar dates
# ---------------------------------------------------------------------------


def parse_date(value: date | datetime | str) -> date:
    """Coerce *value* into a :class:`date`.

    Accepts ``date``/``datetime`` instances and ``YYYY-MM-DD`` strings (other
    ISO 8601 spellings such as ``20240610`` or week dates are refused).
    Anything else raises ``InvalidDate``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _DATE_RE.match(value.strip()):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidDate(f"Invalid date: {value!r}")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def sunday_weekday(d: date) -> int:
    """Weekday of *d* with Sunday = 0."""
    return (d.weekday() + 1) % 7


def first_weekday_of_month(year: int, month: int) -> int:
    return sunday_weekday(date(year, month, 1))


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    """Compare the calendar date of *a* and *b*, ignoring any time part."""
    return parse_date(a) == parse_date(b)


def is_weekend(d: date) -> bool:
    return sunday_weekday(d) in (0, 6)


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def add_weeks(d: date, n: int) -> date:
    return d + timedelta(weeks=n)


def add_months(d: date, n: int) -> date:
    """Shift *d* by *n* months, clamping the day to the target month's length."""
    return d + relativedelta(months=n)


def start_of_week(d: date) -> date:
    """The Sunday on or before *d*."""
    return d - timedelta(days=sunday_weekday(d))


def week_days(d: date) -> list[date]:
    start = start_of_week(d)
    return [start + timedelta(days=i) for i in range(7)]


def navigate_month(d: date, direction: str) -> date:
    if direction == "next":
        return add_months(d, 1)
    if direction == "prev":
        return add_months(d, -1)
    return d


def navigate_week(d: date, direction: str) -> date:
    if direction == "next":
        return add_weeks(d, 1)
    if direction == "prev":
        return add_weeks(d, -1)
    return d


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

_DATE_FORMATS = {
    "yyyy-MM-dd": lambda d: d.isoformat(),
    "MMMM yyyy": lambda d: f"{calendar.month_name[d.month]} {d.year}",
    "EEE, MMM d": lambda d: (
        f"{calendar.day_abbr[d.weekday()]}, {calendar.month_abbr[d.month]} {d.day}"
    ),
    "EEEE, MMMM d, yyyy": lambda d: (
        f"{calendar.day_name[d.weekday()]}, {calendar.month_name[d.month]} {d.day}, {d.year}"
    ),
    "MM/dd/yyyy": lambda d: f"{d.month:02d}/{d.day:02d}/{d.year}",
}


def format_date(d: date, fmt: str = "yyyy-MM-dd") -> str:
    """Format *d* with one of the display patterns used by the calendar views.

    Unknown patterns fall back to ISO format.
    """
    formatter = _DATE_FORMATS.get(fmt)
    return formatter(d) if formatter else d.isoformat()


def format_week_range(d: date) -> str:
    """``"Jun 9 - Jun 15"``; the year is appended when the week spans two years."""
    start = start_of_week(d)
    end = start + timedelta(days=6)
    start_label = f"{calendar.month_abbr[start.month]} {start.day}"
    end_label = f"{calendar.month_abbr[end.month]} {end.day}"
    if start.year != end.year:
        end_label = f"{end_label}, {end.year}"
    return f"{start_label} - {end_label}"
