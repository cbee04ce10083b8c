"""Builds the month and week cell grids rendered by calendar views."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable

from eventdesk.domain.models import CalendarCell, Event, EventStatus
from eventdesk.services.dates import parse_date, sort_events_by_time, start_of_week

MONTH_GRID_CELLS = 42  # 6 weeks * 7 days
WEEK_GRID_CELLS = 7

DEFAULT_VISIBLE_STATUSES = frozenset({EventStatus.SCHEDULED, EventStatus.POSTPONED})


def visible_events(
    events: Iterable[Event],
    statuses: Iterable[EventStatus] = DEFAULT_VISIBLE_STATUSES,
) -> list[Event]:
    """Keep only events whose status should appear on a calendar."""
    allowed = set(statuses)
    return [e for e in events if e.status in allowed]


def events_for_day(events: Iterable[Event], day: date) -> list[Event]:
    """Events on *day*, ordered by start time (stable for equal starts)."""
    return sort_events_by_time(e for e in events if e.event_date == day)


def _bucket(events: Iterable[Event]) -> dict[date, list[Event]]:
    buckets: dict[date, list[Event]] = defaultdict(list)
    for event in events:
        buckets[event.event_date].append(event)
    return buckets


def _build_cells(
    first_day: date,
    count: int,
    events: Iterable[Event],
    today: date,
    in_period,
) -> list[CalendarCell]:
    buckets = _bucket(events)
    cells: list[CalendarCell] = []
    for offset in range(count):
        day = first_day + timedelta(days=offset)
        cells.append(
            CalendarCell(
                day=day,
                is_current_period=in_period(day),
                is_today=day == today,
                events=sort_events_by_time(buckets.get(day, [])),
            )
        )
    return cells


def build_month_grid(
    reference: date | datetime | str,
    events: Iterable[Event],
    today: date | None = None,
) -> list[CalendarCell]:
    """Return the 42 cells (six Sunday-first weeks) covering *reference*'s month.

    Leading and trailing cells from the neighbouring months are included with
    ``is_current_period=False``. *today* defaults to the system date, read
    once per call.
    """
    ref = parse_date(reference)
    today = today if today is not None else date.today()
    first_of_month = ref.replace(day=1)
    grid_start = start_of_week(first_of_month)
    return _build_cells(
        grid_start,
        MONTH_GRID_CELLS,
        events,
        today,
        lambda d: d.year == ref.year and d.month == ref.month,
    )


def build_week_grid(
    reference: date | datetime | str,
    events: Iterable[Event],
    today: date | None = None,
) -> list[CalendarCell]:
    """Return the seven cells from the Sunday to the Saturday of *reference*'s week."""
    ref = parse_date(reference)
    today = today if today is not None else date.today()
    return _build_cells(start_of_week(ref), WEEK_GRID_CELLS, events, today, lambda d: True)
