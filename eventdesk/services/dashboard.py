"""Summary counts and event lists for the dashboard pages."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from eventdesk.domain.models import DashboardResponse, DashboardStats, Event, EventStatus
from eventdesk.services.dates import to_minutes

WEEK_AHEAD_DAYS = 7


def _scheduled(events: Iterable[Event]) -> list[Event]:
    return [e for e in events if e.status == EventStatus.SCHEDULED]


def _by_time(events: list[Event], reverse: bool = False) -> list[Event]:
    return sorted(events, key=lambda e: (e.event_date, to_minutes(e.start_time)), reverse=reverse)


def dashboard_stats(events: Iterable[Event], today: date) -> DashboardStats:
    """Counts of scheduled events today, in the coming week, and after today."""
    scheduled = _scheduled(events)
    week_end = today + timedelta(days=WEEK_AHEAD_DAYS)
    return DashboardStats(
        today=sum(1 for e in scheduled if e.event_date == today),
        this_week=sum(1 for e in scheduled if today <= e.event_date <= week_end),
        upcoming=sum(1 for e in scheduled if e.event_date > today),
    )


def todays_events(events: Iterable[Event], today: date) -> list[Event]:
    return _by_time([e for e in _scheduled(events) if e.event_date == today])


def upcoming_events(events: Iterable[Event], today: date, limit: int = 5) -> list[Event]:
    return _by_time([e for e in _scheduled(events) if e.event_date > today])[:limit]


def past_events(events: Iterable[Event], today: date, limit: int = 5) -> list[Event]:
    """Most recent first, any status."""
    return _by_time([e for e in events if e.event_date < today], reverse=True)[:limit]


def build_dashboard(events: Iterable[Event], today: date, limit: int = 5) -> DashboardResponse:
    events = list(events)
    return DashboardResponse(
        stats=dashboard_stats(events, today),
        todays_events=todays_events(events, today),
        upcoming_events=upcoming_events(events, today, limit),
        past_events=past_events(events, today, limit),
    )
