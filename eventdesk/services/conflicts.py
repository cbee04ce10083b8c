"""Service for detecting scheduling conflicts between events on the same day."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Iterable

import structlog

from eventdesk.domain.errors import EventDeskError, InvalidRange, NotAuthenticated
from eventdesk.domain.models import ConflictReport, Event, EventStatus
from eventdesk.services.dates import parse_date, to_minutes

if TYPE_CHECKING:
    from eventdesk.gateway import EventStoreGateway

logger = structlog.get_logger(__name__)


def intervals_overlap(s1: int, e1: int, s2: int, e2: int) -> bool:
    """Half-open interval intersection of ``[s1, e1)`` and ``[s2, e2)``.

    Exact boundary touches (e1 == s2) are NOT considered overlapping.
    """
    return s1 < e2 and s2 < e1


def find_conflicts(
    event_date: date | str,
    start_time: str,
    end_time: str,
    existing_events: Iterable[Event],
    exclude_event_id: str | None = None,
) -> list[Event]:
    """Return the scheduled events on *event_date* that overlap ``[start, end)``.

    Postponed and cancelled events never conflict, and the event with id
    *exclude_event_id* (the one being edited) is skipped. The result keeps the
    order of *existing_events*.
    """
    day = parse_date(event_date)
    new_start = to_minutes(start_time)
    new_end = to_minutes(end_time)
    if new_start >= new_end:
        raise InvalidRange(f"start_time {start_time!r} must be before end_time {end_time!r}")

    conflicts: list[Event] = []
    for event in existing_events:
        if event.status != EventStatus.SCHEDULED:
            continue
        if exclude_event_id is not None and event.id == exclude_event_id:
            continue
        if event.event_date != day:
            continue
        if intervals_overlap(new_start, new_end, to_minutes(event.start_time), to_minutes(event.end_time)):
            conflicts.append(event)
    return conflicts


def detect_conflicts(
    event_date: date | str,
    start_time: str,
    end_time: str,
    existing_events: Iterable[Event],
    exclude_event_id: str | None = None,
) -> ConflictReport:
    """Pure variant of :func:`check_conflicts` over an already-fetched pool."""
    return ConflictReport(
        conflicts=find_conflicts(event_date, start_time, end_time, existing_events, exclude_event_id)
    )


def check_conflicts(
    gateway: EventStoreGateway,
    event_date: date | str,
    start_time: str,
    end_time: str,
    exclude_event_id: str | None = None,
) -> ConflictReport:
    """Advisory conflict check against the event store.

    Malformed input still raises (``InvalidFormat`` / ``InvalidRange``), but a
    failing store read never does: the report comes back empty with ``error``
    set so the caller can go ahead with the write.
    """
    day = parse_date(event_date)
    if to_minutes(start_time) >= to_minutes(end_time):
        raise InvalidRange(f"start_time {start_time!r} must be before end_time {end_time!r}")

    try:
        pool = gateway.events_on(day, status=EventStatus.SCHEDULED)
    except NotAuthenticated:
        return ConflictReport()
    except EventDeskError as exc:
        logger.warning("conflict_check_failed", event_date=day.isoformat(), error=str(exc))
        return ConflictReport(error=str(exc) or "Failed to check conflicts")

    report = detect_conflicts(day, start_time, end_time, pool, exclude_event_id)
    if report.has_conflicts:
        logger.info(
            "conflicts_found",
            event_date=day.isoformat(),
            start_time=start_time,
            end_time=end_time,
            conflicting_event_ids=[e.id for e in report.conflicts],
        )
    return report
