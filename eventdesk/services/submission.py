"""Composes the advisory conflict check with the event write."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from eventdesk.domain.errors import EventDeskError
from eventdesk.domain.models import ConflictReport, Event, EventDraft, EventPatch
from eventdesk.gateway import EventStoreGateway
from eventdesk.services.conflicts import check_conflicts
from eventdesk.services.lifecycle import needs_conflict_check

logger = structlog.get_logger(__name__)

CONFLICT_WARNING = "Another event exists at this time. This event will still be created."


@dataclass
class SubmitResult:
    """Outcome of a create or update.

    ``event`` is set on success and ``failure`` on a failed write. The
    conflict report is informational either way.
    """

    event: Event | None = None
    failure: EventDeskError | None = None
    conflict_report: ConflictReport = field(default_factory=ConflictReport)

    @property
    def error(self) -> str | None:
        return None if self.failure is None else str(self.failure)

    @property
    def ok(self) -> bool:
        return self.error is None and self.event is not None

    @property
    def warning(self) -> str | None:
        return CONFLICT_WARNING if self.conflict_report.has_conflicts else None


def submit_event(
    gateway: EventStoreGateway,
    payload: EventDraft | EventPatch,
    event_id: str | None = None,
) -> SubmitResult:
    """Create (``event_id is None``) or update an event.

    Conflicts never block the write, and a failed conflict check is only
    logged. A failed write is returned as ``failure``.
    """
    if (event_id is None) != isinstance(payload, EventDraft):
        raise TypeError("create takes an EventDraft, update takes an EventPatch")

    try:
        if isinstance(payload, EventDraft):
            event_date, start, end = payload.event_date, payload.start_time, payload.end_time
            status = payload.details.status
        else:
            current = gateway.get_event(event_id)
            event_date = payload.event_date or current.event_date
            start = payload.start_time or current.start_time
            end = payload.end_time or current.end_time
            status = payload.details.status if payload.details is not None else current.status

        report = ConflictReport()
        if needs_conflict_check(status):
            report = check_conflicts(gateway, event_date, start, end, exclude_event_id=event_id)
        if report.error:
            logger.warning("conflict_check_skipped", error=report.error)

        if isinstance(payload, EventDraft):
            event = gateway.create_event(payload)
        else:
            event = gateway.update_event(event_id, payload)
    except EventDeskError as exc:
        logger.warning("event_submit_failed", event_id=event_id, error=str(exc))
        return SubmitResult(failure=exc)

    return SubmitResult(event=event, conflict_report=report)
