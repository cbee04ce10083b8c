"""Status transitions and write-time validation for events."""

from __future__ import annotations

from datetime import date
from typing import Any

from eventdesk.domain.errors import InvalidRange
from eventdesk.domain.models import (
    CancelledDetails,
    Event,
    EventDraft,
    EventPatch,
    EventStatus,
    PostponedDetails,
    ScheduledDetails,
)
from eventdesk.services.dates import to_minutes

StatusVariant = ScheduledDetails | PostponedDetails | CancelledDetails


def validate_time_range(start_time: str, end_time: str) -> None:
    if to_minutes(start_time) >= to_minutes(end_time):
        raise InvalidRange("End time must be after start time.")


def apply_status_transition(
    current: Event | None,
    details: StatusVariant,
    event_date: date,
) -> dict[str, Any]:
    """Return the status fields to persist when an event takes on *details*.

    ``original_date`` remembers where a postponed event used to be: it is set
    from the stored date the first time the event is postponed, kept while it
    stays postponed or gets cancelled, and cleared when it is scheduled again.
    """
    if isinstance(details, PostponedDetails):
        if current is not None and current.original_date is not None:
            original = current.original_date
        elif current is not None:
            original = current.event_date
        else:
            original = event_date
        return {
            "status": EventStatus.POSTPONED,
            "postponed_reason": details.reason,
            "original_date": original,
        }
    if isinstance(details, CancelledDetails):
        return {
            "status": EventStatus.CANCELLED,
            "postponed_reason": None,
            "original_date": current.original_date if current is not None else None,
        }
    return {
        "status": EventStatus.SCHEDULED,
        "postponed_reason": None,
        "original_date": None,
    }


def fields_from_draft(draft: EventDraft) -> dict[str, Any]:
    """Flatten a validated draft into the columns of a new Event."""
    validate_time_range(draft.start_time, draft.end_time)
    fields = draft.model_dump(exclude={"details"})
    fields.update(apply_status_transition(None, draft.details, draft.event_date))
    return fields


def changes_from_patch(current: Event, patch: EventPatch) -> dict[str, Any]:
    """Merge *patch* over *current* and return only the columns that change.

    The merged start/end pair must still be ordered, even when the patch
    moves just one end of the range.
    """
    provided = patch.model_dump(exclude_unset=True, exclude={"details"})
    start_time = provided.get("start_time", current.start_time)
    end_time = provided.get("end_time", current.end_time)
    validate_time_range(start_time, end_time)

    if patch.details is not None:
        event_date = provided.get("event_date", current.event_date)
        provided.update(apply_status_transition(current, patch.details, event_date))

    return {k: v for k, v in provided.items() if getattr(current, k) != v}


def needs_conflict_check(status: EventStatus | str) -> bool:
    """Only scheduled events take part in conflict detection."""
    return status == EventStatus.SCHEDULED
