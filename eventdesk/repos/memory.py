"""In-memory repository for events."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError

from eventdesk.domain.errors import InvalidEvent
from eventdesk.domain.models import Event, EventStatus
from eventdesk.services.dates import to_minutes


def _calendar_order(event: Event) -> tuple[date, int]:
    return event.event_date, to_minutes(event.start_time)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        """All events ordered by date, then start time."""
        return sorted(self._store.values(), key=_calendar_order)

    def list_for_date(
        self,
        event_date: date,
        status: EventStatus | None = None,
        exclude_id: str | None = None,
    ) -> list[Event]:
        """Events on a single day in insertion order, optionally narrowed by status."""
        return [
            e
            for e in self._store.values()
            if e.event_date == event_date
            and (status is None or e.status == status)
            and e.id != exclude_id
        ]

    def update(self, event_id: str, changes: dict[str, Any]) -> Event | None:
        stored = self._store.get(event_id)
        if stored is None:
            return None
        # Re-validate so a bad merge never lands in the store.
        try:
            updated = Event.model_validate(
                {**stored.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
            )
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            detail = ", ".join(fields) or exc.errors()[0]["msg"]
            raise InvalidEvent(f"Invalid value for: {detail}") from exc
        self._store[event_id] = updated
        return updated

    def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None


# ---------------------------------------------------------------------------
# Seed data – a handful of events around today for local runs
# ---------------------------------------------------------------------------


def seed_events(repo: EventRepository, owner_id: str) -> None:
    today = date.today()

    repo.add(
        Event(
            title="Staff meeting",
            event_date=today,
            start_time="09:00",
            end_time="10:00",
            location="Conference Room A",
            facilitator="Operations",
            created_by=owner_id,
        )
    )
    repo.add(
        Event(
            title="Budget review",
            event_date=today,
            start_time="09:30",
            end_time="11:00",
            location="Conference Room B",
            created_by=owner_id,
        )
    )
    repo.add(
        Event(
            title="Training session",
            event_date=today + timedelta(days=2),
            start_time="13:00",
            end_time="15:00",
            location="Training Hall",
            description="All new hires",
            created_by=owner_id,
        )
    )
    repo.add(
        Event(
            title="Quarterly planning",
            event_date=today + timedelta(days=9),
            start_time="10:00",
            end_time="12:00",
            location="Board Room",
            status=EventStatus.POSTPONED,
            postponed_reason="Waiting on Q3 numbers",
            original_date=today + timedelta(days=5),
            created_by=owner_id,
        )
    )

