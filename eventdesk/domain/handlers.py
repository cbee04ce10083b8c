"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import structlog

from eventdesk.domain.bus import EventBus
from eventdesk.domain.events import (
    ConflictDetected,
    EventCreated,
    EventDeleted,
    EventUpdated,
)
from eventdesk.domain.models import EventStatus
from eventdesk.repos.memory import EventRepository
from eventdesk.services.conflicts import find_conflicts

logger = structlog.get_logger(__name__)

# Only these edits can create or clear an overlap.
_SCHEDULE_FIELDS = {"event_date", "start_time", "end_time", "status"}


class HandlerRegistry:
    """Re-checks saved events for overlaps and reports them on the bus.

    Conflicts are advisory: the handlers never change or reject an event,
    they only publish :class:`ConflictDetected` and log it. ``detected``
    holds the current overlaps, one entry per event that has any.
    """

    def __init__(self, bus: EventBus, event_repo: EventRepository) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.detected: dict[str, ConflictDetected] = {}
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventCreated, self.on_event_created)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_created(self, event: EventCreated) -> None:
        self._recheck(event.event_id)

    def on_event_updated(self, event: EventUpdated) -> None:
        if _SCHEDULE_FIELDS.intersection(event.changed_fields):
            self._recheck(event.event_id)

    def on_event_deleted(self, event: EventDeleted) -> None:
        self.detected.pop(event.event_id, None)
        self._settle_partners(event.event_id)

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        self.detected[event.event_id] = event
        logger.warning(
            "conflict_detected",
            event_id=event.event_id,
            conflicting_event_ids=event.conflicting_event_ids,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _overlapping_ids(self, event_id: str) -> list[str]:
        stored = self.event_repo.get(event_id)
        if stored is None or stored.status != EventStatus.SCHEDULED:
            return []
        pool = self.event_repo.list_for_date(stored.event_date)
        conflicts = find_conflicts(
            stored.event_date, stored.start_time, stored.end_time, pool, exclude_event_id=stored.id
        )
        return [c.id for c in conflicts]

    def _recheck(self, event_id: str) -> None:
        ids = self._overlapping_ids(event_id)
        if ids:
            self.bus.publish(ConflictDetected(event_id=event_id, conflicting_event_ids=ids))
        elif self.detected.pop(event_id, None) is not None:
            logger.info("conflict_cleared", event_id=event_id)
        self._settle_partners(event_id, also=ids)

    def _settle_partners(self, event_id: str, also: list[str] | None = None) -> None:
        """Refresh entries that named *event_id* (or are listed in *also*) without publishing."""
        partners = [
            other_id
            for other_id, found in self.detected.items()
            if other_id != event_id
            and (event_id in found.conflicting_event_ids or other_id in (also or ()))
        ]
        for other_id in partners:
            ids = self._overlapping_ids(other_id)
            if ids:
                self.detected[other_id] = ConflictDetected(
                    event_id=other_id, conflicting_event_ids=ids
                )
            else:
                del self.detected[other_id]
