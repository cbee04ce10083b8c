"""Event store gateway: ownership-scoped CRUD over the event repository."""

from __future__ import annotations

from datetime import date

import structlog

from eventdesk.auth.session import Session
from eventdesk.domain.bus import EventBus
from eventdesk.domain.errors import EventNotFound, PermissionDenied
from eventdesk.domain.events import EventCreated, EventDeleted, EventUpdated
from eventdesk.domain.models import Event, EventDraft, EventPatch, EventStatus
from eventdesk.repos.memory import EventRepository
from eventdesk.services.lifecycle import changes_from_patch, fields_from_draft

logger = structlog.get_logger(__name__)


class EventStoreGateway:
    """Shared calendar access for the signed-in user of *session*.

    Every authenticated user can read every event; only the creator of an
    event may change or delete it.
    """

    def __init__(self, repo: EventRepository, session: Session, bus: EventBus) -> None:
        self.repo = repo
        self.session = session
        self.bus = bus

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_events(self) -> list[Event]:
        """All events, by date then start time; empty when nobody is signed in."""
        if self.session.current_user is None:
            return []
        return self.repo.list_all()

    def get_event(self, event_id: str) -> Event:
        self.session.require_user()
        event = self.repo.get(event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    def events_on(self, event_date: date, status: EventStatus | None = None) -> list[Event]:
        self.session.require_user()
        return self.repo.list_for_date(event_date, status=status)

    def is_event_owner(self, event_id: str) -> bool:
        user = self.session.current_user
        event = self.repo.get(event_id)
        return user is not None and event is not None and event.created_by == user.id

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_event(self, draft: EventDraft) -> Event:
        user = self.session.require_user()
        event = Event(**fields_from_draft(draft), created_by=user.id)
        self.repo.add(event)
        logger.info(
            "event_created",
            event_id=event.id,
            event_date=event.event_date.isoformat(),
            created_by=user.id[:8],
        )
        self.bus.publish(EventCreated(event_id=event.id))
        return event

    def update_event(self, event_id: str, patch: EventPatch) -> Event:
        current = self._owned(event_id, "modify")
        changes = changes_from_patch(current, patch)
        if not changes:
            return current
        updated = self.repo.update(event_id, changes)
        if updated is None:
            raise EventNotFound(event_id)
        logger.info("event_updated", event_id=event_id, changed_fields=sorted(changes))
        self.bus.publish(EventUpdated(event_id=event_id, changed_fields=sorted(changes)))
        return updated

    def delete_event(self, event_id: str) -> None:
        self._owned(event_id, "delete")
        self.repo.delete(event_id)
        logger.info("event_deleted", event_id=event_id)
        self.bus.publish(EventDeleted(event_id=event_id))

    def _owned(self, event_id: str, action: str) -> Event:
        user = self.session.require_user()
        event = self.repo.get(event_id)
        if event is None:
            raise EventNotFound(event_id)
        if event.created_by != user.id:
            logger.warning("event_write_denied", event_id=event_id, action=action, user_id=user.id[:8])
            raise PermissionDenied(f"You can only {action} events you created")
        return event
