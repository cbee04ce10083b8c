"""Domain events emitted when events or the session change."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from eventdesk.domain.models import UserIdentity


class EventChange(BaseModel):
    """Base for notifications about a stored Event."""

    event_id: str


class EventCreated(EventChange):
    """Fired after a new Event is persisted."""


class EventUpdated(EventChange):
    """Fired after an Event is changed; ``changed_fields`` lists what moved."""

    changed_fields: list[str]


class EventDeleted(EventChange):
    pass


class ConflictDetected(BaseModel):
    """Advisory: a saved scheduled event overlaps others on the same day."""

    event_id: str
    conflicting_event_ids: list[str]


class AuthChange(StrEnum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    SIGNED_UP = "signed_up"


class AuthStateChanged(BaseModel):
    """Fired by the Session whenever its current user changes."""

    change: AuthChange
    user: UserIdentity | None = None
