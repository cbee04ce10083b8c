"""Error taxonomy for the scheduling core and its collaborators."""

from __future__ import annotations


class EventDeskError(Exception):
    """Base class for every error raised by eventdesk."""


class InvalidFormat(EventDeskError, ValueError):
    """A time or date string does not match the expected shape."""


class InvalidRange(EventDeskError, ValueError):
    """A time range whose start is not strictly before its end."""


class InvalidDate(EventDeskError, ValueError):
    """A reference date that cannot be parsed."""


class UpstreamUnavailable(EventDeskError):
    """The event store or auth provider could not be reached."""


class NotAuthenticated(EventDeskError):
    """The operation needs a signed-in user."""


class AuthenticationFailed(EventDeskError):
    """Bad credentials, duplicate sign-up or an unknown token."""


class PermissionDenied(EventDeskError):
    """The signed-in user does not own the event."""


class EventNotFound(EventDeskError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class InvalidEvent(EventDeskError, ValueError):
    """A write would leave an event in an invalid state."""
