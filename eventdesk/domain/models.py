"""Domain models for the scheduling system."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from eventdesk.domain.errors import InvalidRange
from eventdesk.services.dates import normalize_time, to_minutes


class EventStatus(StrEnum):
    SCHEDULED = "scheduled"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_order(start_time: str | None, end_time: str | None) -> None:
    if start_time is None or end_time is None:
        return
    if to_minutes(end_time) <= to_minutes(start_time):
        raise InvalidRange("end_time must be after start_time")


def _not_blank(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


TimeOfDay = Annotated[str, AfterValidator(normalize_time)]
RequiredText = Annotated[str, AfterValidator(_not_blank)]
OptionalText = Annotated[str | None, AfterValidator(_blank_to_none)]


# ---------------------------------------------------------------------------
# Status variants
# ---------------------------------------------------------------------------


class ScheduledDetails(BaseModel):
    status: Literal["scheduled"] = "scheduled"


class PostponedDetails(BaseModel):
    status: Literal["postponed"] = "postponed"
    reason: str
    # Filled in from the stored event; ignored on input.
    original_date: date | None = None

    @field_validator("reason")
    @classmethod
    def _reason_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("a postponed event needs a reason")
        return v


class CancelledDetails(BaseModel):
    status: Literal["cancelled"] = "cancelled"


StatusDetails = Annotated[
    Union[ScheduledDetails, PostponedDetails, CancelledDetails],
    Field(discriminator="status"),
]


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: RequiredText
    event_date: date
    start_time: TimeOfDay
    end_time: TimeOfDay
    status: EventStatus = EventStatus.SCHEDULED
    location: str | None = None
    description: str | None = None
    facilitator: str | None = None
    created_by: str
    original_date: date | None = None
    postponed_reason: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Event:
        _check_order(self.start_time, self.end_time)
        return self

    @property
    def details(self) -> ScheduledDetails | PostponedDetails | CancelledDetails:
        """The status-specific view of this event."""
        if self.status == EventStatus.POSTPONED:
            return PostponedDetails(
                reason=self.postponed_reason or "Not specified",
                original_date=self.original_date,
            )
        if self.status == EventStatus.CANCELLED:
            return CancelledDetails()
        return ScheduledDetails()


class UserIdentity(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    role: str | None = None
    is_admin: bool = False


class CalendarCell(BaseModel):
    day: date
    is_current_period: bool
    is_today: bool
    events: list[Event] = Field(default_factory=list)


class ConflictReport(BaseModel):
    conflicts: list[Event] = Field(default_factory=list)
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventDraft(BaseModel):
    """Everything a user fills in to create an event."""

    title: RequiredText
    event_date: date
    start_time: TimeOfDay
    end_time: TimeOfDay
    location: RequiredText
    description: OptionalText = None
    facilitator: OptionalText = None
    details: StatusDetails = Field(default_factory=ScheduledDetails)

    @model_validator(mode="after")
    def _end_after_start(self) -> EventDraft:
        _check_order(self.start_time, self.end_time)
        return self


class EventPatch(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    title: RequiredText | None = None
    event_date: date | None = None
    start_time: TimeOfDay | None = None
    end_time: TimeOfDay | None = None
    location: RequiredText | None = None
    description: OptionalText = None
    facilitator: OptionalText = None
    details: StatusDetails | None = None

    @field_validator("title", "event_date", "start_time", "end_time", "location")
    @classmethod
    def _no_explicit_null(cls, v: object) -> object:
        # Omit a field to keep it; null would erase a required column.
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    @model_validator(mode="after")
    def _end_after_start(self) -> EventPatch:
        _check_order(self.start_time, self.end_time)
        return self


class ConflictCheckRequest(BaseModel):
    event_date: date
    start_time: TimeOfDay
    end_time: TimeOfDay
    exclude_event_id: str | None = None


class SubmitResponse(BaseModel):
    event: Event
    conflict_report: ConflictReport
    warning: str | None = None


class SignUpRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str | None = None


class SignInRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserIdentity


class DashboardStats(BaseModel):
    today: int = 0
    this_week: int = 0
    upcoming: int = 0


class DashboardResponse(BaseModel):
    stats: DashboardStats
    todays_events: list[Event] = Field(default_factory=list)
    upcoming_events: list[Event] = Field(default_factory=list)
    past_events: list[Event] = Field(default_factory=list)


class CalendarResponse(BaseModel):
    reference: date
    label: str
    cells: list[CalendarCell]
