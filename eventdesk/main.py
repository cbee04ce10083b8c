"""FastAPI entry point for the shared scheduling service."""

from __future__ import annotations

from datetime import date

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from eventdesk.auth.provider import InMemoryAuthProvider
from eventdesk.auth.session import RouteDecision, Session, route_access
from eventdesk.config import get_settings
from eventdesk.domain.bus import EventBus
from eventdesk.domain.errors import (
    AuthenticationFailed,
    EventDeskError,
    EventNotFound,
    InvalidDate,
    InvalidEvent,
    InvalidFormat,
    InvalidRange,
    NotAuthenticated,
    PermissionDenied,
    UpstreamUnavailable,
)
from eventdesk.domain.handlers import HandlerRegistry
from eventdesk.domain.models import (
    CalendarResponse,
    ConflictCheckRequest,
    ConflictReport,
    DashboardResponse,
    Event,
    EventDraft,
    EventPatch,
    SignInRequest,
    SignUpRequest,
    SubmitResponse,
    TokenResponse,
    UserIdentity,
)
from eventdesk.gateway import EventStoreGateway
from eventdesk.logconfig import configure_logging
from eventdesk.repos.memory import EventRepository, seed_events
from eventdesk.services.conflicts import check_conflicts
from eventdesk.services.dashboard import build_dashboard
from eventdesk.services.dates import format_date, format_week_range, parse_date
from eventdesk.services.grid import (
    DEFAULT_VISIBLE_STATUSES,
    build_month_grid,
    build_week_grid,
    visible_events,
)
from eventdesk.services.submission import submit_event

settings = get_settings()
configure_logging(settings.environment, settings.log_level)

app = FastAPI(title="EventDesk Scheduling Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
auth_provider = InMemoryAuthProvider(admin_role=settings.admin_role)
handler_registry = HandlerRegistry(bus=event_bus, event_repo=event_repo)

if settings.seed_demo_data:
    _admin = auth_provider.sign_up(
        settings.demo_admin_email,
        settings.demo_admin_password,
        {"role": settings.admin_role, "full_name": "Demo Admin"},
    )
    seed_events(event_repo, _admin.id)


_ERROR_STATUS: list[tuple[type[EventDeskError], int]] = [
    (InvalidFormat, 422),
    (InvalidRange, 422),
    (InvalidDate, 422),
    (InvalidEvent, 422),
    (NotAuthenticated, 401),
    (AuthenticationFailed, 401),
    (PermissionDenied, 403),
    (EventNotFound, 404),
    (UpstreamUnavailable, 503),
]


@app.exception_handler(EventDeskError)
def _domain_error(request: Request, exc: EventDeskError) -> JSONResponse:
    status_code = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 400)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# ── Dependencies ──────────────────────────────────────────────────────


def get_session(authorization: str | None = Header(default=None)) -> Session:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    return Session(auth_provider, token=token)


def get_gateway(session: Session = Depends(get_session)) -> EventStoreGateway:
    return EventStoreGateway(event_repo, session, event_bus)


# ── Auth ──────────────────────────────────────────────────────────────


@app.post("/auth/sign-up", response_model=UserIdentity, status_code=201)
def sign_up(payload: SignUpRequest, session: Session = Depends(get_session)) -> UserIdentity:
    # Roles are granted out of band, never by self-registration.
    metadata = {"full_name": payload.full_name}
    return session.sign_up(payload.email, payload.password, metadata)


@app.post("/auth/sign-in", response_model=TokenResponse)
def sign_in(payload: SignInRequest, session: Session = Depends(get_session)) -> TokenResponse:
    user = session.sign_in(payload.email, payload.password)
    return TokenResponse(access_token=session.token, user=user)


@app.post("/auth/sign-out")
def sign_out(session: Session = Depends(get_session)) -> dict:
    session.sign_out()
    return {"status": "signed_out"}


@app.get("/auth/me", response_model=UserIdentity)
def me(session: Session = Depends(get_session)) -> UserIdentity:
    return session.require_user()


# ── Events ────────────────────────────────────────────────────────────


@app.get("/events", response_model=list[Event])
def list_events(gateway: EventStoreGateway = Depends(get_gateway)) -> list[Event]:
    """Return every event on the shared calendar."""
    return gateway.list_events()


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str, gateway: EventStoreGateway = Depends(get_gateway)) -> Event:
    return gateway.get_event(event_id)


@app.post("/events", response_model=SubmitResponse, status_code=201)
def create_event(
    payload: EventDraft, gateway: EventStoreGateway = Depends(get_gateway)
) -> SubmitResponse:
    """Create an event; overlaps are reported but never block the write."""
    result = submit_event(gateway, payload)
    if result.failure is not None:
        raise result.failure
    return SubmitResponse(
        event=result.event, conflict_report=result.conflict_report, warning=result.warning
    )


@app.patch("/events/{event_id}", response_model=SubmitResponse)
def update_event(
    event_id: str, payload: EventPatch, gateway: EventStoreGateway = Depends(get_gateway)
) -> SubmitResponse:
    result = submit_event(gateway, payload, event_id=event_id)
    if result.failure is not None:
        raise result.failure
    return SubmitResponse(
        event=result.event, conflict_report=result.conflict_report, warning=result.warning
    )


@app.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: str, gateway: EventStoreGateway = Depends(get_gateway)) -> None:
    gateway.delete_event(event_id)


@app.post("/events/conflicts", response_model=ConflictReport)
def conflicts(
    payload: ConflictCheckRequest, gateway: EventStoreGateway = Depends(get_gateway)
) -> ConflictReport:
    return check_conflicts(
        gateway,
        payload.event_date,
        payload.start_time,
        payload.end_time,
        exclude_event_id=payload.exclude_event_id,
    )


# ── Calendar views ────────────────────────────────────────────────────


def _calendar_events(gateway: EventStoreGateway, include_cancelled: bool) -> list[Event]:
    events = gateway.list_events()
    if include_cancelled:
        return events
    return visible_events(events, DEFAULT_VISIBLE_STATUSES)


@app.get("/calendar/month", response_model=CalendarResponse)
def month_view(
    ref: str | None = None,
    include_cancelled: bool = False,
    gateway: EventStoreGateway = Depends(get_gateway),
) -> CalendarResponse:
    """Return the 6x7 month grid for the month containing *ref* (default today)."""
    gateway.session.require_user()
    reference = parse_date(ref) if ref else date.today()
    cells = build_month_grid(reference, _calendar_events(gateway, include_cancelled))
    return CalendarResponse(reference=reference, label=format_date(reference, "MMMM yyyy"), cells=cells)


@app.get("/calendar/week", response_model=CalendarResponse)
def week_view(
    ref: str | None = None,
    include_cancelled: bool = False,
    gateway: EventStoreGateway = Depends(get_gateway),
) -> CalendarResponse:
    gateway.session.require_user()
    reference = parse_date(ref) if ref else date.today()
    cells = build_week_grid(reference, _calendar_events(gateway, include_cancelled))
    return CalendarResponse(reference=reference, label=format_week_range(reference), cells=cells)


# ── Dashboards ────────────────────────────────────────────────────────


@app.get("/dashboard", response_model=DashboardResponse)
def dashboard(gateway: EventStoreGateway = Depends(get_gateway)) -> DashboardResponse:
    gateway.session.require_user()
    return build_dashboard(gateway.list_events(), date.today(), settings.upcoming_limit)


@app.get("/admin/events", response_model=list[Event])
def admin_events(gateway: EventStoreGateway = Depends(get_gateway)) -> list[Event]:
    """Admin-only listing of every event, cancelled ones included."""
    decision = route_access(gateway.session.current_user, admin_only=True)
    if decision == RouteDecision.LOGIN:
        raise HTTPException(status_code=401, detail="You must be logged in")
    if decision == RouteDecision.USER_DASHBOARD:
        raise HTTPException(
            status_code=403,
            detail={"message": "Admin access required", "redirect": "/user/dashboard"},
        )
    return gateway.list_events()
