"""Tests for the advisory conflict check composed with the write."""

from __future__ import annotations

from datetime import date

import pytest

from eventdesk.auth.provider import InMemoryAuthProvider
from eventdesk.auth.session import Session
from eventdesk.domain.bus import EventBus
from eventdesk.domain.errors import InvalidRange, PermissionDenied, UpstreamUnavailable
from eventdesk.domain.models import (
    CancelledDetails,
    EventDraft,
    EventPatch,
    EventStatus,
    PostponedDetails,
)
from eventdesk.gateway import EventStoreGateway
from eventdesk.repos.memory import EventRepository
from eventdesk.services.conflicts import check_conflicts
from eventdesk.services.submission import CONFLICT_WARNING, submit_event

_DAY = date(2024, 6, 10)


class _FlakyReadGateway(EventStoreGateway):
    """Gateway whose day query always fails."""

    def events_on(self, event_date, status=None):
        raise UpstreamUnavailable("connection reset")


@pytest.fixture()
def provider() -> InMemoryAuthProvider:
    p = InMemoryAuthProvider()
    p.sign_up("owner@example.com", "password1")
    p.sign_up("other@example.com", "password2")
    return p


def _gateway(provider, repo, email="owner@example.com", password="password1", cls=EventStoreGateway):
    session = Session(provider)
    session.sign_in(email, password)
    return cls(repo, session, EventBus())


def _draft(**overrides) -> EventDraft:
    defaults = dict(
        title="Review",
        event_date=_DAY,
        start_time="09:00",
        end_time="10:00",
        location="Room 2",
    )
    defaults.update(overrides)
    return EventDraft(**defaults)


# ---------------------------------------------------------------------------
# check_conflicts
# ---------------------------------------------------------------------------


def test_check_conflicts_reads_scheduled_events_of_the_day(provider):
    repo = EventRepository()
    gateway = _gateway(provider, repo)
    existing = gateway.create_event(_draft())
    gateway.create_event(_draft(title="Moved", details=PostponedDetails(reason="x")))
    gateway.create_event(_draft(title="Tomorrow", event_date=date(2024, 6, 11)))

    report = check_conflicts(gateway, "2024-06-10", "09:30", "10:30")

    assert report.has_conflicts is True
    assert [e.id for e in report.conflicts] == [existing.id]
    assert report.error is None


def test_check_conflicts_against_other_users_events(provider):
    repo = EventRepository()
    _gateway(provider, repo).create_event(_draft())
    other = _gateway(provider, repo, "other@example.com", "password2")

    assert check_conflicts(other, _DAY, "09:00", "09:15").has_conflicts is True


def test_check_conflicts_fails_open(provider):
    gateway = _gateway(provider, EventRepository(), cls=_FlakyReadGateway)

    report = check_conflicts(gateway, _DAY, "09:00", "10:00")

    assert report.has_conflicts is False
    assert report.error == "connection reset"


def test_check_conflicts_signed_out_is_empty(provider):
    repo = EventRepository()
    _gateway(provider, repo).create_event(_draft())
    anonymous = EventStoreGateway(repo, Session(provider), EventBus())

    report = check_conflicts(anonymous, _DAY, "09:00", "10:00")

    assert report.has_conflicts is False
    assert report.error is None


def test_check_conflicts_still_rejects_bad_range(provider):
    gateway = _gateway(provider, EventRepository(), cls=_FlakyReadGateway)
    with pytest.raises(InvalidRange):
        check_conflicts(gateway, _DAY, "10:00", "09:00")


# ---------------------------------------------------------------------------
# submit_event
# ---------------------------------------------------------------------------


def test_conflicts_do_not_block_create(provider):
    repo = EventRepository()
    gateway = _gateway(provider, repo)
    first = submit_event(gateway, _draft())

    second = submit_event(gateway, _draft(title="Overlap", start_time="09:30", end_time="10:30"))

    assert first.ok and first.warning is None
    assert second.ok
    assert second.conflict_report.conflicts == [first.event]
    assert second.warning == CONFLICT_WARNING
    assert len(repo.list_all()) == 2


def test_failed_check_still_writes(provider):
    repo = EventRepository()
    gateway = _gateway(provider, repo, cls=_FlakyReadGateway)

    result = submit_event(gateway, _draft())

    assert result.ok
    assert result.conflict_report.error == "connection reset"
    assert repo.get(result.event.id) is not None


def test_editing_without_moving_does_not_conflict_with_itself(provider):
    gateway = _gateway(provider, EventRepository())
    created = submit_event(gateway, _draft()).event

    result = submit_event(gateway, EventPatch(title="Review (room change)"), event_id=created.id)

    assert result.ok
    assert result.conflict_report.has_conflicts is False
    assert result.event.title == "Review (room change)"


def test_postponed_and_cancelled_skip_the_check(provider):
    gateway = _gateway(provider, EventRepository())
    submit_event(gateway, _draft())

    postponed = submit_event(gateway, _draft(details=PostponedDetails(reason="x")))
    cancelled = submit_event(gateway, _draft(details=CancelledDetails()))

    assert postponed.ok and not postponed.conflict_report.has_conflicts
    assert cancelled.ok and cancelled.event.status == EventStatus.CANCELLED


def test_write_failure_is_returned(provider):
    repo = EventRepository()
    created = submit_event(_gateway(provider, repo), _draft()).event
    other = _gateway(provider, repo, "other@example.com", "password2")

    result = submit_event(other, EventPatch(title="Mine now"), event_id=created.id)

    assert not result.ok
    assert isinstance(result.failure, PermissionDenied)
    assert result.error == "You can only modify events you created"
    assert repo.get(created.id).title == "Review"


def test_patch_with_bad_merged_range_fails_closed(provider):
    gateway = _gateway(provider, EventRepository())
    created = submit_event(gateway, _draft()).event

    result = submit_event(gateway, EventPatch(end_time="08:00"), event_id=created.id)

    assert isinstance(result.failure, InvalidRange)


def test_payload_kind_must_match_operation(provider):
    gateway = _gateway(provider, EventRepository())
    with pytest.raises(TypeError):
        submit_event(gateway, EventPatch(title="x"))
