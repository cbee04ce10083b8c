"""Explicit session object passed to whatever needs the current user."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Callable

from eventdesk.auth.provider import InMemoryAuthProvider
from eventdesk.domain.bus import EventBus
from eventdesk.domain.errors import NotAuthenticated
from eventdesk.domain.events import AuthChange, AuthStateChanged
from eventdesk.domain.models import UserIdentity


class Session:
    """Tracks one client's sign-in state on top of an auth provider.

    Every change is published as :class:`AuthStateChanged` on the session's
    bus; :meth:`subscribe` registers a callback for those changes.
    """

    def __init__(
        self,
        provider: InMemoryAuthProvider,
        bus: EventBus | None = None,
        token: str | None = None,
    ) -> None:
        self.provider = provider
        self.bus = bus or EventBus()
        self.token = token

    @property
    def current_user(self) -> UserIdentity | None:
        return self.provider.user_for_token(self.token)

    @property
    def is_admin(self) -> bool:
        user = self.current_user
        return user is not None and user.is_admin

    def require_user(self) -> UserIdentity:
        user = self.current_user
        if user is None:
            raise NotAuthenticated("You must be logged in")
        return user

    def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> UserIdentity:
        user = self.provider.sign_up(email, password, metadata)
        self.bus.publish(AuthStateChanged(change=AuthChange.SIGNED_UP, user=user))
        return user

    def sign_in(self, email: str, password: str) -> UserIdentity:
        token, user = self.provider.sign_in(email, password)
        self.token = token
        self.bus.publish(AuthStateChanged(change=AuthChange.SIGNED_IN, user=user))
        return user

    def sign_out(self) -> None:
        if self.token is not None:
            self.provider.sign_out(self.token)
        self.token = None
        self.bus.publish(AuthStateChanged(change=AuthChange.SIGNED_OUT))

    def subscribe(self, callback: Callable[[AuthStateChanged], None]) -> Callable[[], None]:
        return self.bus.subscribe(AuthStateChanged, callback)


class RouteDecision(StrEnum):
    ALLOW = "allow"
    LOGIN = "login"
    USER_DASHBOARD = "user_dashboard"


def route_access(user: UserIdentity | None, admin_only: bool = False) -> RouteDecision:
    """Decide where a request for a protected page should go.

    Anonymous users are sent to the login page; signed-in non-admins asking
    for an admin page are sent to their own dashboard.
    """
    if user is None:
        return RouteDecision.LOGIN
    if admin_only and not user.is_admin:
        return RouteDecision.USER_DASHBOARD
    return RouteDecision.ALLOW
