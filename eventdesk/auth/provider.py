"""In-memory authentication provider: accounts, password hashing and access tokens."""

from __future__ import annotations

import hashlib
import hmac
import secrets
import uuid
from dataclasses import dataclass, field
from typing import Any

import structlog

from eventdesk.domain.errors import AuthenticationFailed
from eventdesk.domain.models import UserIdentity

logger = structlog.get_logger(__name__)

_PBKDF2_ROUNDS = 120_000


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)


@dataclass
class _Account:
    user_id: str
    email: str
    salt: bytes
    password_hash: bytes
    metadata: dict[str, Any] = field(default_factory=dict)


class InMemoryAuthProvider:
    """Stores accounts in a dict and hands out opaque bearer tokens.

    ``metadata["role"]`` mirrors the user-metadata role of a hosted auth
    service; a user is an admin when it equals *admin_role*.
    """

    def __init__(self, admin_role: str = "admin") -> None:
        self.admin_role = admin_role
        self._accounts: dict[str, _Account] = {}
        self._tokens: dict[str, str] = {}

    def _identity(self, account: _Account) -> UserIdentity:
        role = account.metadata.get("role")
        return UserIdentity(
            id=account.user_id,
            email=account.email,
            full_name=account.metadata.get("full_name"),
            role=role,
            is_admin=role == self.admin_role,
        )

    def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> UserIdentity:
        key = email.strip().lower()
        if key in self._accounts:
            raise AuthenticationFailed("User already registered")
        salt = secrets.token_bytes(16)
        account = _Account(
            user_id=str(uuid.uuid4()),
            email=key,
            salt=salt,
            password_hash=_hash_password(password, salt),
            metadata=dict(metadata or {}),
        )
        self._accounts[key] = account
        logger.info("user_signed_up", user_id=account.user_id[:8])
        return self._identity(account)

    def sign_in(self, email: str, password: str) -> tuple[str, UserIdentity]:
        account = self._accounts.get(email.strip().lower())
        if account is None or not hmac.compare_digest(
            account.password_hash, _hash_password(password, account.salt)
        ):
            raise AuthenticationFailed("Invalid login credentials")
        token = secrets.token_urlsafe(32)
        self._tokens[token] = account.email
        logger.info("user_signed_in", user_id=account.user_id[:8])
        return token, self._identity(account)

    def sign_out(self, token: str) -> None:
        self._tokens.pop(token, None)

    def user_for_token(self, token: str | None) -> UserIdentity | None:
        if not token:
            return None
        email = self._tokens.get(token)
        if email is None:
            return None
        return self._identity(self._accounts[email])
