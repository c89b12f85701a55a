"""Session context over Supabase Auth.

The adapter is the single place that talks to the hosted auth provider. Both
facades receive it explicitly, so tests can hand them an in-memory instance
instead of a network client.

When Supabase is disabled (``SUPABASE_DISABLED=1`` or no client), a
module-level user/token store stands in for the provider so the API can be
exercised locally.
"""
from __future__ import annotations

import hashlib
import itertools
import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable

from supabase import Client

from src.domain.entities.identity import IdentityEntity, SessionEntity

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

MIN_PASSWORD_LENGTH = 6
SESSION_TTL_SECONDS = 3600

AuthListener = Callable[[str, SessionEntity | None], None]

# module-level in-memory stores for disabled mode
_MEM_USERS: dict[str, dict[str, Any]] = {}  # email -> {"identity", "password_hash"}
_MEM_SESSIONS: dict[str, SessionEntity] = {}  # access token -> session
_LISTENER_IDS = itertools.count(1)


class AuthProviderError(Exception):
    """Error reported by the auth provider, message kept verbatim."""

    def __init__(self, message: str, status: int = 400, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


@dataclass
class AuthSubscription:
    id: str
    unsubscribe: Callable[[], None]


def _hash_password(email: str, password: str) -> str:
    return hashlib.sha256(f"{email}:{password}".encode()).hexdigest()


def _as_provider_error(exc: Exception) -> AuthProviderError:
    message = getattr(exc, "message", None) or str(exc)
    status = getattr(exc, "status", None) or 400
    return AuthProviderError(message, status=status, code=getattr(exc, "code", None))


class SupabaseAuthAdapter:
    def __init__(self, client: Client | None, access_token: str | None = None) -> None:
        self._client = client
        self.disabled = client is None
        self.access_token = access_token
        self._listeners: dict[str, AuthListener] = {}
        if self._client is not None and access_token:
            # row-level security on the profile table keys off this JWT
            self._client.postgrest.auth(access_token)

    @property
    def client(self) -> Client | None:
        return self._client

    # -- conversions ---------------------------------------------------

    @staticmethod
    def _to_identity(user: Any) -> IdentityEntity:
        created_at = getattr(user, "created_at", None)
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return IdentityEntity(
            id=str(user.id),
            email=user.email,
            email_confirmed=getattr(user, "email_confirmed_at", None) is not None,
            user_metadata=dict(getattr(user, "user_metadata", None) or {}),
            created_at=created_at,
        )

    def _to_session(self, session: Any) -> SessionEntity | None:
        if session is None or getattr(session, "user", None) is None:
            return None
        return SessionEntity(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
            user=self._to_identity(session.user),
        )

    # -- in-memory provider ----------------------------------------------

    def _issue_session(self, identity: IdentityEntity) -> SessionEntity:
        session = SessionEntity(
            access_token=secrets.token_urlsafe(32),
            refresh_token=secrets.token_urlsafe(32),
            expires_at=int(time.time()) + SESSION_TTL_SECONDS,
            user=identity,
        )
        _MEM_SESSIONS[session.access_token] = session
        self.access_token = session.access_token
        return session

    @staticmethod
    def _live_session(token: str) -> SessionEntity | None:
        """Look up an in-memory session, dropping it once expired."""
        session = _MEM_SESSIONS.get(token)
        if session is not None and (session.expires_at or 0) < time.time():
            _MEM_SESSIONS.pop(token, None)
            return None
        return session

    def _emit(self, event: str, session: SessionEntity | None) -> None:
        for listener_id, listener in list(self._listeners.items()):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth listener %s failed on %s", listener_id, event)

    # -- provider operations ---------------------------------------------

    def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> tuple[IdentityEntity, SessionEntity | None]:
        """Register a new identity.

        Returns the identity and, when the provider signs the user in right
        away, the new session. With email confirmation enabled on the
        project the session is ``None``.
        """
        if self.disabled:
            email = (email or "").strip().lower()
            if "@" not in email:
                raise AuthProviderError("Unable to validate email address: invalid format", code="validation_failed")
            if len(password or "") < MIN_PASSWORD_LENGTH:
                raise AuthProviderError(
                    f"Password should be at least {MIN_PASSWORD_LENGTH} characters.", code="weak_password"
                )
            if email in _MEM_USERS:
                raise AuthProviderError("User already registered", status=422, code="user_already_exists")
            identity = IdentityEntity(
                id=str(uuid.uuid4()),
                email=email,
                email_confirmed=True,
                user_metadata=dict(metadata or {}),
                created_at=datetime.now(UTC),
            )
            _MEM_USERS[email] = {"identity": identity, "password_hash": _hash_password(email, password)}
            session = self._issue_session(identity)
            self._emit(SIGNED_IN, session)
            return identity, session

        try:  # pragma: no cover - network
            res = self._client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata or {}}}
            )
        except Exception as exc:
            raise _as_provider_error(exc) from exc
        if res.user is None:
            raise AuthProviderError("Sign up did not return a user")
        session = self._to_session(res.session)
        if session is not None:
            self.access_token = session.access_token
        return self._to_identity(res.user), session

    def sign_in(self, email: str, password: str) -> SessionEntity:
        if self.disabled:
            email = (email or "").strip().lower()
            record = _MEM_USERS.get(email)
            if record is None or record["password_hash"] != _hash_password(email, password or ""):
                raise AuthProviderError("Invalid login credentials", code="invalid_credentials")
            session = self._issue_session(record["identity"])
            self._emit(SIGNED_IN, session)
            return session

        try:  # pragma: no cover - network
            res = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise _as_provider_error(exc) from exc
        session = self._to_session(res.session)
        if session is None:
            raise AuthProviderError("Sign in did not return a session")
        self.access_token = session.access_token
        return session

    def sign_out(self) -> None:
        if self.disabled:
            if self.access_token:
                _MEM_SESSIONS.pop(self.access_token, None)
            self.access_token = None
            self._emit(SIGNED_OUT, None)
            return

        try:  # pragma: no cover - network
            if self._client.auth.get_session() is not None:
                self._client.auth.sign_out()
            elif self.access_token:
                # bearer-only request: revoke the caller's token directly
                self._client.auth.admin.sign_out(self.access_token)
        except Exception as exc:
            raise _as_provider_error(exc) from exc
        self.access_token = None

    def get_session(self) -> SessionEntity | None:
        if self.disabled:
            if not self.access_token:
                return None
            return self._live_session(self.access_token)

        try:  # pragma: no cover - network
            session = self._to_session(self._client.auth.get_session())
        except Exception as exc:
            raise _as_provider_error(exc) from exc
        if session is not None:
            return session
        if self.access_token:
            user = self.get_user()
            return SessionEntity(access_token=self.access_token, user=user) if user else None
        return None

    def get_user(self) -> IdentityEntity | None:
        if self.disabled:
            session = self.get_session()
            return session.user if session else None

        try:  # pragma: no cover - network
            res = self._client.auth.get_user(self.access_token) if self.access_token else self._client.auth.get_user()
        except Exception as exc:
            raise _as_provider_error(exc) from exc
        if res is None or res.user is None:
            return None
        return self._to_identity(res.user)

    def validate_token(self, token: str) -> IdentityEntity:
        if not token:
            raise ValueError("Missing access token")
        if self.disabled:
            session = self._live_session(token)
            if session is None:
                raise ValueError("Invalid access token")
            return session.user
        try:  # pragma: no cover - network
            res = self._client.auth.get_user(token)
        except Exception as exc:
            raise ValueError(f"Invalid access token: {exc}") from exc
        if res is None or res.user is None:
            raise ValueError("Invalid access token")
        return self._to_identity(res.user)

    def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        if self.disabled:
            listener_id = f"listener-{next(_LISTENER_IDS)}"
            self._listeners[listener_id] = listener
            return AuthSubscription(id=listener_id, unsubscribe=lambda: self._listeners.pop(listener_id, None))

        def _forward(event: Any, session: Any) -> None:
            name = str(getattr(event, "value", event))
            try:
                listener(name, self._to_session(session))
            except Exception:
                # gotrue calls listeners from inside sign-in and sign-out
                logger.exception("Auth listener failed on %s", name)

        sub = self._client.auth.on_auth_state_change(_forward)
        return AuthSubscription(id=str(sub.id), unsubscribe=sub.unsubscribe)
