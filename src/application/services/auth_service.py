from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from src.application.services.profile_service import ProfileService, parse_role
from src.domain.entities.identity import AuthOutcome, AuthUser, SessionEntity
from src.domain.entities.profile import UserRole
from src.domain.entities.result import INVALID_INPUT, ServiceResult
from src.infrastructure.auth.supabase_auth import (
    AuthProviderError,
    AuthSubscription,
    SupabaseAuthAdapter,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """
    Sign-up, sign-in and session lookups against the auth provider.

    Every identity handed back is joined with its profile row. Provider
    errors come back inside the ``ServiceResult`` with the provider's own
    message; nothing is raised to the caller.
    """

    auth: SupabaseAuthAdapter
    profiles: ProfileService

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: str | None = None,
        role: UserRole | str | None = None,
    ) -> ServiceResult[AuthOutcome]:
        try:
            user_role = parse_role(role)
        except ValueError as exc:
            return ServiceResult.failure(str(exc), code=INVALID_INPUT)

        metadata = {"full_name": full_name or "", "role": user_role.value}
        try:
            identity, session = self.auth.sign_up(email, password, metadata)
        except AuthProviderError as exc:
            logger.error("Sign up error: %s", exc.message)
            return ServiceResult.failure(exc.message, status=exc.status)

        profile = self.profiles.provision_profile(identity, full_name, user_role)
        logger.info("Signed up %s (%s)", identity.id, user_role.value)
        return ServiceResult.success(AuthOutcome(user=AuthUser(identity, profile), session=session))

    def sign_in(self, email: str, password: str) -> ServiceResult[AuthOutcome]:
        try:
            session = self.auth.sign_in(email, password)
        except AuthProviderError as exc:
            logger.error("Sign in error: %s", exc.message)
            return ServiceResult.failure(exc.message, status=exc.status)

        profile = self.profiles.get_profile(session.user.id)
        return ServiceResult.success(AuthOutcome(user=AuthUser(session.user, profile), session=session))

    def sign_out(self) -> ServiceResult[None]:
        try:
            self.auth.sign_out()
        except AuthProviderError as exc:
            logger.error("Sign out error: %s", exc.message)
            return ServiceResult.failure(exc.message, status=exc.status)
        return ServiceResult.success()

    def get_current_user(self) -> AuthUser | None:
        """The signed-in identity with its profile, or None when nobody is."""
        try:
            identity = self.auth.get_user()
        except AuthProviderError as exc:
            logger.error("Error getting current user: %s", exc.message)
            return None
        if identity is None:
            return None
        return AuthUser(identity, self.profiles.get_profile(identity.id))

    def get_session(self) -> SessionEntity | None:
        try:
            return self.auth.get_session()
        except AuthProviderError as exc:
            logger.error("Error getting session: %s", exc.message)
            return None

    def on_auth_state_change(self, callback: Callable[[AuthUser | None], None]) -> AuthSubscription:
        """Call ``callback`` with the composed user on every session change.

        The profile is fetched again for each event; signed-out events deliver
        ``None``.
        """

        def _handle(event: str, session: SessionEntity | None) -> None:
            logger.debug("Auth state change: %s", event)
            if session is None:
                callback(None)
                return
            callback(AuthUser(session.user, self.profiles.get_profile(session.user.id)))

        return self.auth.on_auth_state_change(_handle)

    def is_authenticated(self) -> bool:
        return self.get_session() is not None

    def get_access_token(self) -> str | None:
        session = self.get_session()
        return session.access_token if session else None
