from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.domain.entities.profile import ProfileEntity


@dataclass(frozen=True)
class IdentityEntity:
    id: str  # issued by the auth provider
    email: str | None
    email_confirmed: bool = False
    user_metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass(frozen=True)
class SessionEntity:
    access_token: str
    user: IdentityEntity
    refresh_token: str | None = None
    expires_at: int | None = None  # unix seconds


@dataclass(frozen=True)
class AuthUser:
    """An identity joined with its profile row, rebuilt on every read."""

    identity: IdentityEntity
    profile: ProfileEntity | None = None

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def email(self) -> str | None:
        return self.identity.email


@dataclass(frozen=True)
class AuthOutcome:
    """What a successful sign-up or sign-in hands back to the caller."""

    user: AuthUser
    session: SessionEntity | None = None
