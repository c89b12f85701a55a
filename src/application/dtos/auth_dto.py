from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.application.dtos.profile_dto import ProfileResponse
from src.domain.entities.identity import AuthOutcome, AuthUser, SessionEntity
from src.domain.entities.profile import UserRole


class SignUpBody(BaseModel):
    """Request model for registering a new account."""
    email: str = Field(..., min_length=3, max_length=320, description="Email address", example="user@example.com")
    password: str = Field(..., min_length=1, description="Account password")
    full_name: str | None = Field(None, max_length=100, description="Full name", example="Ada Lovelace")
    role: UserRole | None = Field(None, description="Requested role, citizen when omitted")


class SignInBody(BaseModel):
    """Request model for password sign-in."""
    email: str = Field(..., description="Email address", example="user@example.com")
    password: str = Field(..., description="Account password")


class AuthUserResponse(BaseModel):
    """The authenticated identity together with its profile (may be null)."""
    id: str = Field(..., description="Unique identifier of the user")
    email: str | None = Field(None, description="Email address of the user", example="user@example.com")
    email_confirmed: bool = Field(..., description="Whether the email address has been confirmed")
    created_at: datetime | None = Field(None, description="ISO timestamp when the account was created")
    profile: ProfileResponse | None = Field(None, description="Profile row, null if none exists")

    @classmethod
    def from_entity(cls, user: AuthUser) -> AuthUserResponse:
        return cls(
            id=user.identity.id,
            email=user.identity.email,
            email_confirmed=user.identity.email_confirmed,
            created_at=user.identity.created_at,
            profile=ProfileResponse.from_entity(user.profile) if user.profile else None,
        )


class SessionResponse(BaseModel):
    """Tokens to send back as ``Authorization: Bearer <access_token>``."""
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str | None = Field(None, description="Refresh token")
    expires_at: int | None = Field(None, description="Unix time when the access token expires")

    @classmethod
    def from_entity(cls, session: SessionEntity) -> SessionResponse:
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
        )


class AuthResponse(BaseModel):
    """Response model for sign-up and sign-in."""
    user: AuthUserResponse
    session: SessionResponse | None = Field(
        None, description="Null when the project requires email confirmation before sign-in"
    )

    @classmethod
    def from_outcome(cls, outcome: AuthOutcome) -> AuthResponse:
        return cls(
            user=AuthUserResponse.from_entity(outcome.user),
            session=SessionResponse.from_entity(outcome.session) if outcome.session else None,
        )


class SessionStatusResponse(BaseModel):
    authenticated: bool = Field(..., description="Whether the request carries a live session")
    user_id: str | None = Field(None, description="Id of the session owner")
    expires_at: int | None = Field(None, description="Unix time when the access token expires")
