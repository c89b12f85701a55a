from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities.profile import ProfileEntity, UserRole


class ProfileResponse(BaseModel):
    """Profile row of a user."""
    id: str = Field(..., description="User id, same as the auth identity id")
    email: str = Field(..., description="Email address of the user", example="user@example.com")
    full_name: str | None = Field(None, description="Full name of the user", example="Ada Lovelace")
    avatar_url: str | None = Field(None, description="Public URL of the avatar image")
    role: UserRole = Field(..., description="Role of the user", example="citizen")
    is_verified: bool = Field(..., description="Whether the account was verified by an administrator")
    bio: str | None = Field(None, description="Short biography")
    location: str | None = Field(None, description="Free-form location", example="Springfield")
    created_at: datetime | None = Field(None, description="ISO timestamp when the profile was created")
    updated_at: datetime | None = Field(None, description="ISO timestamp of the last profile change")

    @classmethod
    def from_entity(cls, profile: ProfileEntity) -> ProfileResponse:
        return cls(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
            role=profile.role,
            is_verified=profile.is_verified,
            bio=profile.bio,
            location=profile.location,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class UpdateProfileBody(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""
    full_name: str | None = Field(None, max_length=100, description="Full name", example="Ada Lovelace")
    avatar_url: str | None = Field(None, max_length=2048, description="Public URL of the avatar image")
    bio: str | None = Field(None, max_length=1000, description="Short biography")
    location: str | None = Field(None, max_length=200, description="Free-form location")


class CreateProfileBody(BaseModel):
    """Fields accepted when the profile row is created explicitly."""
    full_name: str | None = Field(None, max_length=100, description="Full name")
    role: UserRole = Field(UserRole.CITIZEN, description="Role of the user", example="official")
    bio: str | None = Field(None, max_length=1000, description="Short biography")
    location: str | None = Field(None, max_length=200, description="Free-form location")


class RoleCheckResponse(BaseModel):
    role: UserRole = Field(..., description="Role that was checked")
    has_role: bool = Field(..., description="True if the current profile carries this role")
