from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class UserRole(str, Enum):
    CITIZEN = "citizen"
    OFFICIAL = "official"


@dataclass(frozen=True)
class ProfileEntity:
    id: str  # user id from Supabase auth
    email: str
    role: UserRole = UserRole.CITIZEN
    is_verified: bool = False
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Columns a user may set when their row is first inserted
CREATABLE_FIELDS = ("full_name", "role", "bio", "location", "avatar_url")
# Columns a user may change afterwards; role and is_verified are managed elsewhere
UPDATABLE_FIELDS = ("full_name", "avatar_url", "bio", "location")


def pick_fields(values: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    """Keep only the allowed columns that were actually supplied."""
    return {k: v for k, v in values.items() if k in allowed and v is not None}
