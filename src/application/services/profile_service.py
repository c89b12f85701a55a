from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.domain.entities.identity import IdentityEntity
from src.domain.entities.profile import (
    CREATABLE_FIELDS,
    UPDATABLE_FIELDS,
    ProfileEntity,
    UserRole,
    pick_fields,
)
from src.domain.entities.result import (
    INVALID_INPUT,
    NOT_FOUND,
    STORE_ERROR,
    UNAUTHENTICATED,
    ServiceResult,
)
from src.infrastructure.auth.supabase_auth import AuthProviderError, SupabaseAuthAdapter
from src.infrastructure.database.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)


def parse_role(value: UserRole | str | None) -> UserRole:
    """Coerce a role name, defaulting to citizen. Raises ValueError if unknown."""
    if value is None or value == "":
        return UserRole.CITIZEN
    try:
        return UserRole(value)
    except ValueError:
        allowed = ", ".join(r.value for r in UserRole)
        raise ValueError(f"Unknown role '{value}', expected one of: {allowed}") from None


@dataclass
class ProfileService:
    """
    Reads and writes the profile row belonging to an auth identity.

    Reads degrade to ``None``/``False`` on any failure and log it; writes
    return a ``ServiceResult`` so the caller can show why nothing changed.
    """

    auth: SupabaseAuthAdapter
    profiles: ProfileRepository

    def _current_identity(self) -> IdentityEntity | None:
        try:
            return self.auth.get_user()
        except AuthProviderError as exc:
            logger.error("Error resolving current user: %s", exc.message)
            return None

    def get_current_user_profile(self) -> ProfileEntity | None:
        identity = self._current_identity()
        if identity is None:
            logger.debug("No authenticated user, no profile to fetch")
            return None
        return self.get_profile(identity.id)

    def get_profile(self, user_id: str) -> ProfileEntity | None:
        try:
            profile = self.profiles.get(user_id)
        except RuntimeError as exc:
            logger.error("Error fetching profile %s: %s", user_id, exc)
            return None
        if profile is None:
            logger.warning("No profile row for user %s", user_id)
        return profile

    def update_profile(self, updates: dict[str, Any]) -> ServiceResult[ProfileEntity]:
        """Change the current user's editable fields and stamp ``updated_at``."""
        identity = self._current_identity()
        if identity is None:
            return ServiceResult.failure("No authenticated user", code=UNAUTHENTICATED, status=401)

        rejected = sorted(k for k in updates if k not in UPDATABLE_FIELDS)
        if rejected:
            return ServiceResult.failure(
                f"Fields cannot be updated: {', '.join(rejected)}", code=INVALID_INPUT
            )

        # keys the caller sent are written as given, None clears the column
        fields = dict(updates)
        fields["updated_at"] = datetime.now(UTC)
        try:
            profile = self.profiles.update(identity.id, fields)
        except RuntimeError as exc:
            logger.error("Error updating profile %s: %s", identity.id, exc)
            return ServiceResult.failure(str(exc), code=STORE_ERROR)
        if profile is None:
            return ServiceResult.failure("Profile not found", code=NOT_FOUND, status=404)
        logger.info("Profile %s updated: %s", identity.id, ", ".join(sorted(fields)))
        return ServiceResult.success(profile)

    def create_profile(self, fields: dict[str, Any]) -> ServiceResult[ProfileEntity]:
        """Insert the current user's row keyed by their id and email."""
        identity = self._current_identity()
        if identity is None:
            return ServiceResult.failure("No authenticated user", code=UNAUTHENTICATED, status=401)

        values = pick_fields(fields, CREATABLE_FIELDS)
        try:
            values["role"] = parse_role(values.get("role"))
        except ValueError as exc:
            return ServiceResult.failure(str(exc), code=INVALID_INPUT)

        try:
            profile = self.profiles.create(identity.id, identity.email or "", values)
        except RuntimeError as exc:
            logger.error("Error creating profile %s: %s", identity.id, exc)
            return ServiceResult.failure(str(exc), code=STORE_ERROR)
        logger.info("Profile created for %s as %s", identity.id, profile.role.value)
        return ServiceResult.success(profile)

    def provision_profile(
        self, identity: IdentityEntity, full_name: str | None = None, role: UserRole = UserRole.CITIZEN
    ) -> ProfileEntity | None:
        """Make sure a freshly registered identity has its profile row.

        Projects that create the row with a database trigger already have it,
        in which case the existing row is returned untouched.
        """
        existing = self.get_profile(identity.id)
        if existing is not None:
            return existing
        values: dict[str, Any] = {"role": role}
        if full_name:
            values["full_name"] = full_name
        try:
            return self.profiles.create(identity.id, identity.email or "", values)
        except RuntimeError as exc:
            logger.error("Error provisioning profile for %s: %s", identity.id, exc)
            return None

    def has_role(self, role: UserRole | str) -> bool:
        try:
            wanted = UserRole(role)
        except ValueError as exc:
            logger.error("Error checking user role: %s", exc)
            return False
        profile = self.get_current_user_profile()
        return profile is not None and profile.role == wanted

    def is_official(self) -> bool:
        return self.has_role(UserRole.OFFICIAL)

    def is_citizen(self) -> bool:
        return self.has_role(UserRole.CITIZEN)
