from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.application.services.auth_service import AuthService
from src.application.services.profile_service import ProfileService
from src.domain.entities.identity import IdentityEntity
from src.domain.entities.result import ServiceError
from src.infrastructure.auth.supabase_auth import SupabaseAuthAdapter
from src.infrastructure.database.repositories.profile_repository import ProfileRepository
from src.infrastructure.database.supabase_client import new_supabase_client

_bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)] = None,
) -> str | None:
    if not credentials or not credentials.scheme or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials or None


def get_auth_adapter(token: Annotated[str | None, Depends(get_bearer_token)] = None) -> SupabaseAuthAdapter:
    # one client per request so sessions never cross between callers
    return SupabaseAuthAdapter(new_supabase_client(), access_token=token)


def get_profile_repo(auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)]) -> ProfileRepository:
    return ProfileRepository(auth.client)


def get_profile_service(
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)],
    profiles: Annotated[ProfileRepository, Depends(get_profile_repo)],
) -> ProfileService:
    return ProfileService(auth=auth, profiles=profiles)


def get_auth_service(
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)],
    profiles: Annotated[ProfileService, Depends(get_profile_service)],
) -> AuthService:
    return AuthService(auth=auth, profiles=profiles)


def get_current_user(
    token: Annotated[str | None, Depends(get_bearer_token)] = None,
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)] = None,
) -> IdentityEntity:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return auth.validate_token(token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))


def http_error(error: ServiceError) -> HTTPException:
    """Translate a facade error into the HTTP error the UI reports verbatim."""
    return HTTPException(status_code=error.status, detail=error.message)
