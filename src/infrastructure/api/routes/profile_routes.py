from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from src.application.dtos.common_dto import ErrorResponse
from src.application.dtos.profile_dto import (
    CreateProfileBody,
    ProfileResponse,
    RoleCheckResponse,
    UpdateProfileBody,
)
from src.application.services.profile_service import ProfileService
from src.domain.entities.profile import UserRole
from src.infrastructure.api.dependencies import get_current_user, get_profile_service, http_error

router = APIRouter(
    prefix="/profiles",
    tags=["Profiles"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Invalid or missing authentication token"},
        404: {"model": ErrorResponse, "description": "Not Found - No profile row for this user"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get My Profile",
    description="Return the profile row of the authenticated user.",
)
def get_my_profile(user=Depends(get_current_user), service: ProfileService = Depends(get_profile_service)):
    profile = service.get_current_user_profile()
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.from_entity(profile)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update My Profile",
    description="""
    Update editable fields of the authenticated user's profile.

    Only `full_name`, `avatar_url`, `bio` and `location` can be changed;
    omitted fields keep their value. `updated_at` is stamped on every call.
    """,
)
def update_my_profile(body: UpdateProfileBody, service: ProfileService = Depends(get_profile_service)):
    result = service.update_profile(body.model_dump(exclude_unset=True))
    if not result.ok:
        raise http_error(result.error)
    return ProfileResponse.from_entity(result.data)


@router.post(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create My Profile",
    description="Create the profile row for the authenticated user when it does not exist yet.",
    responses={400: {"model": ErrorResponse, "description": "Bad Request - Row already exists or was rejected by the store"}},
)
def create_my_profile(body: CreateProfileBody, service: ProfileService = Depends(get_profile_service)):
    result = service.create_profile(body.model_dump(exclude_none=True))
    if not result.ok:
        raise http_error(result.error)
    return ProfileResponse.from_entity(result.data)


@router.get(
    "/me/roles/{role}",
    response_model=RoleCheckResponse,
    summary="Check My Role",
    description="True when the authenticated user's profile carries the given role, false otherwise.",
)
def check_my_role(
    role: UserRole,
    user=Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    return RoleCheckResponse(role=role, has_role=service.has_role(role))


@router.get(
    "/{user_id}",
    response_model=ProfileResponse,
    summary="Get Profile",
    description="Look up any user's profile by id.",
)
def get_profile(
    user_id: str,
    user=Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    profile = service.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.from_entity(profile)
