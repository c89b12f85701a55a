from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from src.application.dtos.auth_dto import (
    AuthResponse,
    AuthUserResponse,
    SessionStatusResponse,
    SignInBody,
    SignUpBody,
)
from src.application.dtos.common_dto import ErrorResponse, SuccessResponse
from src.application.services.auth_service import AuthService
from src.infrastructure.api.dependencies import get_auth_service, get_current_user, http_error

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Invalid or missing authentication token"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="""
    Register a new account with email and password.

    This endpoint:
    - Creates the identity with the auth provider
    - Stores full name and role as user metadata
    - Creates the profile row if the database has not already done so

    The session is null when the project requires email confirmation.
    """,
    response_description="The new user and, if issued, the session tokens",
    responses={400: {"model": ErrorResponse, "description": "Bad Request - Rejected by the auth provider"}},
)
def sign_up(body: SignUpBody, service: AuthService = Depends(get_auth_service)):
    """Register a new account."""
    result = service.sign_up(body.email, body.password, full_name=body.full_name, role=body.role)
    if not result.ok:
        raise http_error(result.error)
    return AuthResponse.from_outcome(result.data)


@router.post(
    "/signin",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign In",
    description="""
    Exchange email and password for a session.

    Send the returned `access_token` as a Bearer token on later requests.
    """,
    response_description="The user with profile and the session tokens",
    responses={400: {"model": ErrorResponse, "description": "Bad Request - Invalid login credentials"}},
)
def sign_in(body: SignInBody, service: AuthService = Depends(get_auth_service)):
    """Sign in with email and password."""
    result = service.sign_in(body.email, body.password)
    if not result.ok:
        raise http_error(result.error)
    return AuthResponse.from_outcome(result.data)


@router.post(
    "/signout",
    response_model=SuccessResponse,
    summary="Sign Out",
    description="Invalidate the session behind the Bearer token.",
)
def sign_out(user=Depends(get_current_user), service: AuthService = Depends(get_auth_service)):
    """Invalidate the current session."""
    result = service.sign_out()
    if not result.ok:
        raise http_error(result.error)
    return {"ok": True, "message": "Signed out successfully"}


@router.get(
    "/me",
    response_model=AuthUserResponse,
    summary="Get Current User",
    description="""
    Return the authenticated identity joined with its profile.

    `profile` is null when no profile row exists yet.

    **Authentication required**: Yes (Bearer token)
    """,
)
def get_me(user=Depends(get_current_user), service: AuthService = Depends(get_auth_service)):
    """Get the current user with profile."""
    current = service.get_current_user()
    if current is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return AuthUserResponse.from_entity(current)


@router.get(
    "/session",
    response_model=SessionStatusResponse,
    summary="Session Status",
    description="Report whether the request carries a live session. Never fails for anonymous callers.",
)
def get_session(service: AuthService = Depends(get_auth_service)):
    session = service.get_session()
    if session is None:
        return SessionStatusResponse(authenticated=False)
    return SessionStatusResponse(authenticated=True, user_id=session.user.id, expires_at=session.expires_at)
