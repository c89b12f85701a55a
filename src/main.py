from __future__ import annotations

from fastapi import FastAPI

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.middlewares import add_default_middlewares
from src.infrastructure.api.routes.auth_routes import router as auth_router
from src.infrastructure.api.routes.profile_routes import router as profile_router
from src.infrastructure.database.postgres_client import local_db_enabled
from src.infrastructure.database.supabase_client import supabase_enabled
from src.infrastructure.logging_config import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title="CivicConnect Backend",
        version="0.1.0",
        description="""
        ## CivicConnect Backend API

        Account and profile API for CivicConnect, backed by Supabase Auth and a
        `user_profiles` table.

        ### Features
        - **Authentication**: Sign up, sign in and sign out with email and password
        - **Profiles**: Read and update the profile joined to each account
        - **Roles**: Citizens and officials, checked from the profile row

        ### Authentication
        Endpoints that act on the current user require the access token returned
        by sign-in in the Authorization header:
        ```
        Authorization: Bearer your-jwt-token
        ```

        ### Error Responses
        - **400 Bad Request**: Rejected by the auth provider or the profile store
        - **401 Unauthorized**: Missing or invalid authentication token
        - **404 Not Found**: No profile row for the requested user
        - **422 Unprocessable Entity**: Validation error in request body
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the CivicConnect API",
    )
    def root():
        """Get API root information."""
        if supabase_enabled():
            mode = "supabase"
        elif local_db_enabled():
            mode = "local-postgres"
        else:
            mode = "in-memory"
        return {"status": "ok", "service": "civicconnect-backend", "version": app.version, "auth_mode": mode}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(auth_router)
    app.include_router(profile_router)
    return app


app = create_app()
