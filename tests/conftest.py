import os
import sys
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("USE_LOCAL_DB", "0")


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def email() -> str:
    # the in-memory provider is shared across tests, so every test gets its own account
    return f"user-{uuid.uuid4().hex[:12]}@example.com"


@pytest.fixture()
def auth_adapter():
    from src.infrastructure.auth.supabase_auth import SupabaseAuthAdapter

    return SupabaseAuthAdapter(None)


@pytest.fixture()
def profile_service(auth_adapter):
    from src.application.services.profile_service import ProfileService
    from src.infrastructure.database.repositories.profile_repository import ProfileRepository

    return ProfileService(auth=auth_adapter, profiles=ProfileRepository(None))


@pytest.fixture()
def auth_service(auth_adapter, profile_service):
    from src.application.services.auth_service import AuthService

    return AuthService(auth=auth_adapter, profiles=profile_service)
