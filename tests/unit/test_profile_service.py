from __future__ import annotations

from unittest.mock import Mock

from src.application.services.profile_service import ProfileService, parse_role
from src.domain.entities.identity import IdentityEntity
from src.domain.entities.profile import UserRole
from src.domain.entities.result import INVALID_INPUT, NOT_FOUND, STORE_ERROR, UNAUTHENTICATED

PASSWORD = "correct-horse"


def _signed_in_without_profile(auth_adapter, email):
    identity, _ = auth_adapter.sign_up(email, PASSWORD)
    return identity


def _signed_in_with_profile(auth_adapter, profile_service, email, **fields):
    identity = _signed_in_without_profile(auth_adapter, email)
    result = profile_service.create_profile(fields)
    assert result.ok, result.error
    return identity


class TestReads:
    def test_no_session_returns_none(self, profile_service):
        assert profile_service.get_current_user_profile() is None

    def test_current_profile(self, auth_adapter, profile_service, email):
        identity = _signed_in_with_profile(auth_adapter, profile_service, email, full_name="Ada")

        profile = profile_service.get_current_user_profile()

        assert profile.id == identity.id
        assert profile.email == email
        assert profile.full_name == "Ada"

    def test_get_profile_by_id(self, auth_adapter, profile_service, email):
        identity = _signed_in_with_profile(auth_adapter, profile_service, email)
        assert profile_service.get_profile(identity.id).id == identity.id

    def test_get_profile_miss(self, profile_service):
        assert profile_service.get_profile("does-not-exist") is None

    def test_store_failure_degrades_to_none(self):
        auth = Mock()
        auth.get_user.return_value = IdentityEntity(id="u1", email="u1@example.com")
        repo = Mock()
        repo.get.side_effect = RuntimeError("DB fetch profile failed: timeout")
        service = ProfileService(auth=auth, profiles=repo)

        assert service.get_profile("u1") is None
        assert service.get_current_user_profile() is None
        assert service.has_role("citizen") is False


class TestUpdate:
    def test_requires_session_and_does_not_touch_store(self):
        auth = Mock()
        auth.get_user.return_value = None
        repo = Mock()
        service = ProfileService(auth=auth, profiles=repo)

        result = service.update_profile({"bio": "x"})

        assert not result.ok
        assert result.error.code == UNAUTHENTICATED
        assert result.error.status == 401
        repo.update.assert_not_called()

    def test_updates_only_given_field_and_timestamp(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(
            auth_adapter, profile_service, email, full_name="Ada", location="London", role="official"
        )
        before = profile_service.get_current_user_profile()

        result = profile_service.update_profile({"bio": "x"})

        assert result.ok
        after = profile_service.get_current_user_profile()
        assert after.bio == "x"
        assert after.updated_at >= before.updated_at
        assert after.full_name == before.full_name == "Ada"
        assert after.location == before.location == "London"
        assert after.role == before.role == UserRole.OFFICIAL
        assert after.email == before.email
        assert after.is_verified == before.is_verified
        assert after.created_at == before.created_at

    def test_none_clears_field(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(auth_adapter, profile_service, email, bio="old bio", location="London")

        result = profile_service.update_profile({"bio": None})

        assert result.ok
        after = profile_service.get_current_user_profile()
        assert after.bio is None
        assert after.location == "London"

    def test_stamps_updated_at(self):
        auth = Mock()
        auth.get_user.return_value = IdentityEntity(id="u1", email="u1@example.com")
        repo = Mock()
        service = ProfileService(auth=auth, profiles=repo)

        service.update_profile({"bio": "x"})

        user_id, fields = repo.update.call_args[0]
        assert user_id == "u1"
        assert set(fields) == {"bio", "updated_at"}

    def test_role_cannot_be_updated(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(auth_adapter, profile_service, email)

        result = profile_service.update_profile({"role": "official", "is_verified": True})

        assert result.error.code == INVALID_INPUT
        assert "is_verified" in result.error.message
        assert profile_service.get_current_user_profile().role == UserRole.CITIZEN

    def test_missing_row_reports_not_found(self, auth_adapter, profile_service, email):
        _signed_in_without_profile(auth_adapter, email)

        result = profile_service.update_profile({"bio": "x"})

        assert result.error.code == NOT_FOUND
        assert result.error.status == 404

    def test_store_failure_reported(self):
        auth = Mock()
        auth.get_user.return_value = IdentityEntity(id="u1", email="u1@example.com")
        repo = Mock()
        repo.update.side_effect = RuntimeError("DB update profile failed: permission denied")
        service = ProfileService(auth=auth, profiles=repo)

        result = service.update_profile({"bio": "x"})

        assert result.error.code == STORE_ERROR
        assert "permission denied" in result.error.message


class TestCreate:
    def test_requires_session(self, profile_service):
        result = profile_service.create_profile({"full_name": "Nobody"})
        assert result.error.code == UNAUTHENTICATED

    def test_keyed_by_identity(self, auth_adapter, profile_service, email):
        identity = _signed_in_without_profile(auth_adapter, email)

        result = profile_service.create_profile({"full_name": "Ada", "role": "official", "bio": "hi"})

        assert result.ok
        assert result.data.id == identity.id
        assert result.data.email == email
        assert result.data.role == UserRole.OFFICIAL
        assert result.data.created_at is not None

    def test_twice_is_a_store_error(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(auth_adapter, profile_service, email)
        result = profile_service.create_profile({})
        assert result.error.code == STORE_ERROR

    def test_unknown_role(self, auth_adapter, profile_service, email):
        _signed_in_without_profile(auth_adapter, email)
        result = profile_service.create_profile({"role": "king"})
        assert result.error.code == INVALID_INPUT

    def test_provision_keeps_existing_row(self, auth_adapter, profile_service, email):
        identity = _signed_in_with_profile(auth_adapter, profile_service, email, full_name="Original")

        profile = profile_service.provision_profile(identity, full_name="Other", role=UserRole.OFFICIAL)

        assert profile.full_name == "Original"
        assert profile.role == UserRole.CITIZEN


class TestRoles:
    def test_official(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(auth_adapter, profile_service, email, role="official")

        assert profile_service.has_role("official") is True
        assert profile_service.has_role(UserRole.CITIZEN) is False
        assert profile_service.is_official() is True
        assert profile_service.is_citizen() is False

    def test_citizen(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(auth_adapter, profile_service, email)
        assert profile_service.is_citizen() is True
        assert profile_service.is_official() is False

    def test_no_profile_is_false(self, auth_adapter, profile_service, email):
        _signed_in_without_profile(auth_adapter, email)
        assert profile_service.has_role("official") is False
        assert profile_service.has_role("citizen") is False

    def test_no_session_is_false(self, profile_service):
        assert profile_service.is_official() is False

    def test_unknown_role_is_false(self, auth_adapter, profile_service, email):
        _signed_in_with_profile(auth_adapter, profile_service, email)
        assert profile_service.has_role("admin") is False


def test_parse_role():
    assert parse_role(None) == UserRole.CITIZEN
    assert parse_role("official") == UserRole.OFFICIAL
    assert parse_role(UserRole.CITIZEN) == UserRole.CITIZEN
