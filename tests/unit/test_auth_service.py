from __future__ import annotations

from unittest.mock import Mock

from src.application.services.auth_service import AuthService
from src.domain.entities.profile import UserRole
from src.domain.entities.result import INVALID_INPUT
from src.infrastructure.auth.supabase_auth import AuthProviderError

PASSWORD = "correct-horse"


class TestSignUpAndSignIn:
    def test_sign_in_then_current_user_matches(self, auth_service, email):
        auth_service.sign_up(email, PASSWORD)
        auth_service.sign_out()

        result = auth_service.sign_in(email, PASSWORD)
        assert result.ok
        signed_in = result.data.user

        current = auth_service.get_current_user()
        assert current is not None
        assert current.id == signed_in.id
        assert current.email == signed_in.email == email

    def test_sign_up_creates_profile_explicitly(self, auth_service, email):
        result = auth_service.sign_up(email, PASSWORD, full_name="Ada Lovelace", role="official")

        assert result.ok
        assert result.error is None
        profile = result.data.user.profile
        assert profile is not None
        assert profile.id == result.data.user.id
        assert profile.email == email
        assert profile.full_name == "Ada Lovelace"
        assert profile.role == UserRole.OFFICIAL
        assert profile.is_verified is False
        assert result.data.user.identity.user_metadata == {"full_name": "Ada Lovelace", "role": "official"}

    def test_sign_up_defaults_to_citizen(self, auth_service, email):
        result = auth_service.sign_up(email, PASSWORD)
        assert result.data.user.profile.role == UserRole.CITIZEN

    def test_duplicate_email_reports_provider_message(self, auth_service, email):
        auth_service.sign_up(email, PASSWORD)
        result = auth_service.sign_up(email, PASSWORD)

        assert not result.ok
        assert result.data is None
        assert result.error.message == "User already registered"

    def test_short_password_rejected(self, auth_service, email):
        result = auth_service.sign_up(email, "123")
        assert not result.ok
        assert "at least 6 characters" in result.error.message

    def test_unknown_role_rejected_before_provider_call(self, email):
        auth = Mock()
        service = AuthService(auth=auth, profiles=Mock())

        result = service.sign_up(email, PASSWORD, role="mayor")

        assert result.error.code == INVALID_INPUT
        auth.sign_up.assert_not_called()

    def test_wrong_password(self, auth_service, email):
        auth_service.sign_up(email, PASSWORD)
        auth_service.sign_out()

        result = auth_service.sign_in(email, "wrong-password")

        assert result.data is None
        assert result.error.message == "Invalid login credentials"
        assert auth_service.get_current_user() is None


class TestSession:
    def test_no_session_returns_nothing(self, auth_service):
        assert auth_service.get_current_user() is None
        assert auth_service.get_session() is None
        assert auth_service.get_access_token() is None
        assert auth_service.is_authenticated() is False

    def test_sign_out_clears_session(self, auth_service, email):
        auth_service.sign_up(email, PASSWORD)
        assert auth_service.is_authenticated()
        token = auth_service.get_access_token()
        assert token

        result = auth_service.sign_out()

        assert result.ok
        assert auth_service.get_session() is None
        assert auth_service.get_access_token() is None

    def test_access_token_matches_sign_in_session(self, auth_service, email):
        auth_service.sign_up(email, PASSWORD)
        session = auth_service.sign_in(email, PASSWORD).data.session
        assert auth_service.get_access_token() == session.access_token

    def test_current_user_without_profile_row(self, auth_service, auth_adapter, email):
        # identity registered directly with the provider, no profile provisioned
        identity, _ = auth_adapter.sign_up(email, PASSWORD)

        current = auth_service.get_current_user()

        assert current is not None
        assert current.id == identity.id
        assert current.profile is None

    def test_provider_failure_degrades_to_none(self):
        auth = Mock()
        auth.get_user.side_effect = AuthProviderError("network down", status=503)
        auth.get_session.side_effect = AuthProviderError("network down", status=503)
        service = AuthService(auth=auth, profiles=Mock())

        assert service.get_current_user() is None
        assert service.get_session() is None
        assert service.is_authenticated() is False

    def test_sign_out_failure_is_reported(self):
        auth = Mock()
        auth.sign_out.side_effect = AuthProviderError("Session not found", status=404)
        service = AuthService(auth=auth, profiles=Mock())

        result = service.sign_out()

        assert result.error.message == "Session not found"
        assert result.error.status == 404


class TestAuthStateListener:
    def test_events_deliver_composed_user(self, auth_service, email):
        seen = []
        auth_service.on_auth_state_change(seen.append)

        auth_service.sign_up(email, PASSWORD, full_name="Grace")
        auth_service.sign_out()
        auth_service.sign_in(email, PASSWORD)

        assert len(seen) == 3
        # the profile is written after the provider reports the sign-in
        assert seen[0] is not None and seen[0].email == email
        assert seen[1] is None
        assert seen[2].profile is not None
        assert seen[2].profile.full_name == "Grace"

    def test_unsubscribe_stops_delivery(self, auth_service, email):
        seen = []
        subscription = auth_service.on_auth_state_change(seen.append)
        subscription.unsubscribe()

        auth_service.sign_up(email, PASSWORD)

        assert seen == []

    def test_failing_listener_does_not_break_sign_in(self, auth_service, email):
        def explode(user):
            raise RuntimeError("listener bug")

        auth_service.on_auth_state_change(explode)
        result = auth_service.sign_up(email, PASSWORD)
        assert result.ok


def test_expired_session_is_dropped(auth_adapter, email):
    from dataclasses import replace

    from src.infrastructure.auth import supabase_auth

    _, session = auth_adapter.sign_up(email, PASSWORD)
    supabase_auth._MEM_SESSIONS[session.access_token] = replace(session, expires_at=0)

    assert auth_adapter.get_session() is None
    assert session.access_token not in supabase_auth._MEM_SESSIONS
