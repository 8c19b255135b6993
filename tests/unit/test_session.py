"""Tests for the session provider."""

import pytest

from taskboard.auth.session import AuthSession, CurrentUser, SessionProvider
from taskboard.core.config import Settings
from taskboard.utils.errors import AuthError


class TestSessionProvider:
    """Tests for SessionProvider."""

    def test_signed_out(self, signed_out):
        assert not signed_out.is_authenticated
        assert signed_out.current_user is None
        assert signed_out.access_token is None
        with pytest.raises(AuthError, match="User not authenticated"):
            signed_out.require_user()

    def test_sign_in_and_out(self, signed_out, user):
        signed_out.sign_in(AuthSession(user=user, access_token="jwt"))

        assert signed_out.require_user() == user
        assert signed_out.access_token == "jwt"

        signed_out.sign_out()
        assert not signed_out.is_authenticated

    def test_from_settings(self):
        settings = Settings(
            _env_file=None, user_id="user-7", user_email="grace@example.com", access_token="jwt"
        )

        sessions = SessionProvider.from_settings(settings)

        assert sessions.current_user == CurrentUser(id="user-7", email="grace@example.com")
        assert sessions.access_token == "jwt"

    def test_from_settings_without_user(self, monkeypatch):
        monkeypatch.delenv("TASKBOARD_USER_ID", raising=False)
        settings = Settings(_env_file=None)

        assert not SessionProvider.from_settings(settings).is_authenticated
