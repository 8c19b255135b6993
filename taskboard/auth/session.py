"""Authenticated user session.

Authentication itself happens in the external identity provider. This module
only holds what the provider hands back (the user and an access token) and
answers "who is calling" for the repositories and gateways.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.config import Settings
from ..utils.errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """The user the identity provider authenticated.

    Attributes:
        id: Stable user identifier, used as owner_id on every row
        email: User email, informational only
    """

    id: str
    email: str | None = None


@dataclass(frozen=True)
class AuthSession:
    """A signed-in user together with the bearer token for the data store."""

    user: CurrentUser
    access_token: str | None = None


class SessionProvider:
    """Holds the current session, if any.

    Usage:
        sessions = SessionProvider()
        sessions.sign_in(AuthSession(CurrentUser(id="u1", email="a@b.c"), "jwt..."))

        user = sessions.require_user()  # raises AuthError when signed out
    """

    def __init__(self, session: AuthSession | None = None):
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionProvider:
        """Build a provider from configured identity values.

        Returns a signed-out provider when no user id is configured.
        """
        if not settings.user_id:
            logger.info("No user configured; starting signed out")
            return cls()
        user = CurrentUser(id=settings.user_id, email=settings.user_email)
        return cls(AuthSession(user=user, access_token=settings.access_token))

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def current_user(self) -> CurrentUser | None:
        return self._session.user if self._session else None

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def sign_in(self, session: AuthSession) -> None:
        self._session = session
        logger.info(f"Signed in as {session.user.email or session.user.id}")

    def sign_out(self) -> None:
        self._session = None
        logger.info("Signed out")

    def require_user(self) -> CurrentUser:
        """Return the current user or raise AuthError."""
        if self._session is None:
            raise AuthError()
        return self._session.user
