"""Identity of the calling user."""

from .session import AuthSession, CurrentUser, SessionProvider

__all__ = ["AuthSession", "CurrentUser", "SessionProvider"]
