"""Shared utilities."""

from .errors import (
    AuthError,
    ConfigurationError,
    FetchError,
    NotFoundError,
    TaskboardError,
    ValidationError,
)

__all__ = [
    "AuthError",
    "ConfigurationError",
    "FetchError",
    "NotFoundError",
    "TaskboardError",
    "ValidationError",
]
