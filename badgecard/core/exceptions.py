"""
Error taxonomy shared by the OAuth client, lifecycle manager and renderer.

Routes translate these into HTTP responses; nothing below the transport layer
retries or swallows them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from badgecard.models.oauth import CredentialRecord


class BadgeCardError(Exception):
    """Base class for every categorized failure raised by the service."""


class ClientInputError(BadgeCardError):
    """Raised when a request parameter is missing or malformed."""


class AuthError(BadgeCardError):
    """Raised when a call against the identity provider fails."""


class ExchangeFailedError(AuthError):
    """The authorization code could not be exchanged for tokens."""


class RefreshFailedError(AuthError):
    """The refresh token was rejected or the token endpoint was unreachable."""


class ProfileFetchFailedError(AuthError):
    """The profile endpoint rejected the access token or was unreachable."""


class LifecycleError(BadgeCardError):
    """Raised when a valid access token cannot be guaranteed for a user."""


class UnknownUserError(LifecycleError):
    """No credential record exists for the requested user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No OAuth credentials stored for user {user_id}.")
        self.user_id = user_id


class TokenRefreshError(LifecycleError):
    """Refreshing an expired access token failed."""


class StoreError(BadgeCardError):
    """Raised when the credential store cannot be read or written.

    When a refreshed credential could not be persisted, ``record`` holds the
    freshly issued credential so callers still have access to it.
    """

    def __init__(self, message: str, *, record: Optional["CredentialRecord"] = None) -> None:
        super().__init__(message)
        self.record = record


class RenderError(BadgeCardError):
    """Raised when the identity card image cannot be composed."""


__all__ = [
    "AuthError",
    "BadgeCardError",
    "ClientInputError",
    "ExchangeFailedError",
    "LifecycleError",
    "ProfileFetchFailedError",
    "RefreshFailedError",
    "RenderError",
    "StoreError",
    "TokenRefreshError",
    "UnknownUserError",
]
