"""
Helpers for retrieving, refreshing and persisting Discord OAuth tokens.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from badgecard.clients.discord_oauth import DiscordOAuthClient
from badgecard.clients.sqlite_store import CredentialStore
from badgecard.core.exceptions import AuthError, StoreError, TokenRefreshError, UnknownUserError
from badgecard.models.oauth import CredentialFragment, CredentialRecord, utcnow
from badgecard.models.profile import Profile

logger = logging.getLogger(__name__)


class TokenLifecycleManager:
    """Guarantees a currently valid access token for a stored user."""

    def __init__(
        self,
        store: CredentialStore,
        oauth_client: DiscordOAuthClient,
        *,
        refresh_margin: timedelta = timedelta(0),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._refresh_margin = refresh_margin
        self._clock = clock

    async def ensure_valid_token(self, user_id: str) -> str:
        """
        Return a usable access token for ``user_id``, refreshing it when expired.

        Raises ``UnknownUserError`` when nothing is stored for the user,
        ``TokenRefreshError`` when Discord rejects the refresh (the store is left
        untouched) and ``StoreError`` when the refreshed credential cannot be
        persisted. In the last case ``exc.record`` carries the new credential.
        """
        record = self._store.get(user_id)
        if record is None:
            raise UnknownUserError(user_id)

        if not record.is_expired(self._clock(), self._refresh_margin):
            return record.access_token

        logger.info("Access token for user %s expired at %s; refreshing", user_id, record.expires_at)
        refreshed_at = self._clock()
        try:
            fragment = await self._oauth.refresh(record.refresh_token)
        except AuthError as exc:
            raise TokenRefreshError(f"Failed to refresh token for user {user_id}.") from exc

        refreshed = self._build_record(user_id, fragment, refreshed_at, previous=record)
        self._persist(refreshed)
        return refreshed.access_token

    def store_authorization(
        self, fragment: CredentialFragment, profile: Profile, *, issued_at: Optional[datetime] = None
    ) -> CredentialRecord:
        """Persist the credential obtained from an authorization code exchange."""
        record = self._build_record(profile.id, fragment, issued_at or self._clock())
        self._persist(record)
        logger.info("Stored new credentials for user %s", profile.id)
        return record

    def _persist(self, record: CredentialRecord) -> None:
        try:
            self._store.upsert(record)
        except StoreError as exc:
            if exc.record is None:
                raise StoreError(str(exc), record=record) from exc
            raise

    @staticmethod
    def _build_record(
        user_id: str,
        fragment: CredentialFragment,
        issued_at: datetime,
        *,
        previous: Optional[CredentialRecord] = None,
    ) -> CredentialRecord:
        refresh_token = fragment.refresh_token
        scope = fragment.scope
        if previous is not None:
            refresh_token = refresh_token or previous.refresh_token
            scope = scope or previous.scope
        if not refresh_token:
            raise StoreError(f"No refresh token available for user {user_id}.")

        return CredentialRecord(
            user_id=user_id,
            access_token=fragment.access_token,
            refresh_token=refresh_token,
            scope=scope,
            token_type=fragment.token_type,
            expires_at=fragment.expires_at(issued_at),
            updated_at=issued_at,
        )


__all__ = ["TokenLifecycleManager"]
