"""
Discord OAuth2 utilities.

These helpers exchange authorization codes, refresh access tokens and read the
authenticated user's profile. Every method performs exactly one request and
never retries; failures surface as ``AuthError`` subclasses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type
from urllib.parse import urlencode

import httpx
from fastapi import status
from pydantic import ValidationError

from badgecard.core.config import DiscordSettings
from badgecard.core.exceptions import (
    AuthError,
    ExchangeFailedError,
    ProfileFetchFailedError,
    RefreshFailedError,
)
from badgecard.models.oauth import CredentialFragment
from badgecard.models.profile import Profile

logger = logging.getLogger(__name__)


class DiscordOAuthClient:
    """Talks to Discord's OAuth2 token endpoint and the ``@me`` profile endpoint."""

    AUTH_BASE_URL = "https://discord.com/oauth2/authorize"
    API_BASE_URL = "https://discord.com/api/v10"
    TOKEN_URL = f"{API_BASE_URL}/oauth2/token"
    PROFILE_URL = f"{API_BASE_URL}/users/@me"

    def __init__(
        self,
        discord_settings: DiscordSettings,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._discord = discord_settings
        self._timeout = timeout
        self._transport = transport

    def build_authorization_url(self, state: Optional[str] = None) -> str:
        """Return the configured consent URL, or construct one from the client settings."""
        if self._discord.authorization_url is not None:
            return self._discord.authorization_url

        params = {
            "client_id": self._discord.client_id,
            "redirect_uri": self._discord.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._discord.scopes),
        }
        if state:
            params["state"] = state
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> CredentialFragment:
        """Exchange a one-time authorization code for an access/refresh token pair."""
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._discord.redirect_uri,
        }
        fragment = await self._token_request(payload, ExchangeFailedError)
        if not fragment.refresh_token:
            raise ExchangeFailedError("Token response did not include a refresh token.")
        return fragment

    async def refresh(self, refresh_token: str) -> CredentialFragment:
        """Obtain a new access token. The returned refresh token may be ``None``."""
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        return await self._token_request(payload, RefreshFailedError)

    async def fetch_profile(self, access_token: str) -> Profile:
        """Read the profile of the user owning ``access_token``."""
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            async with self._client() as client:
                response = await client.get(self.PROFILE_URL, headers=headers)
        except httpx.HTTPError as exc:
            raise ProfileFetchFailedError(f"Profile request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise ProfileFetchFailedError(
                f"Profile endpoint returned HTTP {response.status_code}."
            )
        try:
            return Profile.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProfileFetchFailedError("Malformed profile payload returned from Discord.") from exc

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _token_request(
        self, payload: Dict[str, Any], error_cls: Type[AuthError]
    ) -> CredentialFragment:
        data = {
            "client_id": self._discord.client_id,
            "client_secret": self._discord.client_secret,
            **payload,
        }
        try:
            async with self._client() as client:
                response = await client.post(
                    self.TOKEN_URL,
                    data=data,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise error_cls(f"Token request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            logger.warning(
                "Discord token endpoint rejected %s grant with HTTP %s",
                payload["grant_type"],
                response.status_code,
            )
            raise error_cls(f"Token endpoint returned HTTP {response.status_code}.")

        try:
            return CredentialFragment.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise error_cls("Incomplete token payload returned from Discord.") from exc


__all__ = ["DiscordOAuthClient"]
