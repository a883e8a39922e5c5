"""
End-to-end pipelines behind the two public endpoints.
"""

from __future__ import annotations

import logging

from badgecard.clients.discord_oauth import DiscordOAuthClient
from badgecard.models.profile import Profile
from badgecard.services.badges import resolve_badges
from badgecard.services.image_composer import ImageComposer
from badgecard.services.token_lifecycle import TokenLifecycleManager

logger = logging.getLogger(__name__)


class IdentityCardService:
    """Wires the OAuth client, token lifecycle and renderer together."""

    def __init__(
        self,
        oauth_client: DiscordOAuthClient,
        token_manager: TokenLifecycleManager,
        composer: ImageComposer,
    ) -> None:
        self._oauth = oauth_client
        self._tokens = token_manager
        self._composer = composer

    async def complete_authorization(self, code: str) -> Profile:
        """Exchange ``code``, identify the user and store their credentials."""
        fragment = await self._oauth.exchange_code(code)
        profile = await self._oauth.fetch_profile(fragment.access_token)
        self._tokens.store_authorization(fragment, profile)
        return profile

    async def render_card(self, user_id: str) -> bytes:
        access_token = await self._tokens.ensure_valid_token(user_id)
        profile = await self._oauth.fetch_profile(access_token)
        badges = resolve_badges(profile.flags, profile.premium_type)
        logger.info(
            "Rendering card for user %s with badges %s",
            user_id,
            [badge.value for badge in badges],
        )
        return await self._composer.render(profile, badges)


__all__ = ["IdentityCardService"]
