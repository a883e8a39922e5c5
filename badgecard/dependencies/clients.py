"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from badgecard.clients import (
    AssetClient,
    CredentialStore,
    DiscordOAuthClient,
    SQLiteCredentialStore,
)
from badgecard.core.config import AppSettings
from badgecard.services import (
    IdentityCardService,
    ImageComposer,
    TokenCipherService,
    TokenLifecycleManager,
)

from .config import get_app_settings


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = get_app_settings()
    secret = settings.security.token_encryption_secret or settings.discord.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_credential_store() -> SQLiteCredentialStore:
    """Provide the shared SQLite credential store."""
    settings = get_app_settings()
    return SQLiteCredentialStore(
        settings.store.sqlite_path,
        cipher=get_token_cipher_service(),
    )


@lru_cache()
def get_discord_oauth_client() -> DiscordOAuthClient:
    """Create a singleton Discord OAuth client."""
    return DiscordOAuthClient(get_app_settings().discord)


@lru_cache()
def get_asset_client() -> AssetClient:
    return AssetClient()


def get_image_composer(
    asset_client: Annotated[AssetClient, Depends(get_asset_client)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> ImageComposer:
    return ImageComposer(
        asset_client,
        badge_icon_base_url=str(settings.render.badge_icon_base_url),
        font_path=settings.render.font_path,
    )


def get_token_lifecycle_manager(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    oauth_client: Annotated[DiscordOAuthClient, Depends(get_discord_oauth_client)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> TokenLifecycleManager:
    """Build the token lifecycle manager over the shared store and OAuth client."""
    return TokenLifecycleManager(
        store=store,
        oauth_client=oauth_client,
        refresh_margin=timedelta(seconds=settings.security.token_refresh_margin_seconds),
    )


def get_identity_card_service(
    oauth_client: Annotated[DiscordOAuthClient, Depends(get_discord_oauth_client)],
    token_manager: Annotated[TokenLifecycleManager, Depends(get_token_lifecycle_manager)],
    composer: Annotated[ImageComposer, Depends(get_image_composer)],
) -> IdentityCardService:
    """Build the identity card pipeline using configured clients."""
    return IdentityCardService(
        oauth_client=oauth_client,
        token_manager=token_manager,
        composer=composer,
    )


__all__ = [
    "get_asset_client",
    "get_credential_store",
    "get_discord_oauth_client",
    "get_identity_card_service",
    "get_image_composer",
    "get_token_cipher_service",
    "get_token_lifecycle_manager",
]
