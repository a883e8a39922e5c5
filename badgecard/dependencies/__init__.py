"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_asset_client,
    get_credential_store,
    get_discord_oauth_client,
    get_identity_card_service,
    get_image_composer,
    get_token_cipher_service,
    get_token_lifecycle_manager,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_asset_client",
    "get_credential_store",
    "get_discord_oauth_client",
    "get_identity_card_service",
    "get_image_composer",
    "get_token_cipher_service",
    "get_token_lifecycle_manager",
]
