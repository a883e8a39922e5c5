"""Expose constructed client wrappers."""

from .cdn import AssetClient
from .discord_oauth import DiscordOAuthClient
from .sqlite_store import CredentialStore, SQLiteCredentialStore

__all__ = [
    "AssetClient",
    "CredentialStore",
    "DiscordOAuthClient",
    "SQLiteCredentialStore",
]
