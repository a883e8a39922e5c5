"""
Discord user profile as returned by the ``/users/@me`` endpoint.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

CDN_BASE_URL = "https://cdn.discordapp.com"


class Profile(BaseModel):
    """Identity fields needed to render a card. Never persisted."""

    id: str
    username: str
    discriminator: str = "0"
    avatar: Optional[str] = Field(None, description="Avatar hash, null for default avatars.")
    global_name: Optional[str] = None
    flags: int = 0
    premium_type: int = 0

    @model_validator(mode="before")
    @classmethod
    def _normalize_payload(cls, data: Any) -> Any:
        # ``flags`` is only present with some scopes; ``public_flags`` always is.
        if isinstance(data, dict):
            data = dict(data)
            if data.get("flags") is None:
                data["flags"] = data.get("public_flags") or 0
            if data.get("premium_type") is None:
                data["premium_type"] = 0
            if data.get("discriminator") is None:
                data["discriminator"] = "0"
        return data

    @property
    def display_tag(self) -> str:
        """``#1234`` for legacy accounts, empty for migrated usernames."""
        if not self.discriminator or self.discriminator == "0":
            return ""
        return f"#{self.discriminator}"

    def avatar_url(self, size: int = 128) -> str:
        if self.avatar:
            return f"{CDN_BASE_URL}/avatars/{self.id}/{self.avatar}.png?size={size}"
        if self.display_tag and self.discriminator.isdigit():
            index = int(self.discriminator) % 5
        elif self.id.isdigit():
            index = (int(self.id) >> 22) % 6
        else:
            index = 0
        return f"{CDN_BASE_URL}/embed/avatars/{index}.png"


__all__ = ["CDN_BASE_URL", "Profile"]
