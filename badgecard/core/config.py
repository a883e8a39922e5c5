"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the console entry point and
the maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


SQLITE_URL_PREFIX = "sqlite:///"

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class DiscordSettings(BaseSettings):
    """Configuration required for the Discord OAuth2 application."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(..., validation_alias="DISCORD_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="DISCORD_CLIENT_SECRET")
    redirect_uri: str = Field(..., validation_alias="DISCORD_REDIRECT_URI")
    authorization_url: Optional[str] = Field(
        None,
        validation_alias="DISCORD_AUTH_URL",
        description="Pre-built consent URL. Built from the client settings when omitted.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("identify",),
        validation_alias="DISCORD_OAUTH_SCOPES",
    )

    @field_validator("redirect_uri", "authorization_url")
    @classmethod
    def _check_http_url(cls, value: Optional[str]) -> Optional[str]:
        """Reject non-HTTP URLs but keep the text exactly as registered with Discord.

        Discord compares ``redirect_uri`` byte for byte with the registered value,
        so the normalized form (e.g. an added trailing slash) must not be sent.
        """
        if value is None:
            return value
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"{value!r} is not a valid http(s) URL") from exc
        return value

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma or space separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope for scope in value.replace(",", " ").split() if scope)


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )
    token_refresh_margin_seconds: int = Field(
        0,
        ge=0,
        validation_alias="TOKEN_REFRESH_MARGIN_SECONDS",
        description="Refresh access tokens this many seconds before they expire.",
    )


class StoreSettings(BaseSettings):
    """Credential persistence configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    url: str = Field(f"{SQLITE_URL_PREFIX}data/badgecard.db", validation_alias="STORE_URL")

    @field_validator("url")
    @classmethod
    def _require_sqlite(cls, value: str) -> str:
        if not value.startswith(SQLITE_URL_PREFIX) or value == SQLITE_URL_PREFIX:
            raise ValueError(
                f"STORE_URL must be a SQLite connection string such as {SQLITE_URL_PREFIX}data/badgecard.db"
            )
        return value

    @property
    def sqlite_path(self) -> str:
        return self.url[len(SQLITE_URL_PREFIX):]


class RenderSettings(BaseSettings):
    """Controls the appearance of the rendered identity card."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    badge_icon_base_url: AnyHttpUrl = Field(
        "https://raw.githubusercontent.com/Mattlau04/Discord-SVG-badges/master/PNG",
        validation_alias="BADGE_ICON_BASE_URL",
    )
    font_path: Optional[Path] = Field(
        None,
        validation_alias="CARD_FONT_PATH",
        description="TrueType font used for the display name. Pillow's default font otherwise.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(8080, validation_alias="PORT")
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DiscordSettings",
    "RenderSettings",
    "SecuritySettings",
    "StoreSettings",
    "get_settings",
]
