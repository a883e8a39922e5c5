"""
Domain models for OAuth credential persistence.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialFragment(BaseModel):
    """Token endpoint response for the authorization_code and refresh_token grants."""

    access_token: str
    refresh_token: Optional[str] = Field(
        None, description="Absent when the provider does not rotate refresh tokens."
    )
    scope: str = ""
    expires_in: int = Field(..., gt=0, description="Access token lifetime in seconds.")
    token_type: str = "Bearer"

    def expires_at(self, issued_at: datetime) -> datetime:
        """Absolute expiry computed from the local issuance instant."""
        return issued_at + timedelta(seconds=self.expires_in)


class CredentialRecord(BaseModel):
    """Represents the stored OAuth credential of one Discord user."""

    user_id: str = Field(..., description="Discord user snowflake, primary key.")
    access_token: str
    refresh_token: str
    scope: str = ""
    token_type: str = "Bearer"
    expires_at: datetime
    updated_at: datetime = Field(default_factory=utcnow)

    def is_expired(self, now: datetime, margin: timedelta = timedelta(0)) -> bool:
        """A token expiring exactly at ``now`` counts as expired."""
        return not now + margin < self.expires_at


__all__ = ["CredentialFragment", "CredentialRecord", "utcnow"]
