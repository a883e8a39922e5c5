"""Encryption of Discord access and refresh tokens before they reach SQLite."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


def derive_fernet_key(secret: str) -> bytes:
    """Stretch ``TOKEN_ENCRYPTION_SECRET`` (or the client secret) into a Fernet key."""
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


class TokenCipherService:
    """Seals credential record tokens so a copied database file does not leak them.

    Rotating the secret makes existing rows unreadable; the store reports them
    as ``StoreError`` and the user has to authorize again.
    """

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("A token encryption secret is required.")
        self._fernet = Fernet(derive_fernet_key(secret))

    def encrypt(self, token: str) -> str:
        return self._fernet.encrypt(token.encode("utf-8")).decode("ascii")

    def decrypt(self, sealed: str) -> str:
        try:
            token = self._fernet.decrypt(sealed.encode("ascii"))
        except (InvalidToken, UnicodeEncodeError) as exc:
            raise ValueError("Stored token could not be decrypted.") from exc
        return token.decode("utf-8")


__all__ = ["TokenCipherService", "derive_fernet_key"]
