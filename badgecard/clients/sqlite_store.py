"""SQLite-backed credential store keyed by Discord user id."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from badgecard.core.exceptions import StoreError
from badgecard.models.oauth import CredentialRecord

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from badgecard.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Persistence contract consumed by the token lifecycle manager."""

    def get(self, user_id: str) -> Optional[CredentialRecord]:
        ...

    def upsert(self, record: CredentialRecord) -> None:
        ...


class SQLiteCredentialStore:
    """One row per user; writes replace the whole row atomically."""

    def __init__(self, db_path: str, *, cipher: "TokenCipherService") -> None:
        self._db_path = Path(db_path)
        self._cipher = cipher
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False, timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS credentials (
                    user_id TEXT PRIMARY KEY,
                    access_token_encrypted TEXT NOT NULL,
                    refresh_token_encrypted TEXT NOT NULL,
                    scope TEXT NOT NULL DEFAULT '',
                    token_type TEXT NOT NULL DEFAULT 'Bearer',
                    expires_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def get(self, user_id: str) -> Optional[CredentialRecord]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM credentials WHERE user_id = ?",
                    (user_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read credentials for user {user_id}.") from exc
        if not row:
            return None

        try:
            access_token = self._cipher.decrypt(row["access_token_encrypted"])
            refresh_token = self._cipher.decrypt(row["refresh_token_encrypted"])
        except ValueError as exc:
            raise StoreError(
                f"Stored credentials for user {user_id} cannot be decrypted."
            ) from exc

        return CredentialRecord(
            user_id=row["user_id"],
            access_token=access_token,
            refresh_token=refresh_token,
            scope=row["scope"],
            token_type=row["token_type"],
            expires_at=_parse_timestamp(row["expires_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )

    def upsert(self, record: CredentialRecord) -> None:
        values = (
            record.user_id,
            self._cipher.encrypt(record.access_token),
            self._cipher.encrypt(record.refresh_token),
            record.scope,
            record.token_type,
            record.expires_at.isoformat(),
            record.updated_at.isoformat(),
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO credentials (
                        user_id, access_token_encrypted, refresh_token_encrypted,
                        scope, token_type, expires_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        access_token_encrypted = excluded.access_token_encrypted,
                        refresh_token_encrypted = excluded.refresh_token_encrypted,
                        scope = excluded.scope,
                        token_type = excluded.token_type,
                        expires_at = excluded.expires_at,
                        updated_at = excluded.updated_at
                    """,
                    values,
                )
        except sqlite3.Error as exc:
            raise StoreError(
                f"Failed to persist credentials for user {record.user_id}.", record=record
            ) from exc
        logger.debug("Stored credentials for user %s", record.user_id)


def _parse_timestamp(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = ["CredentialStore", "SQLiteCredentialStore"]
