from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from badgecard.clients.sqlite_store import SQLiteCredentialStore
from badgecard.core.exceptions import StoreError
from badgecard.services.token_cipher import TokenCipherService

from fakes import make_record


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "nested" / "credentials.db"


@pytest.fixture
def sqlite_store(db_path) -> SQLiteCredentialStore:
    return SQLiteCredentialStore(str(db_path), cipher=TokenCipherService(secret="store-secret"))


def test_missing_user_returns_none(sqlite_store) -> None:
    assert sqlite_store.get("nobody") is None


def test_upsert_then_get_returns_full_record(sqlite_store, db_path) -> None:
    expires_at = datetime(2030, 1, 1, 12, 30, tzinfo=timezone.utc)
    record = make_record("42", expires_at=expires_at)

    sqlite_store.upsert(record)
    loaded = sqlite_store.get("42")

    assert db_path.exists()
    assert loaded == record
    assert loaded.expires_at.tzinfo is not None


def test_upsert_replaces_existing_row(sqlite_store, db_path) -> None:
    sqlite_store.upsert(make_record("42", access_token="old", refresh_token="old-refresh"))
    later = datetime.now(timezone.utc) + timedelta(days=7)
    sqlite_store.upsert(
        make_record("42", access_token="new", refresh_token="new-refresh", expires_at=later)
    )

    loaded = sqlite_store.get("42")
    assert loaded.access_token == "new"
    assert loaded.refresh_token == "new-refresh"
    assert loaded.expires_at == later

    with sqlite3.connect(db_path) as conn:
        (count,) = conn.execute("SELECT COUNT(*) FROM credentials").fetchone()
    assert count == 1


def test_tokens_are_encrypted_at_rest(sqlite_store, db_path) -> None:
    sqlite_store.upsert(make_record("42", access_token="plain-access", refresh_token="plain-refresh"))

    with sqlite3.connect(db_path) as conn:
        row = conn.execute(
            "SELECT access_token_encrypted, refresh_token_encrypted FROM credentials"
        ).fetchone()

    assert "plain-access" not in row[0]
    assert "plain-refresh" not in row[1]


def test_records_written_with_another_secret_raise_store_error(sqlite_store, db_path) -> None:
    sqlite_store.upsert(make_record("42"))
    other = SQLiteCredentialStore(str(db_path), cipher=TokenCipherService(secret="rotated"))

    with pytest.raises(StoreError):
        other.get("42")


def test_write_failure_raises_store_error_with_record(sqlite_store, db_path) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE credentials")
    record = make_record("42")

    with pytest.raises(StoreError) as excinfo:
        sqlite_store.upsert(record)

    assert excinfo.value.record == record
