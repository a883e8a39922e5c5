try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64

import pytest

from badgecard.services.token_cipher import TokenCipherService, derive_fernet_key


def test_token_cipher_hides_plaintext_and_decrypts() -> None:
    cipher = TokenCipherService(secret="super-secret-key")

    encrypted = cipher.encrypt("sensitive-token")

    assert "sensitive-token" not in encrypted
    assert cipher.decrypt(encrypted) == "sensitive-token"


def test_token_cipher_rejects_bad_ciphertext() -> None:
    cipher = TokenCipherService(secret="another-secret")

    with pytest.raises(ValueError):
        cipher.decrypt("not-valid")


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")


def test_token_cipher_cannot_read_tokens_sealed_with_a_rotated_secret() -> None:
    sealed = TokenCipherService(secret="old-discord-secret").encrypt("refresh-token")

    with pytest.raises(ValueError):
        TokenCipherService(secret="new-discord-secret").decrypt(sealed)


def test_fernet_key_derivation_is_stable_per_secret() -> None:
    assert derive_fernet_key("s3cret") == derive_fernet_key("s3cret")
    assert derive_fernet_key("s3cret") != derive_fernet_key("other")
    assert len(base64.urlsafe_b64decode(derive_fernet_key("s3cret"))) == 32
