from __future__ import annotations

from backend.app.core.security import (
    BCRYPT_MAX_BYTES,
    hash_password,
    password_fits_bcrypt,
    verify_password,
)


def test_hash_and_verify_roundtrip() -> None:
    hashed = hash_password("senha123", rounds=4)
    assert hashed != "senha123"
    assert hashed.startswith("$2")
    assert verify_password("senha123", hashed)
    assert not verify_password("senha124", hashed)


def test_hash_is_salted() -> None:
    assert hash_password("senha123", rounds=4) != hash_password("senha123", rounds=4)


def test_verify_rejects_non_bcrypt_values() -> None:
    assert not verify_password("senha123", "plain-text")


def test_password_length_limit_counts_bytes() -> None:
    assert password_fits_bcrypt("a" * BCRYPT_MAX_BYTES)
    assert not password_fits_bcrypt("a" * (BCRYPT_MAX_BYTES + 1))
    assert not password_fits_bcrypt("ã" * 37)
    assert not verify_password("a" * (BCRYPT_MAX_BYTES + 1), hash_password("abcdef", rounds=4))
