from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of a secret; longer ones are rejected upstream.
BCRYPT_MAX_BYTES = 72


def password_fits_bcrypt(password: str) -> bool:
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str, rounds: int = 12) -> str:
    """Return an irreversible bcrypt hash suitable for the ``users.password`` column."""

    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not password_fits_bcrypt(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


__all__ = [
    "BCRYPT_MAX_BYTES",
    "hash_password",
    "password_fits_bcrypt",
    "verify_password",
]
