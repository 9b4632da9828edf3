"""Password hashing and submission field validation.

Passwords are stored as BLAKE2b-256(password || salt) with a per-user
32-byte salt drawn from `secrets`.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from email_validator import EmailNotValidError, validate_email

from .errors import InputValidationError

SALT_SIZE = 32
HASH_SIZE = 32
MAX_GROUPS = 3


def generate_salt() -> bytes:
    return secrets.token_bytes(SALT_SIZE)


def hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.blake2b(password.encode() + salt, digest_size=HASH_SIZE).digest()


def verify_password(password: str, salt: bytes, stored_hash: bytes) -> bool:
    """Recompute the hash for a candidate password and compare in constant time."""
    return hmac.compare_digest(hash_password(password, salt), stored_hash)


def check_email(email: str) -> None:
    """Raise InputValidationError unless `email` parses as an address.

    Accepts bare addresses, the `Name <addr>` form, quoted local parts and
    single-label domains. No DNS lookups are made.
    """
    try:
        validate_email(
            email,
            check_deliverability=False,
            globally_deliverable=False,
            allow_quoted_local=True,
            allow_display_name=True,
        )
    except EmailNotValidError as e:
        raise InputValidationError(f"invalid email: {e}") from e


def normalize_groups(groups: list[str] | None) -> list[str]:
    """Drop empty group names and keep at most the first three."""
    if not groups:
        return []
    return [g for g in groups if g][:MAX_GROUPS]


__all__ = [
    "HASH_SIZE",
    "MAX_GROUPS",
    "SALT_SIZE",
    "check_email",
    "generate_salt",
    "hash_password",
    "normalize_groups",
    "verify_password",
]
