"""Password hashing and verification for member credentials."""

import bcrypt

from coop_members.core.config import settings
from coop_members.core.exceptions import DataIntegrityError

# Min/max lengths for registration input validation.
NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of the secret; longer secrets are refused, never truncated.
PASSWORD_MAX_BYTES = 72


def password_too_long(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > PASSWORD_MAX_BYTES


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Every call uses a fresh salt."""
    if password_too_long(plain_password):
        raise ValueError(f"password exceeds {PASSWORD_MAX_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Returns False on mismatch, including any password over PASSWORD_MAX_BYTES
    (no such password can have been stored). A hash that bcrypt cannot parse
    means the stored record is corrupt, so that raises DataIntegrityError
    instead of looking like a wrong password.
    """
    if password_too_long(plain_password):
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError) as e:
        raise DataIntegrityError("Stored password hash is malformed") from e


# Verified against when the email is unknown so both login failures cost one bcrypt check.
DUMMY_HASH: str = hash_password("coop-members-timing-dummy")
