"""
Password hashing utilities using bcrypt.

Only bcrypt hashes ($2a$, $2b$, $2y$) are accepted; users created through
Google sign-in have no password hash at all.
"""

import bcrypt

from shared.config.constants import Limits
from shared.config.logging import get_logger

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Example:
        hashed = hash_password("secreto123")
        # Returns something like: $2b$12$...
    """
    encoded = password.encode("utf-8")
    if len(encoded) > Limits.MAX_PASSWORD_BYTES:
        raise ValueError(f"Password longer than {Limits.MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a password against its hash.

    Returns False for accounts without a password (Google users), for
    anything that is not a bcrypt hash and for passwords bcrypt cannot take.
    """
    if not hashed_password:
        return False

    if not hashed_password.startswith(("$2a$", "$2b$", "$2y$")):
        logger.warning("SECURITY: non-bcrypt password hash detected")
        return False

    encoded = plain_password.encode("utf-8")
    if len(encoded) > Limits.MAX_PASSWORD_BYTES:
        return False

    return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))
