"""
Security module: Authentication, password hashing, two-factor helpers, rate limiting.
"""

from shared.security.auth import (
    sign_jwt,
    sign_session_token,
    verify_jwt,
    get_bearer_token,
    extract_token,
    set_auth_cookie,
    clear_auth_cookie,
)
from shared.security.password import hash_password, verify_password
from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    LOGIN_RATE_LIMIT,
)

__all__ = [
    # auth
    "sign_jwt",
    "sign_session_token",
    "verify_jwt",
    "get_bearer_token",
    "extract_token",
    "set_auth_cookie",
    "clear_auth_cookie",
    # password
    "hash_password",
    "verify_password",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
    "LOGIN_RATE_LIMIT",
]
