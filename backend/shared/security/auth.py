"""
Authentication utilities.
Handles JWT session tokens carried in an HttpOnly cookie (or Bearer header).

Session tokens include a "jti" (unique token ID) so individual sessions can
be told apart in logs.
"""

from __future__ import annotations

import hashlib
import time
import uuid
from typing import Any

import jwt
from fastapi import HTTPException, Request, Response, status

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.logging import get_logger

logger = get_logger(__name__)


def _hash_jti(jti: str) -> str:
    """Hash JTI for logging to avoid exposing token identifiers."""
    return hashlib.sha256(jti.encode()).hexdigest()[:8]


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
) -> str:
    """
    Sign a session JWT with the given payload.

    Args:
        payload: Claims to include in the token (sub, email, role).
        ttl_seconds: Token lifetime in seconds. Defaults to the session expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_session_expire_hours * 60 * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def sign_session_token(user_id: int, email: str, role: str) -> str:
    """Create the session token issued after a successful login."""
    return sign_jwt({"sub": str(user_id), "email": email, "role": role})


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Returns:
        Decoded token claims.

    Raises:
        HTTPException: If token is invalid, expired or malformed.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expirado",
        )
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message to the client
        logger.warning("JWT validation failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
        )

    if "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido: falta el sujeto",
        )

    try:
        int(payload["sub"])
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido: sujeto malformado",
        )

    return payload


def get_bearer_token(authorization: str | None) -> str | None:
    """
    Extract bearer token from an Authorization header value.

    Returns None when the header is missing or uses another scheme.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def extract_token(request: Request) -> str | None:
    """
    Read the session token from the auth cookie, falling back to
    an Authorization: Bearer header.
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    return get_bearer_token(request.headers.get("Authorization"))


# =============================================================================
# Session cookie
# =============================================================================


def set_auth_cookie(response: Response, token: str) -> None:
    """Attach the session token as an HttpOnly cookie."""
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_session_expire_hours * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        domain=settings.cookie_domain or None,
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    """Remove the session cookie and forbid caching of the response."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        domain=settings.cookie_domain or None,
        path="/",
    )
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"


def describe_token(payload: dict[str, Any]) -> dict[str, Any]:
    """Safe log context for a decoded token."""
    jti = payload.get("jti")
    return {
        "user_id": payload.get("sub"),
        "jti_hash": _hash_jti(jti) if jti else None,
    }
