"""
Authentication dependencies for routers.

Usage:
    @router.get("/my-orders")
    def my_orders(user: User = Depends(current_user)): ...

    @router.get("/admin/all")
    def all_reservations(admin: User = Depends(require_admin)): ...
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.repositories import UserRepository
from shared.config.logging import get_logger
from shared.infrastructure.db import get_db
from shared.security.auth import describe_token, extract_token, verify_jwt
from shared.utils.exceptions import PermissionDeniedError

logger = get_logger(__name__)


def _load_user(token: str, db: Session) -> User:
    payload = verify_jwt(token)
    user = UserRepository(db).find_by_id(int(payload["sub"]), include_deleted=True)
    if user is None:
        logger.warning("Token for a missing user", **describe_token(payload))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado",
        )
    return user


def current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Authenticated user from the session cookie or Bearer token.

    401 without a valid token or when the user no longer exists,
    403 when the account is inactive.
    """
    token = extract_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No autorizado. Inicia sesión para continuar",
        )
    user = _load_user(token, db)
    if not user.is_active:
        raise PermissionDeniedError("La cuenta está inactiva. Contacta a soporte", user_id=user.id)
    return user


def optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    """User behind a valid token, or None; never rejects the request."""
    token = extract_token(request)
    if not token:
        return None
    try:
        user = _load_user(token, db)
    except HTTPException:
        return None
    return user if user.is_active else None


def require_admin(user: User = Depends(current_user)) -> User:
    """Authenticated user with the admin role (403 otherwise)."""
    if not user.is_admin:
        raise PermissionDeniedError("Acceso denegado. Se requieren permisos de administrador", user_id=user.id)
    return user
