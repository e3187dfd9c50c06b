"""
Two-factor authentication router - /api/auth/2fa/*
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import current_user, ok
from rest_api.routers.auth.routes import start_session
from rest_api.services.domain import TwoFactorService
from shared.infrastructure.db import get_db
from shared.security.rate_limit import LOGIN_RATE_LIMIT, limiter
from shared.utils.schemas import (
    TwoFactorCodeRequest,
    TwoFactorTokenRequest,
    TwoFactorValidateRequest,
    UserSummary,
)


router = APIRouter(prefix="/api/auth/2fa", tags=["two-factor"])


@router.get("/status")
def two_factor_status(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    return ok(TwoFactorService(db).status(user))


@router.post("/setup")
def two_factor_setup(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Start enrollment: a new secret and the QR code to scan."""
    setup = TwoFactorService(db).setup(user)
    return ok(setup, message="Escanea el código QR con tu aplicación de autenticación")


@router.post("/verify")
def two_factor_verify(
    body: TwoFactorTokenRequest,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """Confirm enrollment; the backup codes are returned only here."""
    codes = TwoFactorService(db).enable(user, body.token)
    return ok(
        {"backupCodes": codes},
        message="2FA habilitado exitosamente. Guarda tus códigos de respaldo en un lugar seguro.",
    )


@router.post("/disable")
def two_factor_disable(
    body: TwoFactorCodeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    TwoFactorService(db).disable(user, body.token, body.backup_code)
    return ok(message="2FA deshabilitado exitosamente")


@router.post("/validate")
@limiter.limit(LOGIN_RATE_LIMIT)
def two_factor_validate(
    request: Request,
    response: Response,
    body: TwoFactorValidateRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Second login step; starts the session."""
    user = TwoFactorService(db).validate_login(body.temp_user_id, body.token, body.backup_code)
    start_session(response, user)
    return ok(UserSummary.model_validate(user), message="Inicio de sesión exitoso")
