"""
Authentication router.
Handles admin and client login/logout, client registration, Google sign-in
for clients and session checks.

The session token travels in an HttpOnly cookie; accounts with two-factor
authentication get no cookie from the password step and finish the login
at /api/auth/2fa/validate.
"""

import asyncio
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from rest_api.models import User
from rest_api.routers._common import current_user, ok, require_admin
from rest_api.services.domain import AuthService, LoginResult
from shared.config.logging import auth_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import clear_auth_cookie, set_auth_cookie, sign_session_token
from shared.security.oauth import OAuthError, oauth
from shared.security.rate_limit import LOGIN_RATE_LIMIT, limiter
from shared.utils.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    PermissionDeniedError,
    ValidationError,
)
from shared.utils.schemas import ClientRegisterRequest, LoginRequest, UserOutput, UserSummary


router = APIRouter(prefix="/api/auth", tags=["auth"])


def start_session(response: Response, user: User) -> None:
    """Issue the session cookie for a user who passed every login step."""
    set_auth_cookie(response, sign_session_token(user.id, user.email, user.role))


def _login_response(response: Response, result: LoginResult) -> dict:
    if result.requires_2fa:
        return ok(
            {"requires2FA": True, "tempUserId": result.user.id},
            message="Se requiere verificación de dos factores",
        )
    start_session(response, result.user)
    return ok(UserSummary.model_validate(result.user), message="Inicio de sesión exitoso")


# =============================================================================
# Admin
# =============================================================================


@router.post("/admin/login")
@limiter.limit(LOGIN_RATE_LIMIT)
def admin_login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Password login restricted to administrators."""
    result = AuthService(db).login(body, admin_only=True, ip_address=get_remote_address(request))
    return _login_response(response, result)


@router.post("/admin/logout")
def admin_logout(response: Response, user: User = Depends(current_user)) -> dict:
    clear_auth_cookie(response)
    logger.info("Admin logged out", user_id=user.id)
    return ok(message="Sesión cerrada exitosamente")


@router.get("/admin/verify")
def admin_verify(admin: User = Depends(require_admin)) -> dict:
    return ok(UserOutput.model_validate(admin))


@router.get("/admin/dashboard-stats")
def dashboard_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict:
    return ok(AuthService(db).dashboard_stats())


# =============================================================================
# Client
# =============================================================================


@router.post("/client/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(LOGIN_RATE_LIMIT)
def client_register(
    request: Request,
    response: Response,
    body: ClientRegisterRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Create a client account and start its session."""
    user = AuthService(db).register_client(body)
    start_session(response, user)
    return ok(UserSummary.model_validate(user), message="Registro exitoso")


@router.post("/client/login")
@limiter.limit(LOGIN_RATE_LIMIT)
def client_login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    result = AuthService(db).login(body, ip_address=get_remote_address(request))
    return _login_response(response, result)


@router.post("/client/logout")
def client_logout(response: Response, user: User = Depends(current_user)) -> dict:
    clear_auth_cookie(response)
    logger.info("Client logged out", user_id=user.id)
    return ok(message="Sesión cerrada exitosamente")


@router.get("/client/verify")
def client_verify(user: User = Depends(current_user)) -> dict:
    return ok(UserOutput.model_validate(user))


# =============================================================================
# Users
# =============================================================================


@router.get("/users/{user_id}")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> dict:
    """A user's profile; only the user themselves or an admin may read it."""
    return ok(AuthService(db).get_user(user_id, user))


# =============================================================================
# Google OAuth (clients only)
# =============================================================================

GOOGLE_FAILURE_PATH = "/api/auth/google/failure"


def _google_failure() -> RedirectResponse:
    return RedirectResponse(GOOGLE_FAILURE_PATH, status_code=status.HTTP_302_FOUND)


@router.get("/google")
async def google_login(request: Request) -> Response:
    """Send the browser to Google's account chooser."""
    if not settings.google_oauth_configured:
        raise ExternalServiceError("de autenticación con Google", is_unavailable=True)
    redirect_uri = settings.google_callback_url or str(request.url_for("google_callback"))
    return await oauth.google.authorize_redirect(request, redirect_uri, prompt="select_account")


@router.get("/google/callback")
async def google_callback(request: Request, db: Session = Depends(get_db)) -> RedirectResponse:
    """
    Finish a Google login and go back to the frontend.

    A client with 2FA enabled gets no cookie; the frontend receives the
    pending login in the query string and completes it at /2fa/validate.
    """
    try:
        token = await oauth.google.authorize_access_token(request)
        profile = token.get("userinfo") or await oauth.google.userinfo(token=token)
    except OAuthError as exc:
        logger.warning("Google OAuth callback rejected", error=exc.error)
        return _google_failure()

    try:
        result = await asyncio.to_thread(AuthService(db).login_with_google, dict(profile))
    except (PermissionDeniedError, ValidationError):
        return _google_failure()

    frontend = settings.frontend_url.rstrip("/")
    if result.requires_2fa:
        query = urlencode({"requires2FA": "true", "tempUserId": result.user.id})
        return RedirectResponse(f"{frontend}/login?{query}", status_code=status.HTTP_302_FOUND)

    response = RedirectResponse(frontend, status_code=status.HTTP_302_FOUND)
    start_session(response, result.user)
    return response


@router.get("/google/failure")
def google_failure() -> dict:
    raise AuthenticationError("Error en la autenticación con Google")
