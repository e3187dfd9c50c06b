"""
Auth Service - password logins, client registration and account lookups.

Session tokens and cookies are handled by the router; this service decides
who may log in and records the outcome.

Usage:
    from rest_api.services.domain import AuthService

    result = AuthService(db).login(body, admin_only=True, ip_address=ip)
    if result.requires_2fa:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import ContactMessage, Order, Product, Reservation, Review, User, utcnow
from rest_api.repositories import OrderRepository, UserRepository
from rest_api.services.base_service import BaseService
from shared.config.constants import ContactStatus, OrderStatus, Roles
from shared.config.logging import audit_auth_event, auth_logger as logger
from shared.config.settings import settings
from shared.security.password import hash_password, verify_password
from shared.utils.exceptions import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from shared.utils.schemas import ClientRegisterRequest, LoginRequest, UserOutput


@dataclass
class LoginResult:
    """Outcome of a password check."""

    user: User
    requires_2fa: bool = False


class AuthService(BaseService[User]):
    """Service for logins, registration and user lookups."""

    def __init__(self, db: Session):
        super().__init__(db, User, UserRepository(db))

    @property
    def users(self) -> UserRepository:
        return self._repo

    # =========================================================================
    # Login
    # =========================================================================

    def login(
        self,
        body: LoginRequest,
        *,
        admin_only: bool = False,
        ip_address: str | None = None,
    ) -> LoginResult:
        """
        Check credentials.

        Accounts with two-factor enabled get a short window to complete the
        TOTP step instead of a session.

        Raises:
            AuthenticationError: Unknown email or wrong password.
            PermissionDeniedError: Not an admin (admin login) or inactive account.
        """
        event = "ADMIN_LOGIN" if admin_only else "CLIENT_LOGIN"
        user = self.users.find_by_email(body.email)

        if user is None or not verify_password(body.password, user.password_hash):
            audit_auth_event(
                event,
                user_id=user.id if user else None,
                email=body.email,
                success=False,
                reason="invalid_credentials",
                ip_address=ip_address,
            )
            raise AuthenticationError("Email o contraseña inválidos")

        if admin_only and not user.is_admin:
            audit_auth_event(event, user_id=user.id, success=False, reason="not_admin", ip_address=ip_address)
            raise PermissionDeniedError("Acceso denegado. Se requieren credenciales de administrador")

        if not user.is_active:
            audit_auth_event(event, user_id=user.id, success=False, reason="inactive", ip_address=ip_address)
            raise PermissionDeniedError("La cuenta está inactiva. Contacta a soporte")

        if user.two_factor_enabled:
            user.two_factor_pending_until = utcnow() + timedelta(
                minutes=settings.two_factor_login_window_minutes
            )
            self._commit("iniciar sesión", user)
            audit_auth_event(event, user_id=user.id, success=True, reason="2fa_required", ip_address=ip_address)
            return LoginResult(user=user, requires_2fa=True)

        self.mark_logged_in(user)
        audit_auth_event(event, user_id=user.id, success=True, ip_address=ip_address)
        return LoginResult(user=user)

    def login_with_google(self, profile: dict[str, Any]) -> LoginResult:
        """
        Sign a client in from a Google OpenID profile.

        The account is found by Google id first, then by email (linking the
        Google id to a password account); otherwise a client is created.

        Raises:
            ValidationError: The profile carries no email.
            PermissionDeniedError: The email belongs to an admin, or the account is inactive.
        """
        google_id = str(profile.get("sub") or "")
        email = (profile.get("email") or "").strip().lower()
        if not google_id or not email:
            audit_auth_event("GOOGLE_LOGIN", success=False, reason="missing_email")
            raise ValidationError("No se pudo obtener el email de Google")

        user = self.users.find_by_google_id(google_id)
        if user is None:
            user = self.users.find_by_email(email)
            if user is not None:
                if user.is_admin:
                    audit_auth_event("GOOGLE_LOGIN", user_id=user.id, success=False, reason="admin")
                    raise PermissionDeniedError(
                        "Los administradores no pueden usar Google OAuth. Use credenciales de administrador."
                    )
                user.google_id = google_id
                if profile.get("picture") and not user.profile_picture:
                    user.profile_picture = profile["picture"]
                logger.info("Google account linked", user_id=user.id)
            else:
                user = self._create_google_client(google_id, email, profile)

        if not user.is_active:
            audit_auth_event("GOOGLE_LOGIN", user_id=user.id, success=False, reason="inactive")
            raise PermissionDeniedError("La cuenta está inactiva. Contacta a soporte")

        if user.two_factor_enabled:
            user.two_factor_pending_until = utcnow() + timedelta(
                minutes=settings.two_factor_login_window_minutes
            )
            self._commit("iniciar sesión con Google", user)
            audit_auth_event("GOOGLE_LOGIN", user_id=user.id, success=True, reason="2fa_required")
            return LoginResult(user=user, requires_2fa=True)

        self.mark_logged_in(user)
        audit_auth_event("GOOGLE_LOGIN", user_id=user.id, success=True)
        return LoginResult(user=user)

    def _create_google_client(self, google_id: str, email: str, profile: dict[str, Any]) -> User:
        name = (profile.get("name") or "").split()
        user = User(
            first_name=profile.get("given_name") or (name[0] if name else "Usuario"),
            last_name=profile.get("family_name") or (" ".join(name[1:]) or "Google"),
            email=email,
            google_id=google_id,
            role=Roles.CLIENT,
            profile_picture=profile.get("picture"),
        )
        self._db.add(user)
        self._commit("registrar cliente de Google", user)

        audit_auth_event("CLIENT_REGISTER", user_id=user.id, email=email, success=True, reason="google")
        logger.info("Client registered through Google", user_id=user.id)
        return user

    def mark_logged_in(self, user: User) -> None:
        user.last_login = utcnow()
        user.two_factor_pending_until = None
        self._commit("iniciar sesión", user)

    # =========================================================================
    # Registration
    # =========================================================================

    def register_client(self, body: ClientRegisterRequest) -> User:
        """
        Raises:
            ValidationError: The email is already registered.
        """
        if self.users.find_by_email(body.email):
            raise ValidationError("Ya existe una cuenta con este email")

        user = User(
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            password_hash=hash_password(body.password),
            phone=body.phone,
            role=Roles.CLIENT,
            last_login=utcnow(),
        )
        self._db.add(user)
        self._commit("registrar cliente", user)

        audit_auth_event("CLIENT_REGISTER", user_id=user.id, email=user.email, success=True)
        logger.info("Client registered", user_id=user.id)
        return user

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_user(self, user_id: int, requester: User) -> UserOutput:
        """Raises ForbiddenError unless the requester is the user or an admin."""
        if requester.id != user_id and not requester.is_admin:
            raise ForbiddenError("ver este usuario", user_id=requester.id)
        user = self.users.find_by_id(user_id, include_deleted=True)
        if user is None:
            raise NotFoundError("Usuario", user_id)
        return UserOutput.model_validate(user)

    def dashboard_stats(self) -> dict[str, Any]:
        """Headline counters for the admin dashboard."""

        def count(query) -> int:
            return self._db.scalar(query) or 0

        return {
            "totalClients": count(select(func.count(User.id)).where(User.role == Roles.CLIENT)),
            "totalProducts": count(select(func.count(Product.id)).where(Product.is_active.is_(True))),
            "totalOrders": count(select(func.count(Order.id))),
            "pendingOrders": count(
                select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING)
            ),
            "totalReservations": count(select(func.count(Reservation.id))),
            "pendingReviews": count(
                select(func.count(Review.id)).where(
                    Review.is_approved.is_(False), Review.is_visible.is_(True)
                )
            ),
            "unreadMessages": count(
                select(func.count(ContactMessage.id)).where(
                    ContactMessage.status == ContactStatus.NEW,
                    ContactMessage.is_active.is_(True),
                )
            ),
            "totalRevenue": OrderRepository(self._db).paid_revenue(),
        }
