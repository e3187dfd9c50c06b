"""
Two-Factor Service - TOTP enrollment, verification and login step two.

Usage:
    from rest_api.services.domain import TwoFactorService

    service = TwoFactorService(db)
    setup = service.setup(user)
    codes = service.enable(user, "123456")
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import User, utcnow
from rest_api.repositories import UserRepository
from rest_api.services.base_service import BaseService
from shared.config.logging import audit_auth_event, get_logger
from shared.security import totp
from shared.utils.exceptions import InternalError, PermissionDeniedError, ValidationError
from shared.utils.schemas import TwoFactorSetupOutput, TwoFactorStatusOutput

logger = get_logger(__name__)


class TwoFactorService(BaseService[User]):
    """
    Service for TOTP two-factor authentication.

    Business rules:
    - The secret is stored encrypted; backup codes only as hashes
    - Backup codes are single-use
    - Login step two is only possible inside the window opened by a password check
    """

    def __init__(self, db: Session):
        super().__init__(db, User, UserRepository(db))

    def status(self, user: User) -> TwoFactorStatusOutput:
        return TwoFactorStatusOutput(
            enabled=user.two_factor_enabled,
            backup_codes_remaining=user.backup_codes_remaining if user.two_factor_enabled else 0,
        )

    def setup(self, user: User) -> TwoFactorSetupOutput:
        """
        Generate a pending secret and its QR code.

        Raises:
            ValidationError: 2FA is already enabled.
        """
        if user.two_factor_enabled:
            raise ValidationError(
                "2FA ya está habilitado. Desactívalo primero si quieres reconfigurarlo."
            )

        secret = totp.generate_secret()
        uri = totp.provisioning_uri(secret, user.email)
        user.two_factor_secret = totp.encrypt_secret(secret)
        self._commit("configurar 2FA", user)

        logger.info("2FA setup started", user_id=user.id)
        return TwoFactorSetupOutput(
            secret=secret,
            otpauth_url=uri,
            qr_code=totp.qr_code_data_url(uri),
        )

    def enable(self, user: User, token: str) -> list[str]:
        """
        Confirm the pending secret with a TOTP token and enable 2FA.

        Returns:
            The plain backup codes; they are never shown again.

        Raises:
            ValidationError: No pending setup or invalid token.
        """
        if not user.two_factor_secret:
            raise ValidationError("Configuración de 2FA no encontrada. Inicia el setup primero.")

        secret = self._secret(user)
        if not totp.verify_token(secret, token):
            audit_auth_event("2FA_ENABLE", user_id=user.id, success=False, reason="invalid_token")
            raise ValidationError("Código inválido. Verifica que sea correcto y no haya expirado.")

        codes = totp.generate_backup_codes()
        user.two_factor_backup_codes = [
            {"code": totp.hash_backup_code(code), "used": False, "usedAt": None} for code in codes
        ]
        user.two_factor_enabled = True
        self._commit("habilitar 2FA", user)

        audit_auth_event("2FA_ENABLED", user_id=user.id, success=True)
        return codes

    def disable(self, user: User, token: str | None, backup_code: str | None) -> None:
        """
        Raises:
            ValidationError: 2FA not enabled, or neither code is valid.
        """
        if not user.two_factor_enabled:
            raise ValidationError("2FA no está habilitado.")

        if not self._check_codes(user, token, backup_code):
            audit_auth_event("2FA_DISABLE", user_id=user.id, success=False, reason="invalid_code")
            raise ValidationError("Código inválido o código de respaldo ya utilizado.")

        user.two_factor_enabled = False
        user.two_factor_secret = None
        user.two_factor_backup_codes = []
        user.two_factor_pending_until = None
        self._commit("deshabilitar 2FA", user)

        audit_auth_event("2FA_DISABLED", user_id=user.id, success=True)

    def validate_login(self, user_id: int, token: str | None, backup_code: str | None) -> User:
        """
        Second step of a login; a matching backup code is consumed.

        Raises:
            ValidationError: No pending login for the user, or an invalid code.
            PermissionDeniedError: The account was deactivated after the password step.
        """
        user = self._repo.find_by_id(user_id, include_deleted=True)
        if user is None or not user.two_factor_enabled or not user.two_factor_secret:
            raise ValidationError("Sesión inválida.")
        if not user.is_active:
            user.two_factor_pending_until = None
            self._commit("cerrar login 2FA", user)
            audit_auth_event("2FA_LOGIN", user_id=user.id, success=False, reason="inactive")
            raise PermissionDeniedError("La cuenta está inactiva. Contacta a soporte")
        if user.two_factor_pending_until is None or user.two_factor_pending_until < utcnow():
            raise ValidationError("Sesión inválida.", user_id=user_id)

        if not self._check_codes(user, token, backup_code):
            audit_auth_event("2FA_LOGIN", user_id=user.id, success=False, reason="invalid_code")
            raise ValidationError("Código 2FA inválido.")

        user.last_login = utcnow()
        user.two_factor_pending_until = None
        self._commit("validar 2FA", user)

        audit_auth_event("2FA_LOGIN", user_id=user.id, success=True)
        return user

    # =========================================================================
    # Helpers
    # =========================================================================

    def _secret(self, user: User) -> str:
        try:
            return totp.decrypt_secret(user.two_factor_secret)
        except ValueError:
            logger.error("Stored 2FA secret cannot be decrypted", user_id=user.id)
            raise InternalError("Configuración 2FA inválida.")

    def _check_codes(self, user: User, token: str | None, backup_code: str | None) -> bool:
        """TOTP token first, then an unused backup code (marked used on match)."""
        if token and totp.verify_token(self._secret(user), token):
            return True
        if not backup_code:
            return False

        hashed = totp.hash_backup_code(backup_code)
        codes = [dict(code) for code in user.two_factor_backup_codes or []]
        for code in codes:
            if code.get("code") == hashed and not code.get("used"):
                code["used"] = True
                code["usedAt"] = utcnow().isoformat()
                # Reassign so the JSON column is flagged dirty
                user.two_factor_backup_codes = codes
                logger.info("Backup code consumed", user_id=user.id)
                return True
        return False
