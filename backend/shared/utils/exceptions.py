"""
Centralized HTTP exceptions for consistent error handling.

Every exception logs itself and is rendered by the API error handlers as
{"success": false, "message": detail, "data": data}.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Producto", product_id)
    raise ForbiddenError("cancelar esta reserva")
    raise ValidationError("La cantidad debe ser al menos 1")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    `data` is an optional JSON-serializable payload sent alongside the
    message (e.g. the reservations that caused a conflict).
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        data: Any = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.data = data


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Producto", 123)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} con ID {entity_id} no encontrado"
        else:
            detail = f"{entity} no encontrado"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 401 / 403 Errors
# =============================================================================


class AuthenticationError(AppException):
    """Missing or invalid credentials (401)."""

    def __init__(self, detail: str = "Autenticación requerida", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="info",
            **log_context,
        )


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("ver esta orden")
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"No autorizado para {action}"
        else:
            detail = "Acceso denegado"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class PermissionDeniedError(AppException):
    """403 with a caller-provided message (e.g. review eligibility)."""

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("El precio debe ser positivo")
        raise ValidationError("Cantidad inválida", field="quantity", value=-1)
    """

    def __init__(self, detail: str, data: Any = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            data=data,
            **log_context,
        )


class InsufficientStockError(ValidationError):
    """Not enough stock to fulfil a quantity."""

    def __init__(self, product_name: str, available: int, **log_context: Any):
        super().__init__(
            f"Stock insuficiente para {product_name}. Disponible: {available}",
            data={"availableStock": available},
            available=available,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("El área ya está reservada en ese horario", data=conflicts)
    """

    def __init__(self, detail: str, data: Any = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            data=data,
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("No se pudo generar el código QR")
    """

    def __init__(self, detail: str = "Error interno del servidor", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Error de base de datos durante {operation}. Por favor intente de nuevo."
        super().__init__(detail, operation=operation, **log_context)


class ExternalServiceError(AppException):
    """
    Image hosting or another upstream service failed.

    503 when the service is not configured or reachable at all, 502 when it
    answered with an error.
    """

    def __init__(self, service: str, is_unavailable: bool = False, **log_context: Any):
        if is_unavailable:
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            detail = f"Servicio {service} temporalmente no disponible"
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
            detail = f"Error al comunicarse con {service}"

        super().__init__(
            status_code=status_code,
            detail=detail,
            log_level="error",
            service=service,
            **log_context,
        )
