"""
Shared Pydantic schemas used across the application.

API payloads use camelCase keys; models accept both camelCase and
snake_case on input and are dumped with by_alias=True on output.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from shared.config.constants import Allergens, AllergySeverity, Limits
from shared.utils.validators import ensure_utc


class CamelModel(BaseModel):
    """Base for API schemas: camelCase aliases, ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Datetimes are always handled as aware UTC values
UTCDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["admin", "client"]
Severity = Literal["low", "medium", "high"]


# =============================================================================
# Authentication Schemas
# =============================================================================


class LoginRequest(CamelModel):
    """Login request body (admin and client)."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class ClientRegisterRequest(CamelModel):
    """Client self-registration."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=30)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > Limits.MAX_PASSWORD_BYTES:
            raise ValueError(
                f"La contraseña no puede superar {Limits.MAX_PASSWORD_BYTES} bytes"
            )
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El nombre no puede estar vacío")
        return v


class UserOutput(CamelModel):
    """User summary returned by auth and client endpoints (never secrets)."""

    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    admin_access: Optional[str] = None
    loyalty_points: int = 0
    last_login: Optional[datetime] = None
    profile_picture: Optional[str] = None
    two_factor_enabled: bool = False
    created_at: Optional[datetime] = None


class UserSummary(CamelModel):
    """Compact user reference embedded in other resources."""

    id: int
    first_name: str
    last_name: str
    email: str


class ClientOutput(UserOutput):
    """Client row for the admin clients list."""

    order_count: int = 0


class ClientStatusRequest(CamelModel):
    is_active: StrictBool


# =============================================================================
# Two-Factor Schemas
# =============================================================================


class TwoFactorTokenRequest(CamelModel):
    token: str = Field(min_length=1, max_length=10)


class TwoFactorCodeRequest(CamelModel):
    """TOTP token or backup code; at least one is required."""

    token: Optional[str] = Field(default=None, max_length=10)
    backup_code: Optional[str] = Field(default=None, max_length=20)

    @model_validator(mode="after")
    def require_code(self):
        if not self.token and not self.backup_code:
            raise ValueError("Se requiere un código de verificación o un código de respaldo")
        return self


class TwoFactorValidateRequest(TwoFactorCodeRequest):
    """Second step of a login for accounts with 2FA enabled."""

    temp_user_id: int


class TwoFactorStatusOutput(CamelModel):
    enabled: bool
    backup_codes_remaining: int


class TwoFactorSetupOutput(CamelModel):
    secret: str
    otpauth_url: str
    qr_code: str


# =============================================================================
# Allergy Schemas
# =============================================================================


class AllergyInput(CamelModel):
    allergen: str
    severity: str = AllergySeverity.MEDIUM

    @field_validator("allergen")
    @classmethod
    def known_allergen(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in Allergens.ALL:
            raise ValueError(f"Alérgeno inválido: {v}")
        return v

    @field_validator("severity")
    @classmethod
    def known_severity(cls, v: str) -> str:
        if v not in AllergySeverity.ALL:
            raise ValueError(f"Severidad inválida: {v}")
        return v


class AllergiesUpdateRequest(CamelModel):
    allergies: list[AllergyInput]

    @field_validator("allergies")
    @classmethod
    def unique_allergens(cls, v: list[AllergyInput]) -> list[AllergyInput]:
        seen: dict[str, AllergyInput] = {}
        for allergy in v:
            seen[allergy.allergen] = allergy
        return list(seen.values())


class AllergyOutput(CamelModel):
    allergen: str
    severity: Severity
    added_at: Optional[datetime] = None
