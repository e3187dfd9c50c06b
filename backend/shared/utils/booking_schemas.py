"""
Pydantic schemas for areas and reservations.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from shared.config.constants import PaymentMethod
from shared.utils.schemas import CamelModel, UserSummary, UTCDatetime
from shared.utils.shop_schemas import StringList
from shared.utils.validators import validate_image_url

ReservationStatusLiteral = Literal["pending", "paid", "cancelled", "expired"]
PaymentMethodLiteral = Literal["cash", "card", "transfer"]


def _validate_features(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return None
    features = [feature.strip() for feature in v]
    if not 1 <= len(features) <= 4:
        raise ValueError("Debe tener entre 1 y 4 características")
    for feature in features:
        if not 3 <= len(feature) <= 50:
            raise ValueError("Cada característica debe tener entre 3 y 50 caracteres")
    return features


# =============================================================================
# Area Schemas
# =============================================================================


class AreaCreate(CamelModel):
    """Area input (sent as multipart form fields with an optional image)."""

    name: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    min_capacity: int = Field(ge=1)
    max_capacity: int = Field(ge=1)
    features: StringList
    image_url: Optional[str] = None
    is_active: bool = True

    @field_validator("features")
    @classmethod
    def check_features(cls, v: list[str]) -> list[str]:
        return _validate_features(v)

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)

    @model_validator(mode="after")
    def check_capacity(self):
        if self.max_capacity < self.min_capacity:
            raise ValueError("La capacidad máxima debe ser mayor o igual a la mínima")
        return self


class AreaUpdate(CamelModel):
    """Partial update; the capacity range is checked against the stored area."""

    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=500)
    min_capacity: Optional[int] = Field(default=None, ge=1)
    max_capacity: Optional[int] = Field(default=None, ge=1)
    features: Optional[StringList] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("features")
    @classmethod
    def check_features(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _validate_features(v)

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class AreaOutput(CamelModel):
    id: int
    name: str
    description: str
    min_capacity: int
    max_capacity: int
    capacity_range: str
    features: list[str]
    image_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AreaSummary(CamelModel):
    id: int
    name: str
    min_capacity: int
    max_capacity: int
    image_url: Optional[str] = None


# =============================================================================
# Reservation Schemas
# =============================================================================


class ReservationCreate(CamelModel):
    area_id: int
    start_time: UTCDatetime
    end_time: UTCDatetime
    guest_count: int = Field(ge=1)
    notes: Optional[str] = Field(default=None, max_length=500)
    payment_method_simulated: PaymentMethodLiteral = PaymentMethod.CARD


class ConfirmPaymentRequest(CamelModel):
    payment_method: Optional[PaymentMethodLiteral] = None


class ReservationOutput(CamelModel):
    id: int
    user_id: int
    area_id: int
    area: Optional[AreaSummary] = None
    user: Optional[UserSummary] = None
    start_time: datetime
    end_time: datetime
    duration_hours: float
    total_price: float
    status: ReservationStatusLiteral
    is_expired: bool
    guest_count: int
    notes: Optional[str] = None
    payment_method_simulated: str
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    created_at: Optional[datetime] = None


class ReservedSlot(CamelModel):
    """Occupied interval returned by the availability endpoint."""

    id: int
    start_time: datetime
    end_time: datetime
    status: ReservationStatusLiteral
