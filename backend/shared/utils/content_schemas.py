"""
Pydantic schemas for site content: locations, offers, contact messages,
About Us sections and reviews.
"""

import json
from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BeforeValidator, EmailStr, Field, field_validator, model_validator

from shared.config.constants import BadgeColor, WEEKDAYS_ES
from shared.utils.schemas import CamelModel, UserSummary, UTCDatetime
from shared.utils.validators import validate_image_url, validate_phone

ContactStatusLiteral = Literal["new", "read", "responded", "archived"]
ReviewTypeLiteral = Literal["product", "order", "reservation"]


def parse_json_field(value: Any) -> Any:
    """Decode JSON-encoded form values (objects and arrays); pass others through."""
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if stripped[0] in "[{":
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                raise ValueError("JSON inválido")
    return value


def _empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_empty_to_none)]


# =============================================================================
# Location Schemas
# =============================================================================


class OpeningHours(CamelModel):
    monday: str = "09:00 - 22:00"
    tuesday: str = "09:00 - 22:00"
    wednesday: str = "09:00 - 22:00"
    thursday: str = "09:00 - 22:00"
    friday: str = "09:00 - 23:00"
    saturday: str = "09:00 - 23:00"
    sunday: str = "10:00 - 21:00"


class LocationCreate(CamelModel):
    """Location input (multipart form: lat/lng flat, openingHours JSON-encoded)."""

    name: str = Field(min_length=3, max_length=100)
    address: str = Field(min_length=10, max_length=200)
    city: str = Field(min_length=2, max_length=50)
    phone: str = Field(max_length=30)
    email: OptionalEmail = None
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    opening_hours: Annotated[Optional[OpeningHours], BeforeValidator(parse_json_field)] = None
    image_url: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True
    is_flagship: bool = False

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class LocationUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    address: Optional[str] = Field(default=None, min_length=10, max_length=200)
    city: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=30)
    email: OptionalEmail = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    opening_hours: Annotated[Optional[OpeningHours], BeforeValidator(parse_json_field)] = None
    image_url: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None
    is_flagship: Optional[bool] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validate_phone(v)

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class Coordinates(CamelModel):
    lat: float
    lng: float


class LocationOutput(CamelModel):
    id: int
    name: str
    address: str
    city: str
    phone: str
    email: Optional[str] = None
    coordinates: Coordinates
    opening_hours: dict[str, str]
    image_url: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    is_flagship: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Offer Schemas
# =============================================================================


class OfferItem(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    quantity: int = Field(ge=1)


class OfferBadge(CamelModel):
    text: str = Field(default="Oferta", max_length=30)
    color: str = "red"
    icon: str = Field(default="🔥", max_length=10)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str) -> str:
        if v not in BadgeColor.ALL:
            raise ValueError(f"Color inválido: {v}")
        return v


def _validate_days(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return None
    for day in v:
        if day not in WEEKDAYS_ES:
            raise ValueError(f"Día inválido: {day}")
    return v


class OfferCreate(CamelModel):
    """Offer input; items, validDays and badge arrive JSON-encoded in multipart forms."""

    name: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    items: Annotated[list[OfferItem], BeforeValidator(parse_json_field)] = Field(default_factory=list)
    original_price: float = Field(ge=0)
    offer_price: float = Field(ge=0)
    valid_days: Annotated[list[str], BeforeValidator(parse_json_field)] = Field(
        default_factory=lambda: list(WEEKDAYS_ES)
    )
    start_date: UTCDatetime
    end_date: UTCDatetime
    badge: Annotated[Optional[OfferBadge], BeforeValidator(parse_json_field)] = None
    image_url: Optional[str] = None
    featured: bool = False
    active: bool = True

    @field_validator("valid_days")
    @classmethod
    def check_days(cls, v: list[str]) -> list[str]:
        return _validate_days(v)

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)

    @model_validator(mode="after")
    def check_prices_and_dates(self):
        if self.offer_price >= self.original_price:
            raise ValueError("El precio de oferta debe ser menor al precio original")
        if self.end_date.date() < self.start_date.date():
            raise ValueError("La fecha de fin debe ser posterior o igual a la fecha de inicio")
        return self


class OfferUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    items: Annotated[Optional[list[OfferItem]], BeforeValidator(parse_json_field)] = None
    original_price: Optional[float] = Field(default=None, ge=0)
    offer_price: Optional[float] = Field(default=None, ge=0)
    valid_days: Annotated[Optional[list[str]], BeforeValidator(parse_json_field)] = None
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    badge: Annotated[Optional[OfferBadge], BeforeValidator(parse_json_field)] = None
    image_url: Optional[str] = None
    featured: Optional[bool] = None
    active: Optional[bool] = None

    @field_validator("valid_days")
    @classmethod
    def check_days(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _validate_days(v)

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class OfferOutput(CamelModel):
    id: int
    name: str
    description: str
    items: list[dict[str, Any]]
    original_price: float
    offer_price: float
    discount: int
    valid_days: list[str]
    start_date: datetime
    end_date: datetime
    badge: dict[str, Any]
    image_url: Optional[str] = None
    featured: bool
    active: bool = Field(validation_alias="is_active")
    usage_count: int
    is_currently_valid: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Contact Schemas
# =============================================================================


class ContactCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    company: Optional[str] = Field(default=None, max_length=100)
    message: str = Field(min_length=10, max_length=1000)

    @field_validator("name", "message")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class ContactStatusUpdate(CamelModel):
    status: ContactStatusLiteral
    admin_notes: Optional[str] = Field(default=None, max_length=500)


class ContactOutput(CamelModel):
    id: int
    name: str
    email: str
    company: Optional[str] = None
    message: str
    status: ContactStatusLiteral
    is_unread: bool
    admin_notes: Optional[str] = None
    responded_at: Optional[datetime] = None
    responded_by: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# About Us Schemas
# =============================================================================


class HeroStat(CamelModel):
    value: str = Field(max_length=20)
    label: str = Field(max_length=60)


class HeroSection(CamelModel):
    title: str = Field(max_length=150)
    subtitle: str = Field(default="", max_length=300)
    stats: list[HeroStat] = Field(default_factory=list)


class MissionHighlight(CamelModel):
    text: str = Field(max_length=200)


class MissionSection(CamelModel):
    title: str = Field(max_length=150)
    description: str = Field(default="", max_length=1000)
    image: str = ""
    highlights: list[MissionHighlight] = Field(default_factory=list)


class TimelineEntry(CamelModel):
    year: str = Field(min_length=1, max_length=10)
    title: str = Field(min_length=1, max_length=150)
    description: str = Field(min_length=1, max_length=500)
    image: str = ""


class ValueEntry(CamelModel):
    icon: str = Field(default="❤️", max_length=20)
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=300)


class TeamMember(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    position: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=300)
    specialty: str = Field(default="", max_length=100)
    image: str = ""


class GalleryImage(CamelModel):
    image: str = Field(min_length=1)
    caption: str = Field(default="", max_length=200)


class CtaSection(CamelModel):
    title: str = Field(max_length=150)
    description: str = Field(default="", max_length=300)


class HeroUpdate(CamelModel):
    """Only the given (non-empty) fields replace the current ones."""

    title: Optional[str] = Field(default=None, max_length=150)
    subtitle: Optional[str] = Field(default=None, max_length=300)
    stats: Optional[list[HeroStat]] = None


class MissionUpdate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=150)
    description: Optional[str] = Field(default=None, max_length=1000)
    highlights: Optional[list[MissionHighlight]] = None


class CtaUpdate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=150)
    description: Optional[str] = Field(default=None, max_length=300)


class TimelineUpdate(CamelModel):
    timeline: list[TimelineEntry]


class ValuesUpdate(CamelModel):
    values: list[ValueEntry]


class TeamUpdate(CamelModel):
    team: list[TeamMember]


class GalleryUpdate(CamelModel):
    gallery: list[GalleryImage]


class AboutUsUpdate(CamelModel):
    """Full-document update; omitted sections are left untouched."""

    hero: Optional[HeroSection] = None
    mission: Optional[MissionSection] = None
    timeline: Optional[list[TimelineEntry]] = None
    values: Optional[list[ValueEntry]] = None
    team: Optional[list[TeamMember]] = None
    gallery: Optional[list[GalleryImage]] = None
    cta: Optional[CtaSection] = None


class AboutUsOutput(CamelModel):
    id: int
    hero: dict[str, Any]
    mission: dict[str, Any]
    timeline: list[dict[str, Any]]
    values: list[dict[str, Any]]
    team: list[dict[str, Any]]
    gallery: list[dict[str, Any]]
    cta: dict[str, Any]
    is_active: bool
    last_updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Review Schemas
# =============================================================================


class ReviewCreate(CamelModel):
    type: ReviewTypeLiteral
    target_id: int
    stars: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: str = Field(min_length=10, max_length=1000)
    # Order reviews may carry the order number shown to the customer
    order_number: Optional[str] = Field(default=None, max_length=20)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("El comentario debe tener al menos 10 caracteres")
        return v


class ReviewUpdate(CamelModel):
    stars: Optional[int] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: Optional[str] = Field(default=None, min_length=10, max_length=1000)


class ReviewRespondRequest(CamelModel):
    response: str = Field(min_length=1, max_length=500)


class ReviewOutput(CamelModel):
    id: int
    user_id: int
    user: Optional[UserSummary] = None
    type: ReviewTypeLiteral
    target_id: int
    stars: int
    title: Optional[str] = None
    comment: str
    is_approved: bool
    is_visible: bool
    admin_response: Optional[str] = None
    responded_at: Optional[datetime] = None
    responded_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
