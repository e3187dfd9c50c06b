"""
Content Models: Location, Offer, ContactMessage, AboutUs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Float, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import ContactStatus, WEEKDAYS_ES

from .base import AuditMixin, Base, EmailColumn, UTCDateTime, utcnow

DEFAULT_OPENING_HOURS: dict[str, str] = {
    "monday": "09:00 - 22:00",
    "tuesday": "09:00 - 22:00",
    "wednesday": "09:00 - 22:00",
    "thursday": "09:00 - 22:00",
    "friday": "09:00 - 23:00",
    "saturday": "09:00 - 23:00",
    "sunday": "10:00 - 21:00",
}

DEFAULT_BADGE: dict[str, str] = {"text": "Oferta", "color": "red", "icon": "🔥"}


class Location(AuditMixin, Base):
    """Restaurant branch shown on the locations page."""

    __tablename__ = "location"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(EmailColumn)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    opening_hours: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=lambda: dict(DEFAULT_OPENING_HOURS)
    )
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(String(500))
    is_flagship: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="chk_location_latitude"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="chk_location_longitude"),
        Index("ix_location_city_active", "city", "is_active"),
    )

    @property
    def coordinates(self) -> dict[str, float]:
        return {"lat": self.latitude, "lng": self.longitude}


class Offer(AuditMixin, Base):
    """
    Combo promotion.

    is_active is the offer's "active" flag; offers are removed with a hard delete.
    """

    __tablename__ = "offer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    items: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    original_price: Mapped[float] = mapped_column(Float, nullable=False)
    offer_price: Mapped[float] = mapped_column(Float, nullable=False)
    discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    valid_days: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    badge: Mapped[dict] = mapped_column(JSON, nullable=False, default=lambda: dict(DEFAULT_BADGE))
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("original_price >= 0", name="chk_offer_original_price"),
        CheckConstraint("offer_price >= 0", name="chk_offer_price"),
    )

    @staticmethod
    def discount_percent(original_price: float, offer_price: float) -> int:
        """Whole percentage saved by the offer price."""
        if not original_price:
            return 0
        return round((original_price - offer_price) / original_price * 100)

    @property
    def is_currently_valid(self) -> bool:
        """Active, inside its date window and valid on today's weekday."""
        now = utcnow()
        today = WEEKDAYS_ES[now.weekday()]
        return (
            self.is_active
            and self.start_date <= now <= self.end_date
            and today in (self.valid_days or [])
        )


class ContactMessage(AuditMixin, Base):
    """Message sent through the public contact form."""

    __tablename__ = "contact_message"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(EmailColumn, nullable=False)
    company: Mapped[Optional[str]] = mapped_column(String(100))
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ContactStatus.NEW, index=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(String(500))
    responded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    responded_by: Mapped[Optional[int]] = mapped_column(Integer)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    user_agent: Mapped[Optional[str]] = mapped_column(String(512))

    __table_args__ = (
        Index("ix_contact_status_created", "status", "created_at"),
    )

    @property
    def is_unread(self) -> bool:
        return self.status == ContactStatus.NEW


class AboutUs(AuditMixin, Base):
    """
    Singleton document behind the "Quiénes somos" page.

    Each section is stored as JSON; sections are replaced as a whole.
    """

    __tablename__ = "about_us"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hero: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    mission: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    timeline: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    values: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    team: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    gallery: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    cta: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    last_updated_by: Mapped[Optional[str]] = mapped_column(String(255))
