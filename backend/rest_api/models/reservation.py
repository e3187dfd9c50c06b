"""
Reservation Model: a user's booking of an area for a time range.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import PaymentMethod, ReservationRules, ReservationStatus

from .base import AuditMixin, Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from .area import Area
    from .user import User


class Reservation(AuditMixin, Base):
    """
    Area reservation.

    Reservations in ReservationStatus.BLOCKING occupy the area for
    [start_time, end_time); two blocking reservations of the same area
    never overlap.
    """

    __tablename__ = "reservation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id"), nullable=False, index=True
    )
    area_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("area.id"), nullable=False
    )
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    total_price: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReservationStatus.PENDING
    )
    guest_count: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))
    payment_method_simulated: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentMethod.CARD
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    cancelled_by: Mapped[Optional[str]] = mapped_column(String(20))

    user: Mapped["User"] = relationship()
    area: Mapped["Area"] = relationship()

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="chk_reservation_time_range"),
        CheckConstraint("guest_count >= 1", name="chk_reservation_guest_count"),
        Index("ix_reservation_area_status", "area_id", "status"),
        Index("ix_reservation_time_range", "start_time", "end_time"),
        Index("ix_reservation_status_end", "status", "end_time"),
    )

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600

    @property
    def is_expired(self) -> bool:
        """Pending reservation whose time range has already passed."""
        return self.status == ReservationStatus.PENDING and utcnow() > self.end_time

    @staticmethod
    def calculate_price(start_time: datetime, end_time: datetime) -> float:
        """
        Base price covers the first hour; each extra hour or fraction of an
        hour adds EXTRA_HOUR_PRICE.

        Raises:
            ValueError: If the range is empty or inverted.
        """
        hours = (end_time - start_time).total_seconds() / 3600
        if hours <= 0:
            raise ValueError("Rango de tiempo inválido")
        if hours <= 1:
            return ReservationRules.BASE_PRICE
        extra_hours = math.ceil(hours - 1)
        return round(ReservationRules.BASE_PRICE + extra_hours * ReservationRules.EXTRA_HOUR_PRICE, 2)
