"""
Reservation Repository - Data access for area reservations.

Overlap rule: two reservations of the same area collide when both are in a
blocking status and start_a < end_b AND end_a > start_b (touching ranges
do not collide).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import joinedload

from rest_api.models import Reservation
from shared.config.constants import ReservationStatus
from .base import BaseRepository, RepositoryFilters


@dataclass
class ReservationFilters(RepositoryFilters):
    """Filters specific to reservations."""

    user_id: int | None = None
    area_id: int | None = None
    status: str | None = None
    start_from: datetime | None = None
    start_until: datetime | None = None
    upcoming: bool = False
    now: datetime | None = None


class ReservationRepository(BaseRepository[Reservation]):
    """
    Repository for Reservation entities.

    Guarantees eager loading of:
    - area
    - user
    """

    model = Reservation

    def _base_query(self) -> Select:
        return select(Reservation).options(
            joinedload(Reservation.area),
            joinedload(Reservation.user),
        )

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, ReservationFilters):
            return query

        if filters.user_id is not None:
            query = query.where(Reservation.user_id == filters.user_id)
        if filters.area_id is not None:
            query = query.where(Reservation.area_id == filters.area_id)
        if filters.status:
            query = query.where(Reservation.status == filters.status)
        if filters.start_from is not None:
            query = query.where(Reservation.start_time >= filters.start_from)
        if filters.start_until is not None:
            query = query.where(Reservation.start_time <= filters.start_until)
        if filters.upcoming and filters.now is not None:
            query = query.where(
                Reservation.start_time > filters.now,
                Reservation.status.in_(ReservationStatus.BLOCKING),
            )
        return query

    def find_overlapping(
        self,
        area_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_id: int | None = None,
    ) -> Sequence[Reservation]:
        """Blocking reservations of an area that intersect [start_time, end_time)."""
        query = select(Reservation).where(
            Reservation.area_id == area_id,
            Reservation.status.in_(ReservationStatus.BLOCKING),
            Reservation.is_active.is_(True),
            Reservation.start_time < end_time,
            Reservation.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.where(Reservation.id != exclude_id)
        return self._db.execute(query.order_by(Reservation.start_time)).scalars().all()

    def find_for_day(
        self,
        area_id: int,
        day_start: datetime,
        day_end: datetime,
    ) -> Sequence[Reservation]:
        """Blocking reservations of an area that touch the given day."""
        return self.find_overlapping(area_id, day_start, day_end)