"""
Content Repositories - Data access for locations, offers and contact messages.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, func, select

from rest_api.models import ContactMessage, Location, Offer
from shared.utils.validators import escape_like_pattern
from .base import BaseRepository, RepositoryFilters


@dataclass
class LocationFilters(RepositoryFilters):
    """Filters specific to locations."""

    city: str | None = None


class LocationRepository(BaseRepository[Location]):
    """
    Repository for Location entities.

    Inactive locations are soft deleted or hidden; admins list them too.
    """

    model = Location

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if isinstance(filters, LocationFilters) and filters.city:
            term = f"%{escape_like_pattern(filters.city.strip())}%"
            query = query.where(Location.city.ilike(term, escape="\\"))
        return query


class OfferRepository(BaseRepository[Offer]):
    """Repository for Offer entities (hard deleted, is_active is the "active" flag)."""

    model = Offer


@dataclass
class ContactFilters(RepositoryFilters):
    """Filters specific to contact messages."""

    status: str | None = None


class ContactMessageRepository(BaseRepository[ContactMessage]):
    """Repository for ContactMessage entities."""

    model = ContactMessage

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if isinstance(filters, ContactFilters) and filters.status:
            query = query.where(ContactMessage.status == filters.status)
        return query

    def count_by_status(self) -> dict[str, int]:
        rows = self._db.execute(
            select(ContactMessage.status, func.count(ContactMessage.id))
            .where(ContactMessage.is_active.is_(True))
            .group_by(ContactMessage.status)
        ).all()
        return {status: count for status, count in rows}

    def count_since(self, since: datetime) -> int:
        return self._db.scalar(
            select(func.count(ContactMessage.id)).where(
                ContactMessage.is_active.is_(True),
                ContactMessage.created_at >= since,
            )
        ) or 0
