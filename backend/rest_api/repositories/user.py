"""
User Repository - Data access for admin and client accounts.
"""

from dataclasses import dataclass

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import selectinload

from rest_api.models import User
from shared.utils.validators import escape_like_pattern
from .base import BaseRepository, RepositoryFilters


@dataclass
class UserFilters(RepositoryFilters):
    """Filters specific to users."""

    role: str | None = None
    is_active: bool | None = None


class UserRepository(BaseRepository[User]):
    """
    Repository for User entities.

    is_active marks disabled accounts, which stay listable for admins.
    """

    model = User

    def _base_query(self) -> Select:
        return select(User).options(selectinload(User.allergies))

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if filters.search:
            term = f"%{escape_like_pattern(filters.search)}%"
            query = query.where(
                or_(
                    User.first_name.ilike(term, escape="\\"),
                    User.last_name.ilike(term, escape="\\"),
                    User.email.ilike(term, escape="\\"),
                )
            )
        if isinstance(filters, UserFilters):
            if filters.role:
                query = query.where(User.role == filters.role)
            if filters.is_active is not None:
                query = query.where(User.is_active.is_(filters.is_active))
        return query

    def find_by_email(self, email: str) -> User | None:
        return self._db.scalar(
            self._base_query().where(func.lower(User.email) == email.strip().lower())
        )

    def find_by_google_id(self, google_id: str) -> User | None:
        return self._db.scalar(self._base_query().where(User.google_id == google_id))
