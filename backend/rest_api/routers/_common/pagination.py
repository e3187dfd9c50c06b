"""
Standardized page-based pagination for list endpoints.

Usage:
    from rest_api.routers._common.pagination import Pagination, get_pagination

    @router.get("/clients")
    def list_clients(
        pagination: Pagination = Depends(get_pagination),
        db: Session = Depends(get_db),
    ):
        items, total = service.list_clients(limit=pagination.limit, offset=pagination.offset)
        return ok(items, pagination=pagination.to_dict(total))
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query

from shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        page: 1-indexed page number
        limit: Items per page (1 to max_limit)
    """

    page: int
    limit: int
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        """Validate and normalize values."""
        self.limit = min(max(1, self.limit), self.max_limit)
        self.page = max(1, self.page)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self, total: int) -> dict[str, Any]:
        """Pagination metadata for the response."""
        total_pages = (total + self.limit - 1) // self.limit
        return {
            "currentPage": self.page,
            "totalPages": total_pages,
            "totalCount": total,
            "limit": self.limit,
            "hasNextPage": self.page < total_pages,
            "hasPrevPage": self.page > 1,
        }


def get_pagination(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Items per page",
    ),
) -> Pagination:
    """FastAPI dependency for pagination."""
    return Pagination(page=page, limit=limit)


def get_pagination_small(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(default=10, ge=1, le=50, description="Items per page"),
) -> Pagination:
    """Pagination dependency for admin tables that show a few rows per page."""
    return Pagination(page=page, limit=limit, max_limit=50)


def get_pagination_large(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(default=50, ge=1, le=Limits.MAX_PAGE_SIZE, description="Items per page"),
) -> Pagination:
    """Pagination dependency for back-office queues (orders, messages)."""
    return Pagination(page=page, limit=limit)
