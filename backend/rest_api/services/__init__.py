"""
Services module for business logic.

- domain/: Application services (business logic), one per resource
- base_service: BaseService / BaseCRUDService the domain services build on

Usage:
    from rest_api.services.domain import CategoryService
    service = CategoryService(db)
    categories = service.list_categories(active_only=True)
"""

from .base_service import BaseService, BaseCRUDService

__all__ = [
    "BaseService",
    "BaseCRUDService",
]
