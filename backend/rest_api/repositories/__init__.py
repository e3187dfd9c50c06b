"""
Repository Pattern implementation.
Centralizes data access with guaranteed eager loading.

Usage:
    from rest_api.repositories import ReservationRepository

    repo = ReservationRepository(db)
    conflicts = repo.find_overlapping(area_id, start_time, end_time)
"""

from .base import BaseRepository, ModelRepository, RepositoryFilters
from .product import ProductRepository, ProductFilters
from .category import CategoryRepository, CategoryFilters
from .reservation import ReservationRepository, ReservationFilters
from .cart import CartRepository
from .order import OrderRepository, OrderFilters
from .user import UserRepository, UserFilters
from .content import (
    LocationRepository,
    LocationFilters,
    OfferRepository,
    ContactMessageRepository,
    ContactFilters,
)

__all__ = [
    # Base
    "BaseRepository",
    "ModelRepository",
    "RepositoryFilters",
    # Product
    "ProductRepository",
    "ProductFilters",
    # Category
    "CategoryRepository",
    "CategoryFilters",
    # Reservation
    "ReservationRepository",
    "ReservationFilters",
    # Cart
    "CartRepository",
    # Order
    "OrderRepository",
    "OrderFilters",
    # User
    "UserRepository",
    "UserFilters",
    # Content
    "LocationRepository",
    "LocationFilters",
    "OfferRepository",
    "ContactMessageRepository",
    "ContactFilters",
]
