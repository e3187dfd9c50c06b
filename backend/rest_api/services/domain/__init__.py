"""
Domain Services - Clean Architecture Application Layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access and raise AppException subclasses
that the API turns into error responses.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import ReservationService

    # In router
    service = ReservationService(db)
    reservation = service.create(user, body)
"""

from .auth_service import AuthService, LoginResult
from .two_factor_service import TwoFactorService
from .client_service import ClientService
from .allergy_service import AllergyService

# Menu
from .category_service import CategoryService
from .product_service import ProductService

# Reservations
from .area_service import AreaService
from .reservation_service import ReservationService

# Shopping
from .cart_service import CartService
from .coupon_service import CouponService
from .order_service import OrderService

# Reviews and site content
from .review_service import ReviewService
from .location_service import LocationService
from .offer_service import OfferService
from .contact_service import ContactService
from .about_service import AboutService

__all__ = [
    # Accounts
    "AuthService",
    "LoginResult",
    "TwoFactorService",
    "ClientService",
    "AllergyService",
    # Menu
    "CategoryService",
    "ProductService",
    # Reservations
    "AreaService",
    "ReservationService",
    # Shopping
    "CartService",
    "CouponService",
    "OrderService",
    # Content
    "ReviewService",
    "LocationService",
    "OfferService",
    "ContactService",
    "AboutService",
]
