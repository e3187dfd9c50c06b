"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, AuditMixin, UTCDateTime
- user: User, UserAllergy
- catalog: Category, Product
- area: Area
- reservation: Reservation
- cart: Cart, CartItem
- order: Order, OrderItem
- coupon: Coupon, CouponUsage
- review: Review
- content: Location, Offer, ContactMessage, AboutUs
"""

# Base classes
from .base import Base, AuditMixin, UTCDateTime, utcnow

# Users
from .user import User, UserAllergy

# Catalog (menu structure)
from .catalog import Category, Product

# Reservations
from .area import Area
from .reservation import Reservation

# Shopping
from .cart import Cart, CartItem
from .order import Order, OrderItem
from .coupon import Coupon, CouponUsage

# Reviews
from .review import Review

# Site content
from .content import Location, Offer, ContactMessage, AboutUs

__all__ = [
    "Base",
    "AuditMixin",
    "UTCDateTime",
    "utcnow",
    "User",
    "UserAllergy",
    "Category",
    "Product",
    "Area",
    "Reservation",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "Coupon",
    "CouponUsage",
    "Review",
    "Location",
    "Offer",
    "ContactMessage",
    "AboutUs",
]
