"""
Centralized constants for the backend application.
Avoids magic strings and repeated constants across services and routers.

Usage:
    from shared.config.constants import Roles, ReservationStatus

    if reservation.status in ReservationStatus.BLOCKING:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    ADMIN: Final[str] = "admin"
    CLIENT: Final[str] = "client"

    ALL: Final[list[str]] = [ADMIN, CLIENT]


class AdminAccess:
    """Admin access level constants."""

    SUPER_ADMIN: Final[str] = "SUPER_ADMIN"
    MANAGER: Final[str] = "MANAGER"

    ALL: Final[list[str]] = [SUPER_ADMIN, MANAGER]


# =============================================================================
# Allergies
# =============================================================================


class Allergens:
    """Allergen identifiers users can register."""

    ALL: Final[list[str]] = [
        "gluten",
        "lactosa",
        "maní",
        "mariscos",
        "huevo",
        "soya",
        "frutos_secos",
        "pescado",
        "apio",
        "mostaza",
        "sésamo",
        "sulfitos",
    ]


class AllergySeverity:
    """Allergy severity constants."""

    LOW: Final[str] = "low"
    MEDIUM: Final[str] = "medium"
    HIGH: Final[str] = "high"

    ALL: Final[list[str]] = [LOW, MEDIUM, HIGH]


# Ingredient keywords that reveal an allergen (matched as lowercase substrings)
ALLERGEN_KEYWORDS: Final[dict[str, list[str]]] = {
    "gluten": ["pan", "trigo", "harina", "pasta", "crutones"],
    "lactosa": ["queso", "leche", "crema", "mantequilla", "yogurt"],
    "maní": ["maní", "cacahuate", "cacahuete"],
    "mariscos": ["camarón", "langosta", "cangrejo", "almeja"],
    "huevo": ["huevo", "mayonesa"],
    "soya": ["soya", "tofu", "salsa de soya"],
    "frutos_secos": ["nuez", "almendra", "avellana", "pistacho"],
    "pescado": ["pescado", "atún", "salmón"],
    "mostaza": ["mostaza"],
    "sésamo": ["sésamo", "ajonjolí"],
}

# Extras offered on every product customization screen
PRODUCT_EXTRAS: Final[list[dict[str, float | str]]] = [
    {"name": "queso extra", "price": 1.50},
    {"name": "bacon", "price": 2.00},
    {"name": "aguacate", "price": 1.75},
    {"name": "huevo", "price": 1.00},
    {"name": "doble carne", "price": 3.00},
]


# =============================================================================
# Menu categories
# =============================================================================

# Categories created by the seed and by the admin "reset" action
DEFAULT_CATEGORIES: Final[list[dict[str, str | int]]] = [
    {"name": "Entradas y Snacks", "icon": "🥗", "description": "Aperitivos y bocadillos para comenzar", "display_order": 1},
    {"name": "Platos Fuertes", "icon": "🍖", "description": "Platos principales del menú", "display_order": 2},
    {"name": "Hamburguesas", "icon": "🍔", "description": "Hamburguesas gourmet y clásicas", "display_order": 3},
    {"name": "Pizzas", "icon": "🍕", "description": "Pizzas artesanales", "display_order": 4},
    {"name": "Pastas", "icon": "🍝", "description": "Pastas frescas y tradicionales", "display_order": 5},
    {"name": "Ensaladas", "icon": "🥬", "description": "Ensaladas frescas y saludables", "display_order": 6},
    {"name": "Postres", "icon": "🍰", "description": "Dulces y postres deliciosos", "display_order": 7},
    {"name": "Bebidas", "icon": "🥤", "description": "Bebidas frías y calientes", "display_order": 8},
]


# =============================================================================
# Entity Status Constants
# =============================================================================


class ReservationStatus:
    """Reservation status constants."""

    PENDING: Final[str] = "pending"
    PAID: Final[str] = "paid"
    CANCELLED: Final[str] = "cancelled"
    EXPIRED: Final[str] = "expired"

    ALL: Final[list[str]] = [PENDING, PAID, CANCELLED, EXPIRED]
    # Reservations in these states occupy their area
    BLOCKING: Final[list[str]] = [PENDING, PAID]
    CLOSED: Final[list[str]] = [CANCELLED, EXPIRED]


class CartStatus:
    """Cart status constants."""

    ACTIVE: Final[str] = "active"
    COMPLETED: Final[str] = "completed"
    ABANDONED: Final[str] = "abandoned"

    ALL: Final[list[str]] = [ACTIVE, COMPLETED, ABANDONED]


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "pending"
    CONFIRMED: Final[str] = "confirmed"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    DELIVERED: Final[str] = "delivered"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, PREPARING, READY, DELIVERED, CANCELLED]
    KITCHEN_VISIBLE: Final[list[str]] = [CONFIRMED, PREPARING, READY]
    FINAL: Final[list[str]] = [DELIVERED, CANCELLED]
    # Customers may only cancel before the kitchen starts
    CANCELLABLE: Final[list[str]] = [PENDING, CONFIRMED]


class PaymentMethod:
    """Payment method constants (orders and simulated reservation payments)."""

    CASH: Final[str] = "cash"
    CARD: Final[str] = "card"
    TRANSFER: Final[str] = "transfer"

    ALL: Final[list[str]] = [CASH, CARD, TRANSFER]


class PaymentStatus:
    """Order payment status constants."""

    PENDING: Final[str] = "pending"
    PAID: Final[str] = "paid"
    REFUNDED: Final[str] = "refunded"

    ALL: Final[list[str]] = [PENDING, PAID, REFUNDED]


class DiscountType:
    """Coupon discount type constants."""

    PERCENTAGE: Final[str] = "percentage"
    FIXED: Final[str] = "fixed"

    ALL: Final[list[str]] = [PERCENTAGE, FIXED]


class CouponScope:
    """What a coupon applies to."""

    ALL_ITEMS: Final[str] = "all"
    PRODUCTS: Final[str] = "products"
    CATEGORIES: Final[str] = "categories"

    ALL: Final[list[str]] = [ALL_ITEMS, PRODUCTS, CATEGORIES]


class ReviewType:
    """Review target type constants."""

    PRODUCT: Final[str] = "product"
    ORDER: Final[str] = "order"
    RESERVATION: Final[str] = "reservation"

    ALL: Final[list[str]] = [PRODUCT, ORDER, RESERVATION]


class ContactStatus:
    """Contact message status constants."""

    NEW: Final[str] = "new"
    READ: Final[str] = "read"
    RESPONDED: Final[str] = "responded"
    ARCHIVED: Final[str] = "archived"

    ALL: Final[list[str]] = [NEW, READ, RESPONDED, ARCHIVED]


class BadgeColor:
    """Offer badge colors."""

    ALL: Final[list[str]] = ["red", "blue", "green", "orange", "purple"]


WEEKDAYS_ES: Final[list[str]] = [
    "lunes",
    "martes",
    "miércoles",
    "jueves",
    "viernes",
    "sábado",
    "domingo",
]


# =============================================================================
# Reservation pricing and windows
# =============================================================================


class ReservationRules:
    """Pricing and booking window for area reservations."""

    BASE_PRICE: Final[float] = 5.00  # Covers the first hour
    EXTRA_HOUR_PRICE: Final[float] = 2.50  # Each extra hour or fraction
    MAX_DAYS_AHEAD: Final[int] = 30
    CURRENCY: Final[str] = "USD"


# =============================================================================
# Image upload
# =============================================================================


class UploadFolders:
    """Cloudinary folders per resource."""

    AREAS: Final[str] = "bocatto/areas"
    PRODUCTS: Final[str] = "bocatto/products"
    LOCATIONS: Final[str] = "bocatto/locations"
    OFFERS: Final[str] = "bocatto/offers"
    ABOUT: Final[str] = "bocatto/about"


ALLOWED_IMAGE_CONTENT_TYPES: Final[frozenset[str]] = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
})


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits for input data."""

    # Pagination
    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 100

    # Two-factor
    BACKUP_CODE_COUNT: Final[int] = 10
    TOTP_VALID_WINDOW: Final[int] = 2

    # Users
    MIN_PASSWORD_LENGTH: Final[int] = 6
    MAX_PASSWORD_BYTES: Final[int] = 72  # bcrypt input limit

    # Search
    MAX_SEARCH_LENGTH: Final[int] = 100
