"""
Content routers: reviews, locations, offers, contact messages and the About Us page.
"""

from .about import router as about_router
from .contact import router as contact_router
from .locations import router as locations_router
from .offers import router as offers_router
from .reviews import router as reviews_router

__all__ = [
    "about_router",
    "contact_router",
    "locations_router",
    "offers_router",
    "reviews_router",
]
