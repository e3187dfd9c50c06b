"""
Booking routers: dining areas and their reservations.
"""

from .areas import router as areas_router
from .reservations import router as reservations_router

__all__ = ["areas_router", "reservations_router"]
