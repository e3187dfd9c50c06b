"""
Account routers: client administration and the user's allergy profile.
"""

from .allergies import router as allergies_router
from .clients import router as clients_router

__all__ = ["allergies_router", "clients_router"]
