"""
Catalog routers: menu products, their customization and categories.
"""

from .categories import router as categories_router
from .customization import router as customization_router
from .menu import router as menu_router

__all__ = ["categories_router", "customization_router", "menu_router"]
