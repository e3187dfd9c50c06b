"""
Shop routers: session carts, orders and discount coupons.
"""

from .cart import router as cart_router
from .coupons import router as coupons_router
from .orders import router as orders_router

__all__ = ["cart_router", "coupons_router", "orders_router"]
