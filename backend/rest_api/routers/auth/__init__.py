"""
Authentication routers - /api/auth/*
Handles login, logout, registration, session checks and two-factor auth.
"""

from .routes import router
from .two_factor import router as two_factor_router

__all__ = ["router", "two_factor_router"]
