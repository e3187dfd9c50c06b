"""
Common utilities shared across routers.
"""

from .auth import current_user, optional_user, require_admin
from .forms import parse_model, read_payload, uploaded_image
from .pagination import (
    Pagination,
    get_pagination,
    get_pagination_large,
    get_pagination_small,
)
from .responses import ok

__all__ = [
    # Auth dependencies
    "current_user",
    "optional_user",
    "require_admin",
    # Request bodies
    "parse_model",
    "read_payload",
    "uploaded_image",
    # Pagination
    "Pagination",
    "get_pagination",
    "get_pagination_large",
    "get_pagination_small",
    # Responses
    "ok",
]
