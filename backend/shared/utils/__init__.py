"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
)
from shared.utils.validators import (
    validate_image_url,
    escape_like_pattern,
    slugify,
)
from shared.utils.schemas import CamelModel

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    # validators
    "validate_image_url",
    "escape_like_pattern",
    "slugify",
    # schemas
    "CamelModel",
]
