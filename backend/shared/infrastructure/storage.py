"""
Image storage backed by Cloudinary.

Uploaded images are validated (content type and size) before they leave the
server, stored under a per-resource folder and referenced by their secure URL.

Usage:
    from shared.infrastructure.storage import upload_image, delete_image

    url = upload_image(image, UploadFolders.AREAS)
    delete_image(old_url)
"""

from __future__ import annotations

from typing import Any

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from shared.config.constants import ALLOWED_IMAGE_CONTENT_TYPES
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import ExternalServiceError, ValidationError

logger = get_logger(__name__)

# Max dimensions applied on upload, quality/format left to Cloudinary
DEFAULT_TRANSFORMATION: list[dict[str, Any]] = [
    {"width": 1200, "height": 800, "crop": "limit"},
    {"quality": "auto"},
    {"fetch_format": "auto"},
]

_configured = False


def _ensure_configured() -> None:
    """Configure the Cloudinary SDK once, or fail with 503 when credentials are missing."""
    global _configured
    if not settings.cloudinary_configured:
        raise ExternalServiceError("de imágenes (Cloudinary)", is_unavailable=True)
    if not _configured:
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )
        _configured = True


def validate_image(file: UploadFile) -> bytes:
    """
    Check content type and size of an uploaded image and return its bytes.

    Raises:
        ValidationError: For unsupported formats or files over the size limit.
    """
    if file.content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise ValidationError(
            "Solo se permiten imágenes (JPEG, JPG, PNG, WEBP)",
            content_type=file.content_type,
        )

    content = file.file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise ValidationError(
            f"La imagen excede el tamaño máximo de {settings.max_upload_size_mb}MB",
            size=len(content),
        )
    return content


def upload_image(file: UploadFile, folder: str) -> str:
    """
    Upload an image to Cloudinary and return its secure URL.

    Raises:
        ValidationError: Invalid image.
        ExternalServiceError: Cloudinary not configured (503) or upload failed (502).
    """
    content = validate_image(file)
    _ensure_configured()

    try:
        result = cloudinary.uploader.upload(
            content,
            folder=folder,
            resource_type="image",
            transformation=DEFAULT_TRANSFORMATION,
        )
    except Exception as e:
        logger.error("Cloudinary upload failed", folder=folder, error=str(e))
        raise ExternalServiceError("de imágenes (Cloudinary)")

    url = result.get("secure_url") or result.get("url")
    logger.info("Image uploaded", folder=folder, public_id=result.get("public_id"))
    return url


def extract_public_id(image_url: str) -> str | None:
    """
    Extract the Cloudinary public id from an image URL.

    https://res.cloudinary.com/demo/image/upload/v1234/bocatto/areas/abc.jpg
    -> bocatto/areas/abc

    Values that are not Cloudinary URLs are treated as public ids already.
    """
    if not image_url:
        return None

    if "cloudinary.com" not in image_url:
        return image_url

    parts = image_url.split("/")
    if "upload" not in parts:
        return None
    upload_index = parts.index("upload")
    # Skip the version segment (v1234567890)
    path_parts = parts[upload_index + 2:]
    if not path_parts:
        return None
    return "/".join(path_parts).rsplit(".", 1)[0]


def delete_image(image_url: str | None) -> None:
    """
    Best-effort removal of an image from Cloudinary.

    Failures are logged and never interrupt the operation that replaced
    or deleted the image.
    """
    if not image_url or not settings.cloudinary_configured:
        return

    public_id = extract_public_id(image_url)
    if not public_id:
        return

    _ensure_configured()
    try:
        cloudinary.uploader.destroy(public_id)
        logger.info("Image deleted", public_id=public_id)
    except Exception as e:
        logger.warning("Cloudinary delete failed", public_id=public_id, error=str(e))
