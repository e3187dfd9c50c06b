"""
Shared validators and normalizers for user input.
"""

import re
import unicodedata
from datetime import date, datetime, timezone
from urllib.parse import urlparse
from typing import Optional

PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9]+$")

# Internal hosts that must never appear in stored image URLs
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",
    "[::1]",
]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate an externally supplied image URL.

    Returns the stripped URL, or None for empty input.

    Raises:
        ValueError: If the URL is malformed, not HTTP(S) or points to an internal host.
    """
    if url is None:
        return None
    url = url.strip()
    if not url:
        return None

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"Esquema de URL no permitido: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Solo se permiten URLs HTTP/HTTPS")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL sin host válido")
    for blocked in BLOCKED_HOSTS:
        if host.startswith(blocked):
            raise ValueError("URL interna no permitida")

    if len(url) > 2048:
        raise ValueError("URL demasiado larga (máximo 2048 caracteres)")

    return url


def slugify(value: str) -> str:
    """
    Build a URL slug: accents stripped, lowercase, runs of
    non-alphanumerics collapsed into "-".

        >>> slugify("Platos Típicos & Más")
        'platos-tipicos-mas'
    """
    normalized = unicodedata.normalize("NFD", value)
    ascii_only = "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only.lower())
    return slug.strip("-")


def validate_phone(phone: str) -> str:
    """Allow digits, spaces and + - ( ) only."""
    phone = phone.strip()
    if not phone or not PHONE_PATTERN.match(phone):
        raise ValueError("Número de teléfono inválido")
    return phone


def normalize_coupon_code(code: str) -> str:
    """Uppercase and strip a coupon code."""
    return code.strip().upper()


def parse_iso_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        ValueError: If the value is not a valid calendar date.
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValueError("Formato de fecha inválido. Use YYYY-MM-DD")


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards; escaping them keeps user search
    terms literal.
    """
    if not value:
        return value

    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value
