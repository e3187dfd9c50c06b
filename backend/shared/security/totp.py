"""
Two-factor authentication primitives: TOTP secrets, QR codes, backup codes
and at-rest encryption of the TOTP secret.

Secrets are stored AES-256-CBC encrypted as "iv_hex:cipher_hex" with a key
derived from the JWT secret (sha256). Backup codes are stored as sha256 hashes
of their normalized form (dashes removed, uppercase).
"""

import base64
import hashlib
import io
import os
import secrets

import pyotp
import qrcode
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from shared.config.constants import Limits
from shared.config.settings import settings

ISSUER_NAME = "Bocatto Restaurant"


def _encryption_key() -> bytes:
    return hashlib.sha256(settings.jwt_secret.encode("utf-8")).digest()


def encrypt_secret(plain: str) -> str:
    """Encrypt a TOTP secret for storage."""
    iv = os.urandom(16)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(_encryption_key()), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt_secret(stored: str) -> str:
    """
    Decrypt a stored TOTP secret.

    Raises:
        ValueError: If the stored value is malformed or cannot be decrypted.
    """
    try:
        iv_hex, cipher_hex = stored.split(":", 1)
        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(cipher_hex)
    except (AttributeError, ValueError):
        raise ValueError("Secreto 2FA malformado")

    decryptor = Cipher(algorithms.AES(_encryption_key()), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")


def generate_secret() -> str:
    """Generate a new base32 TOTP secret."""
    return pyotp.random_base32()


def provisioning_uri(secret: str, account_name: str) -> str:
    """otpauth:// URL understood by authenticator apps."""
    return pyotp.TOTP(secret).provisioning_uri(name=account_name, issuer_name=ISSUER_NAME)


def qr_code_data_url(uri: str) -> str:
    """Render an otpauth URL as a PNG data URL."""
    image = qrcode.make(uri)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def verify_token(secret: str, token: str | None) -> bool:
    """Check a 6-digit TOTP token, tolerating clock drift of a few steps."""
    if not token:
        return False
    token = token.strip()
    if len(token) != 6 or not token.isdigit():
        return False
    return pyotp.TOTP(secret).verify(token, valid_window=Limits.TOTP_VALID_WINDOW)


def normalize_backup_code(code: str) -> str:
    return code.replace("-", "").strip().upper()


def hash_backup_code(code: str) -> str:
    """sha256 of the normalized backup code."""
    return hashlib.sha256(normalize_backup_code(code).encode("utf-8")).hexdigest()


def generate_backup_codes(count: int = Limits.BACKUP_CODE_COUNT) -> list[str]:
    """Generate plain backup codes formatted as XXXX-XXXX (uppercase hex)."""
    codes = []
    for _ in range(count):
        raw = secrets.token_hex(4).upper()
        codes.append(f"{raw[:4]}-{raw[4:]}")
    return codes
