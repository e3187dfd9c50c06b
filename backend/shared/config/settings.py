"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Database
    database_url: str = "sqlite:///./bocatto.db"

    # JWT Configuration
    jwt_secret: str = "dev-secret-change-me-in-production"
    jwt_issuer: str = "bocatto"
    jwt_audience: str = "bocatto-users"
    # Session tokens live 24h, matching the HttpOnly cookie max-age
    jwt_session_expire_hours: int = 24
    # Pending 2FA logins must be completed within this window
    two_factor_login_window_minutes: int = 5

    # HttpOnly cookie carrying the session token
    auth_cookie_name: str = "authToken"
    cookie_secure: bool = False  # Set to True in production (.env)
    cookie_samesite: str = "lax"  # "lax", "strict" or "none" (cross-site frontend)
    cookie_domain: str = ""  # Empty = current domain only

    # CORS: FRONTEND_URL is always allowed, ALLOWED_ORIGINS adds more (comma-separated)
    frontend_url: str = "http://localhost:3000"
    allowed_origins: str = ""

    # Google OAuth (client sign-in); the callback defaults to /api/auth/google/callback on the API host
    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = ""

    # Cloudinary (image uploads)
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    max_upload_size_mb: int = 5

    # Pricing
    iva_rate: float = 0.15
    cart_expiration_days: int = 7
    order_preparation_minutes: int = 30

    # Seed admin (created on first startup when no admin exists)
    seed_admin_email: str = "admin@bocatto.com"
    seed_admin_password: str = "admin123"

    # Server
    rest_api_port: int = 5000

    # Environment
    environment: str = "development"
    debug: bool = True

    # Rate limiting
    rate_limit_enabled: bool = True
    login_rate_limit: str = "5/minute"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def google_oauth_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def cloudinary_configured(self) -> bool:
        """True when every Cloudinary credential is present."""
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    def validate_production_secrets(self) -> list[str]:
        """
        Validate that secrets are properly configured for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        WEAK_SECRETS = {
            "dev-secret-change-me-in-production",
            "secret",
            "password",
            "changeme",
            "default",
        }

        if self.environment == "production":
            if self.jwt_secret in WEAK_SECRETS or len(self.jwt_secret) < 32:
                errors.append(
                    "JWT_SECRET must be at least 32 characters and not a default value in production"
                )

            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.cookie_secure:
                errors.append("COOKIE_SECURE must be True in production")

            if self.seed_admin_password == "admin123":
                errors.append("SEED_ADMIN_PASSWORD must be changed in production")

            if not self.frontend_url and not self.allowed_origins:
                errors.append(
                    "FRONTEND_URL or ALLOWED_ORIGINS must be set in production"
                )

        # Partial Cloudinary configuration is always a mistake
        cloudinary_values = [
            self.cloudinary_cloud_name,
            self.cloudinary_api_key,
            self.cloudinary_api_secret,
        ]
        if any(cloudinary_values) and not all(cloudinary_values):
            errors.append(
                "CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be set together"
            )

        if bool(self.google_client_id) != bool(self.google_client_secret):
            errors.append("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set together")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

# Direct access to commonly used settings
DATABASE_URL = settings.database_url
JWT_SECRET = settings.jwt_secret
JWT_ISSUER = settings.jwt_issuer
JWT_AUDIENCE = settings.jwt_audience
