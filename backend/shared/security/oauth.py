"""
Google sign-in for clients through authlib's Starlette integration.

The OAuth state travels in the Starlette session cookie between the redirect
to Google and the callback; the session itself is never used for auth.
"""

from authlib.integrations.starlette_client import OAuth, OAuthError

from shared.config.settings import settings

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"

oauth = OAuth()
oauth.register(
    name="google",
    client_id=settings.google_client_id,
    client_secret=settings.google_client_secret,
    server_metadata_url=GOOGLE_METADATA_URL,
    client_kwargs={"scope": "openid email profile"},
)

__all__ = ["oauth", "OAuthError", "GOOGLE_METADATA_URL"]
