"""
Tests for middleware and infrastructure components.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.middleware.sessions import SessionMiddleware

from rest_api.core.middlewares import SecurityHeadersMiddleware, register_middlewares
from shared.infrastructure.correlation import (
    CorrelationIdFilter,
    CorrelationIdMiddleware,
    get_request_id,
    request_id_var,
)
from shared.infrastructure.db import safe_commit


def _app_with(*middlewares) -> FastAPI:
    app = FastAPI()
    for middleware in middlewares:
        app.add_middleware(middleware)

    @app.get("/test")
    def test_endpoint():
        return {"message": "ok", "requestId": get_request_id()}

    return app


# =============================================================================
# SecurityHeadersMiddleware Tests
# =============================================================================


class TestSecurityHeadersMiddleware:
    """Tests for security headers middleware."""

    @pytest.fixture
    def secured_client(self):
        return TestClient(_app_with(SecurityHeadersMiddleware))

    def test_adds_x_content_type_options(self, secured_client):
        response = secured_client.get("/test")
        assert response.headers.get("X-Content-Type-Options") == "nosniff"

    def test_adds_x_frame_options(self, secured_client):
        response = secured_client.get("/test")
        assert response.headers.get("X-Frame-Options") == "DENY"

    def test_adds_referrer_policy(self, secured_client):
        response = secured_client.get("/test")
        assert response.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"

    def test_adds_permissions_policy(self, secured_client):
        response = secured_client.get("/test")
        assert "geolocation=()" in response.headers.get("Permissions-Policy", "")

    def test_adds_hsts_in_production(self):
        """Should add HSTS header only in production."""
        with patch("rest_api.core.middlewares.settings") as mock_settings:
            mock_settings.environment = "production"
            response = TestClient(_app_with(SecurityHeadersMiddleware)).get("/test")

        assert "max-age=31536000" in response.headers.get("Strict-Transport-Security", "")

    def test_no_hsts_in_development(self):
        with patch("rest_api.core.middlewares.settings") as mock_settings:
            mock_settings.environment = "development"
            response = TestClient(_app_with(SecurityHeadersMiddleware)).get("/test")

        assert "Strict-Transport-Security" not in response.headers


# =============================================================================
# CorrelationIdMiddleware Tests
# =============================================================================


class TestCorrelationIdMiddleware:

    @pytest.fixture
    def correlated_client(self):
        return TestClient(_app_with(CorrelationIdMiddleware))

    def test_echoes_client_request_id(self, correlated_client):
        response = correlated_client.get("/test", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["requestId"] == "req-42"

    def test_generates_request_id_when_missing(self, correlated_client):
        response = correlated_client.get("/test")

        generated = response.headers["X-Request-ID"]
        assert len(generated) == 36
        assert response.json()["requestId"] == generated

    def test_context_is_reset_after_request(self, correlated_client):
        correlated_client.get("/test", headers={"X-Request-ID": "req-1"})
        assert get_request_id() == ""

    def test_register_middlewares_installs_all(self):
        app = FastAPI()
        register_middlewares(app)

        installed = {m.cls for m in app.user_middleware}
        assert installed == {SessionMiddleware, SecurityHeadersMiddleware, CorrelationIdMiddleware}


class TestCorrelationIdFilter:

    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("bocatto", logging.INFO, __file__, 1, "msg", None, None)

    def test_stamps_placeholder_outside_request(self):
        record = self._record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.request_id == "-"

    def test_stamps_current_request_id(self):
        token = request_id_var.set("abc-123")
        try:
            record = self._record()
            CorrelationIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "abc-123"


# =============================================================================
# safe_commit Tests
# =============================================================================


class TestSafeCommit:

    def test_commits(self):
        db = MagicMock()
        safe_commit(db)

        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_rolls_back_and_reraises(self):
        db = MagicMock()
        db.commit.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            safe_commit(db)
        db.rollback.assert_called_once()
