"""
Tests for health check, welcome and fallback endpoints.
"""


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Health check should report a reachable database."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "bocatto-api"
        assert data["database"] == "connected"

    def test_root_lists_endpoints(self, client):
        response = client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["endpoints"]["menu"] == "/api/menu"
        assert body["endpoints"]["reservations"] == "/reservations"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}


class TestMiddlewares:
    """Security headers and request correlation."""

    def test_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Request-ID"]
