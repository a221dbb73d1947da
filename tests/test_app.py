"""Application wiring: health checks, error bodies and response headers."""

import pytest

pytestmark = pytest.mark.integration


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"]

    def test_readiness_checks_database(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"]["status"] == "healthy"


class TestResponses:

    def test_request_id_header(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"]

    def test_error_body_carries_request_id(self, client):
        response = client.get("/api/auth/profile")
        body = response.json()
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_api_responses_not_cached(self, client):
        response = client.get("/api/auth/profile")
        assert "no-store" in response.headers["Cache-Control"]
