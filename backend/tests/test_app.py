"""
Rent The Moment Backend — Application Wiring Tests
=================================================

What:  Health check, middleware headers and the error envelope for
       requests that never reach a service.
"""

import pytest


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_ok(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["message"] == "Server is running"
        assert body["database"] == "connected"


class TestMiddleware:
    @pytest.mark.asyncio
    async def test_request_id_generated(self, client):
        response = await client.get("/api/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/api/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, client):
        response = await client.get("/api/auth/me", headers={"X-Request-ID": "trace-456"})
        assert response.json()["request_id"] == "trace-456"

    @pytest.mark.asyncio
    async def test_security_headers(self, client):
        response = await client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers

    @pytest.mark.asyncio
    async def test_cors_allows_local_dev_origin(self, client):
        response = await client.options(
            "/api/products",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


class TestErrorEnvelope:
    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/api/nowhere")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Route not found"

    @pytest.mark.asyncio
    async def test_malformed_json(self, client, admin_headers):
        response = await client.post(
            "/api/merchants",
            content=b"{not json",
            headers={**admin_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Validation errors"
