# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for health endpoints and request handling."""

import pytest

from eduportal import __version__

pytestmark = pytest.mark.integration


class TestHealthEndpoints:
    """Tests for /health and /health/ready."""

    async def test_liveness(self, client) -> None:
        """Test the liveness payload."""
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == __version__
        assert body["environment"] == "test"

    async def test_readiness_with_database(self, client) -> None:
        """Test that readiness reports a reachable database."""
        response = await client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["ready"] is True
        assert body["checks"]["database"]["status"] == "healthy"


class TestRequestHandling:
    """Tests for cross-cutting request behavior."""

    async def test_request_id_is_echoed(self, client) -> None:
        """Test that a supplied request id comes back on the response."""
        response = await client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"

    async def test_request_id_is_generated(self, client) -> None:
        """Test that a request id is generated when absent."""
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 32

    async def test_malformed_body_is_400(self, client) -> None:
        """Test that schema validation failures use the portal error format."""
        response = await client.post(
            "/api/v1/auth/login",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    async def test_unknown_route_is_404(self, client) -> None:
        """Test that unknown paths are not found."""
        response = await client.get("/api/v1/nope")

        assert response.status_code == 404
