"""Integration tests for health API endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from httpx import AsyncClient


pytestmark = pytest.mark.integration


class TestHealthEndpoint:
    """Tests for GET /health."""

    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Should return healthy status."""
        response = await client.get("/health")

        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert "version" in data
        assert "timestamp" in data


class TestReadinessEndpoint:
    """Tests for GET /ready."""

    async def test_ready_checks_database(self, client: AsyncClient) -> None:
        """Should report the database as healthy."""
        response = await client.get("/ready")

        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ready"
        assert data["dependencies"] == {"database": "healthy"}
