"""
Integration Tests for Health Endpoints.
"""

from unittest.mock import AsyncMock, patch

from httpx import AsyncClient


class TestLiveness:
    """Tests for GET /health."""

    async def test_health_needs_no_dependencies(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReadiness:
    """Tests for GET /health/ready."""

    async def test_ready_when_database_answers(self, client: AsyncClient, db_session_factory):
        with patch(
            "eisenhower.backend.api.health.get_session_factory",
            return_value=db_session_factory,
        ):
            response = await client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "healthy"
        assert "latency_ms" in body["checks"]["database"]

    async def test_not_ready_when_database_fails(self, client: AsyncClient):
        failing = AsyncMock(return_value={"status": "unhealthy", "error": "connection refused"})
        with patch("eisenhower.backend.api.health.check_database", failing):
            response = await client.get("/health/ready")

        assert response.status_code == 503
        assert "connection refused" in response.text
