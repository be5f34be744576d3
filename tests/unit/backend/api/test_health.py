"""
Unit Tests for Health Check Endpoints.

Tests the health check functionality including:
- Liveness check (/health)
- Readiness check (/health/ready)
- Database connectivity check
"""

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from eisenhower.backend.api.health import check_database, health_check, readiness_check


def _factory_for(session):
    @asynccontextmanager
    async def _session():
        yield session

    return MagicMock(side_effect=_session)


def _config(database_timeout: float):
    return SimpleNamespace(
        application=SimpleNamespace(timeouts=SimpleNamespace(database=database_timeout))
    )


class TestHealthCheck:
    """Tests for the liveness health check endpoint."""

    async def test_health_returns_healthy(self):
        assert await health_check() == {"status": "healthy"}


class TestCheckDatabase:
    """Tests for the database health check function."""

    async def test_returns_healthy_with_latency(self):
        session = AsyncMock()

        with patch(
            "eisenhower.backend.api.health.get_session_factory",
            return_value=_factory_for(session),
        ):
            result = await check_database()

        assert result["status"] == "healthy"
        assert result["latency_ms"] >= 0
        session.execute.assert_awaited_once()

    async def test_returns_unhealthy_on_error(self):
        session = AsyncMock()
        session.execute.side_effect = ConnectionError("database is locked")

        with patch(
            "eisenhower.backend.api.health.get_session_factory",
            return_value=_factory_for(session),
        ):
            result = await check_database()

        assert result == {"status": "unhealthy", "error": "database is locked"}


class TestReadinessCheck:
    """Tests for the readiness check endpoint."""

    async def test_ready_when_database_healthy(self):
        with patch(
            "eisenhower.backend.api.health.check_database",
            AsyncMock(return_value={"status": "healthy", "latency_ms": 1}),
        ):
            result = await readiness_check()

        assert result["status"] == "healthy"
        assert result["checks"]["database"]["status"] == "healthy"
        assert "timestamp" in result

    async def test_raises_503_when_database_unhealthy(self):
        with patch(
            "eisenhower.backend.api.health.check_database",
            AsyncMock(return_value={"status": "unhealthy", "error": "down"}),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await readiness_check()

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail["checks"]["database"]["error"] == "down"

    async def test_raises_503_when_database_times_out(self):
        async def slow_check():
            await asyncio.sleep(1)
            return {"status": "healthy"}

        with patch("eisenhower.backend.api.health.check_database", slow_check), \
             patch("eisenhower.backend.api.health.get_app_config", return_value=_config(0.01)):
            with pytest.raises(HTTPException) as exc_info:
                await readiness_check()

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail["checks"]["database"]["error"] == "timed out"
