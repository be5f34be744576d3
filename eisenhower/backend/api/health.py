"""
Health endpoints, outside the response envelope.

    GET /health        liveness; always 200 while the process serves requests
    GET /health/ready  readiness; 503 unless the database answers SELECT 1
                       within timeouts.database seconds
"""

import asyncio
import time
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from eisenhower.backend.core.config import get_app_config
from eisenhower.backend.core.database import get_session_factory
from eisenhower.backend.core.logging import get_logger
from eisenhower.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """Run SELECT 1; report latency, or the error text when it fails."""
    started = time.perf_counter()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "latency_ms": int((time.perf_counter() - started) * 1000)}


def _report(status: str, checks: dict[str, Any]) -> dict[str, Any]:
    return {"status": status, "checks": checks, "timestamp": utc_now().isoformat()}


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    timeout = get_app_config().application.timeouts.database
    try:
        async with asyncio.timeout(timeout):
            database = await check_database()
    except TimeoutError:
        database = {"status": "unhealthy", "error": "timed out"}

    checks = {"database": database}
    if database["status"] != "healthy":
        logger.warning("Readiness check failed", extra={"checks": checks})
        raise HTTPException(status_code=503, detail=_report("unhealthy", checks))
    return _report("healthy", checks)
