"""Liveness and database readiness checks."""

import time

import aiosqlite
from fastapi import APIRouter

from loanledger.application.dto.responses import DatabaseHealthResponse, HealthResponse
from loanledger.config import get_logger, get_settings
from loanledger.core.exceptions import StorageError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service is up; does not touch the database."""
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Round-trip ``SELECT 1`` through the pool.

    Reports latency and how many pooled connections are idle; a failed
    check turns the status to ``unhealthy`` instead of raising.
    """
    from loanledger.infrastructure.storage.sqlite import get_pool

    try:
        pool = await get_pool()
        started = time.perf_counter()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
        database = DatabaseHealthResponse(
            available=True,
            latency_ms=(time.perf_counter() - started) * 1000,
            pool_size=pool.pool_size,
            idle_connections=pool.idle,
        )
    except (StorageError, aiosqlite.Error, OSError) as e:
        logger.warning("db_health_failed", error=str(e))
        database = DatabaseHealthResponse(available=False, error=str(e))

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
        database=database,
    )
