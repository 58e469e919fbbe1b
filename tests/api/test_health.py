"""Tests for health endpoints."""

from httpx import AsyncClient


async def test_root_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


async def test_api_health_check(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["uptime_seconds"] >= 0


async def test_db_health_reports_sqlite(db_client: AsyncClient):
    response = await db_client.get("/api/health/db")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"]["name"] == "sqlite"
    assert data["database"]["available"] is True
    assert data["database"]["latency_ms"] >= 0


async def test_request_id_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


async def test_db_health_reports_pool(db_client: AsyncClient, db_pool):
    response = await db_client.get("/api/health/db")

    database = response.json()["database"]
    assert database["pool_size"] == db_pool.pool_size
    assert database["idle_connections"] == db_pool.pool_size
