"""Fixtures for API tests."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from loanledger.api.main import app


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async client over the ASGI app; lifespan is not run."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_client(db_pool, client: AsyncClient) -> AsyncClient:
    """Client whose stores hit the migrated temp database."""
    return client
