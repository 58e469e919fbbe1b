"""Fixtures for ledger use case tests."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest


class FakeTransaction:
    """Stands in for get_write_transaction and records how the block ended."""

    def __init__(self) -> None:
        self.conn = MagicMock(name="conn")
        self.committed = False
        self.rolled_back = False

    @asynccontextmanager
    async def __call__(self):
        try:
            yield self.conn
        except BaseException:
            self.rolled_back = True
            raise
        self.committed = True


@pytest.fixture
def transaction() -> FakeTransaction:
    return FakeTransaction()


@pytest.fixture
def mock_material_store():
    return AsyncMock()


@pytest.fixture
def mock_movement_store():
    return AsyncMock()
