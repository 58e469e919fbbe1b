"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

import loanledger.infrastructure.storage.sqlite.connection as conn_module
from loanledger.core.entities import Material, User
from loanledger.infrastructure.storage.sqlite import (
    SQLiteMaterialStore,
    SQLiteMovementStore,
    SQLiteUserStore,
)
from loanledger.infrastructure.storage.sqlite.connection import ConnectionPool, close_pool
from loanledger.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Create a temporary database with all migrations applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    mock.storage.acquire_timeout = 5.0
    return mock


@pytest.fixture
async def db_pool(initialized_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Install a pool over the migrated temp database as the global pool."""
    await close_pool()
    pool = ConnectionPool(initialized_db, pool_size=4, busy_timeout=5000, acquire_timeout=5.0)
    await pool.initialize()
    conn_module._pool = pool
    try:
        yield pool
    finally:
        await close_pool()


@pytest.fixture
def material_store() -> SQLiteMaterialStore:
    return SQLiteMaterialStore()


@pytest.fixture
def movement_store() -> SQLiteMovementStore:
    return SQLiteMovementStore()


@pytest.fixture
def user_store() -> SQLiteUserStore:
    return SQLiteUserStore()


@pytest.fixture
async def borrower(db_pool, user_store: SQLiteUserStore) -> User:
    """A registered borrower."""
    return await user_store.create_user(
        User(name="Ana Trainer", email="ana@example.com", is_trainer=True),
        "s3cret",
    )


@pytest.fixture
async def material(db_pool, material_store: SQLiteMaterialStore) -> Material:
    """A material with two units on the shelf."""
    return await material_store.create_material(Material(name="Kettlebell 16kg", type="weights", quantity=2))
