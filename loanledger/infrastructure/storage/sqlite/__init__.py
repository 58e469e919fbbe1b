"""SQLite storage implementations."""

from loanledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
    get_write_transaction,
)
from loanledger.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from loanledger.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore
from loanledger.infrastructure.storage.sqlite.user_store import SQLiteUserStore

# Singleton instances
_material_store: SQLiteMaterialStore | None = None
_movement_store: SQLiteMovementStore | None = None
_user_store: SQLiteUserStore | None = None


async def get_material_store() -> SQLiteMaterialStore:
    """Get singleton material store instance."""
    global _material_store
    if _material_store is None:
        _material_store = SQLiteMaterialStore()
    return _material_store


async def get_movement_store() -> SQLiteMovementStore:
    """Get singleton movement store instance."""
    global _movement_store
    if _movement_store is None:
        _movement_store = SQLiteMovementStore()
    return _movement_store


async def get_user_store() -> SQLiteUserStore:
    """Get singleton user store instance."""
    global _user_store
    if _user_store is None:
        _user_store = SQLiteUserStore()
    return _user_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_write_transaction",
    # Store classes
    "SQLiteMaterialStore",
    "SQLiteMovementStore",
    "SQLiteUserStore",
    # Factory functions
    "get_material_store",
    "get_movement_store",
    "get_user_store",
]
