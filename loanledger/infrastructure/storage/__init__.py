"""Storage infrastructure implementations."""

from loanledger.infrastructure.storage.sqlite import (
    SQLiteMaterialStore,
    SQLiteMovementStore,
    SQLiteUserStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
    get_write_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteMaterialStore",
    "SQLiteMovementStore",
    "SQLiteUserStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_write_transaction",
]
