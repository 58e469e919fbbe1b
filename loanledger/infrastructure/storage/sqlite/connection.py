"""
Pooled aiosqlite connections for the ledger database.

Readers borrow a connection with ``get_connection()``. Ledger writes go
through ``get_write_transaction()``, which holds SQLite's write lock from
``BEGIN IMMEDIATE`` until commit, so two writers touching the same material
are serialized by the database rather than by the application.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from loanledger.config import get_logger, get_settings
from loanledger.core.exceptions import DatabaseError

logger = get_logger(__name__)

# Applied to every new connection; busy_timeout is added per pool
CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Fixed-size pool of aiosqlite connections to one database file."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
        acquire_timeout: float | None = None,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout
        self.acquire_timeout = acquire_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def idle(self) -> int:
        """Connections currently waiting in the pool."""
        return self._pool.qsize()

    async def initialize(self) -> None:
        """Open ``pool_size`` connections. Safe to call more than once."""
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._create_connection()
                self._connections.append(conn)
                self._pool.put_nowait(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
                busy_timeout_ms=self.busy_timeout,
            )

    async def _create_connection(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        for pragma in CONNECTION_PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        conn.row_factory = aiosqlite.Row
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        if self.acquire_timeout is None:
            return await self._pool.get()
        try:
            return await asyncio.wait_for(self._pool.get(), self.acquire_timeout)
        except TimeoutError as e:
            logger.error(
                "connection_pool_exhausted",
                pool_size=self.pool_size,
                timeout=self.acquire_timeout,
            )
            raise DatabaseError(
                "acquire", f"no connection available after {self.acquire_timeout}s"
            ) from e

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool when the block exits."""
        if not self._initialized:
            await self.initialize()

        conn = await self._checkout()
        try:
            yield conn
        finally:
            self._pool.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection and run the block as one transaction.

        The block's work is committed when it exits normally and rolled back
        on any exception, including ``CancelledError``. With ``immediate`` the
        write lock is taken before the block runs; a competing writer waits
        up to ``busy_timeout`` for it.

        Raises:
            DatabaseError: SQLite rejected a statement or the lock wait expired.
        """
        async with self.acquire() as conn:
            if immediate:
                try:
                    await conn.execute("BEGIN IMMEDIATE")
                except aiosqlite.Error as e:
                    logger.error("write_lock_unavailable", error=str(e))
                    raise DatabaseError("begin", str(e)) from e
            try:
                yield conn
            except aiosqlite.Error as e:
                await conn.rollback()
                logger.error("transaction_rolled_back", error=str(e))
                raise DatabaseError("transaction", str(e)) from e
            except BaseException:
                await conn.rollback()
                raise
            try:
                await conn.commit()
            except aiosqlite.Error as e:
                await conn.rollback()
                logger.error("commit_failed", error=str(e))
                raise DatabaseError("commit", str(e)) from e

    async def close(self) -> None:
        """Close every connection and return the pool to its unopened state."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            while not self._pool.empty():
                self._pool.get_nowait()
            self._initialized = False
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Return the process-wide pool, opening it from settings on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
            acquire_timeout=storage.acquire_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Connection for reads and single-statement writes."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Deferred transaction for catalog and registry writes."""
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn


@asynccontextmanager
async def get_write_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Transaction holding the write lock throughout; used by loans and returns."""
    pool = await get_pool()
    async with pool.transaction(immediate=True) as conn:
        yield conn
