"""SQLite implementation of user storage."""

import asyncio
from datetime import UTC, datetime

import aiosqlite

from loanledger.config import get_logger
from loanledger.core.entities.user import User
from loanledger.core.exceptions import DuplicateEmailError
from loanledger.core.interfaces.user_store import IUserStore
from loanledger.core.security import hash_password, verify_password
from loanledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from loanledger.infrastructure.storage.sqlite.timestamps import (
    from_db_timestamp,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteUserStore(IUserStore):
    """SQLite implementation of the user registry."""

    async def create_user(self, user: User, password: str) -> User:
        """Register a user, storing a hash of ``password``."""
        user.created_at = datetime.now(UTC)
        # PBKDF2 is CPU-bound; keep it off the event loop
        password_hash = await asyncio.get_running_loop().run_in_executor(
            None, hash_password, password
        )
        async with get_transaction() as conn:
            try:
                cursor = await conn.execute(
                    """
                    INSERT INTO users (
                        name, email, password_hash, is_trainer, employee_code, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user.name,
                        user.email,
                        password_hash,
                        int(user.is_trainer),
                        user.employee_code,
                        to_db_timestamp(user.created_at),
                    ),
                )
            except aiosqlite.IntegrityError as e:
                raise DuplicateEmailError(user.email) from e

            user.id = cursor.lastrowid
            logger.info("user_registered", user_id=user.id, is_trainer=user.is_trainer)
            return user

    async def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_user(row)

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the user whose email and password match, else None."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
            )
            row = await cursor.fetchone()

        matches = row is not None and await asyncio.get_running_loop().run_in_executor(
            None, verify_password, password, row["password_hash"]
        )
        if not matches:
            logger.info("login_failed")
            return None
        return self._row_to_user(row)

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        """Convert database row to User entity."""
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            is_trainer=bool(row["is_trainer"]),
            employee_code=row["employee_code"],
            created_at=from_db_timestamp(row["created_at"]),
        )
