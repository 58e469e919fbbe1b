"""SQLite implementation of loan movement storage."""

from datetime import datetime

import aiosqlite

from loanledger.config import get_logger
from loanledger.core.entities.movement import Movement, MovementRecord
from loanledger.core.exceptions import UserNotFoundError
from loanledger.core.interfaces.movement_store import IMovementStore
from loanledger.infrastructure.storage.sqlite.connection import get_connection
from loanledger.infrastructure.storage.sqlite.timestamps import (
    from_db_timestamp,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteMovementStore(IMovementStore):
    """
    SQLite implementation of movement storage.

    Write methods run on the connection of the caller's transaction and leave
    commit and rollback to it.
    """

    async def insert_open(self, conn: aiosqlite.Connection, movement: Movement) -> Movement:
        """Insert an open movement on the caller's transaction."""
        try:
            cursor = await conn.execute(
                """
                INSERT INTO movements (material_id, borrower_id, loaned_at, returned_at)
                VALUES (?, ?, ?, NULL)
                """,
                (
                    movement.material_id,
                    movement.borrower_id,
                    to_db_timestamp(movement.loaned_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            # The material row was just decremented, so the failing key is the borrower
            raise UserNotFoundError(movement.borrower_id) from e

        movement.id = cursor.lastrowid
        movement.returned_at = None
        return movement

    async def close_if_open(
        self, conn: aiosqlite.Connection, movement_id: int, returned_at: datetime
    ) -> Movement | None:
        """Close a movement that is still open. None if absent or already closed."""
        cursor = await conn.execute(
            """
            UPDATE movements SET returned_at = ?
            WHERE id = ? AND returned_at IS NULL
            """,
            (to_db_timestamp(returned_at), movement_id),
        )
        if cursor.rowcount == 0:
            return None

        cursor = await conn.execute(
            "SELECT * FROM movements WHERE id = ?", (movement_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_movement(row)

    async def get_movement(self, movement_id: int) -> Movement | None:
        """Get movement by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_movement(row)

    async def list_movements(self, material_id: int | None = None) -> list[MovementRecord]:
        """List movements with names, most recent loan first."""
        sql = """
            SELECT
                m.id, m.material_id, m.borrower_id, m.loaned_at, m.returned_at,
                mat.name AS material_name,
                u.name AS borrower_name
            FROM movements m
            JOIN materials mat ON mat.id = m.material_id
            JOIN users u ON u.id = m.borrower_id
        """
        params: list = []
        if material_id is not None:
            sql += " WHERE m.material_id = ?"
            params.append(material_id)
        sql += " ORDER BY m.loaned_at DESC, m.id DESC"

        async with get_connection() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    async def count_open(self, material_id: int) -> int:
        """Count movements of a material that are still on loan."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT COUNT(*) FROM movements
                WHERE material_id = ? AND returned_at IS NULL
                """,
                (material_id,),
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> Movement:
        """Convert database row to Movement entity."""
        return Movement(
            id=row["id"],
            material_id=row["material_id"],
            borrower_id=row["borrower_id"],
            loaned_at=from_db_timestamp(row["loaned_at"]),
            returned_at=from_db_timestamp(row["returned_at"]),
        )

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> MovementRecord:
        return MovementRecord(
            id=row["id"],
            material_id=row["material_id"],
            borrower_id=row["borrower_id"],
            loaned_at=from_db_timestamp(row["loaned_at"]),
            returned_at=from_db_timestamp(row["returned_at"]),
            material_name=row["material_name"],
            borrower_name=row["borrower_name"],
        )
