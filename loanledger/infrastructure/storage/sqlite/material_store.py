"""
SQLite implementation of material catalog storage.

Handles catalog CRUD and the guarded quantity updates used by the stock ledger.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime

import aiosqlite

from loanledger.config import get_logger
from loanledger.core.entities.material import Material
from loanledger.core.exceptions import MaterialInUseError, ValidationError
from loanledger.core.interfaces.material_store import IMaterialStore
from loanledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from loanledger.infrastructure.storage.sqlite.timestamps import (
    from_db_timestamp,
    to_db_timestamp,
)

logger = get_logger(__name__)


@asynccontextmanager
async def _use(conn: aiosqlite.Connection | None):
    """Run on the caller's connection when given, else on a pooled one."""
    if conn is not None:
        yield conn
    else:
        async with get_connection() as pooled:
            yield pooled


class SQLiteMaterialStore(IMaterialStore):
    """SQLite implementation of material catalog storage."""

    async def create_material(self, material: Material) -> Material:
        """Create a new material record."""
        now = datetime.now(UTC)
        material.created_at = now
        material.updated_at = now
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO materials (name, type, quantity, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    material.name,
                    material.type,
                    material.quantity,
                    to_db_timestamp(material.created_at),
                    to_db_timestamp(material.updated_at),
                ),
            )
            material.id = cursor.lastrowid
            logger.info(
                "material_created",
                material_id=material.id,
                name=material.name,
                quantity=material.quantity,
            )
            return material

    async def get_material(
        self, material_id: int, conn: aiosqlite.Connection | None = None
    ) -> Material | None:
        """Get material by ID."""
        async with _use(conn) as c:
            cursor = await c.execute(
                "SELECT * FROM materials WHERE id = ?", (material_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_material(row)

    async def list_materials(self, query: str | None = None) -> list[Material]:
        """List materials ordered by name, optionally filtered by name substring."""
        sql = "SELECT * FROM materials"
        params: list = []
        if query and query.strip():
            sql += " WHERE lower(name) LIKE ? ESCAPE '\\'"
            params.append(f"%{_escape_like(query.strip().lower())}%")
        sql += " ORDER BY name COLLATE NOCASE ASC, id ASC"

        async with get_connection() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return [self._row_to_material(row) for row in rows]

    async def update_material(
        self,
        material_id: int,
        name: str | None = None,
        type: str | None = None,
        quantity: int | None = None,
    ) -> Material | None:
        """Update the given fields, keeping the others. None if absent."""
        if name is not None and not name.strip():
            raise ValidationError("name", "must not be blank", name)
        if quantity is not None and quantity < 0:
            raise ValidationError("quantity", "must be >= 0", quantity)

        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE materials SET
                    name = COALESCE(?, name),
                    type = COALESCE(?, type),
                    quantity = COALESCE(?, quantity),
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    name.strip() if name is not None else None,
                    type,
                    quantity,
                    to_db_timestamp(datetime.now(UTC)),
                    material_id,
                ),
            )
            if cursor.rowcount == 0:
                return None
            material = await self.get_material(material_id, conn=conn)
            logger.info("material_updated", material_id=material_id)
            return material

    async def delete_material(self, material_id: int) -> bool:
        """Delete a material. False if it did not exist."""
        async with get_transaction() as conn:
            try:
                cursor = await conn.execute(
                    "DELETE FROM materials WHERE id = ?", (material_id,)
                )
            except aiosqlite.IntegrityError as e:
                # Movements reference the row (ON DELETE RESTRICT)
                logger.warning("material_delete_refused", material_id=material_id)
                raise MaterialInUseError(material_id) from e
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("material_deleted", material_id=material_id)
        return deleted

    async def decrement_if_available(
        self, conn: aiosqlite.Connection, material_id: int
    ) -> Material | None:
        """Take one unit if quantity > 0. None if no row was updated."""
        cursor = await conn.execute(
            """
            UPDATE materials
            SET quantity = quantity - 1, updated_at = ?
            WHERE id = ? AND quantity > 0
            """,
            (to_db_timestamp(datetime.now(UTC)), material_id),
        )
        if cursor.rowcount == 0:
            return None
        return await self.get_material(material_id, conn=conn)

    async def increment(
        self, conn: aiosqlite.Connection, material_id: int
    ) -> Material | None:
        """Put one unit back. None if the material does not exist."""
        cursor = await conn.execute(
            """
            UPDATE materials
            SET quantity = quantity + 1, updated_at = ?
            WHERE id = ?
            """,
            (to_db_timestamp(datetime.now(UTC)), material_id),
        )
        if cursor.rowcount == 0:
            return None
        return await self.get_material(material_id, conn=conn)

    @staticmethod
    def _row_to_material(row: aiosqlite.Row) -> Material:
        """Convert database row to Material entity."""
        return Material(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            quantity=row["quantity"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
