"""
Abstract interface for material catalog storage.

Defines the contract for material CRUD and for the guarded quantity updates
the stock ledger performs inside its own transaction.
"""

from abc import ABC, abstractmethod
from typing import Any

from loanledger.core.entities.material import Material


class IMaterialStore(ABC):
    """
    Abstract interface for material catalog storage.

    Methods taking ``conn`` run on the caller's open transaction and never
    commit on their own.
    """

    @abstractmethod
    async def create_material(self, material: Material) -> Material:
        """Create a new material record."""

    @abstractmethod
    async def get_material(self, material_id: int, conn: Any = None) -> Material | None:
        """Get material by ID."""

    @abstractmethod
    async def list_materials(self, query: str | None = None) -> list[Material]:
        """List materials ordered by name, optionally filtered by name substring."""

    @abstractmethod
    async def update_material(
        self,
        material_id: int,
        name: str | None = None,
        type: str | None = None,
        quantity: int | None = None,
    ) -> Material | None:
        """Update the given fields, keeping the others. None if absent."""

    @abstractmethod
    async def delete_material(self, material_id: int) -> bool:
        """Delete a material. False if it did not exist."""

    @abstractmethod
    async def decrement_if_available(self, conn: Any, material_id: int) -> Material | None:
        """Take one unit if quantity > 0. None if no row was updated."""

    @abstractmethod
    async def increment(self, conn: Any, material_id: int) -> Material | None:
        """Put one unit back. None if the material does not exist."""
