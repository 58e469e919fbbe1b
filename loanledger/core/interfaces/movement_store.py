"""Abstract interface for loan movement storage."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from loanledger.core.entities.movement import Movement, MovementRecord


class IMovementStore(ABC):
    """Interface for movement persistence."""

    @abstractmethod
    async def insert_open(self, conn: Any, movement: Movement) -> Movement:
        """Insert an open movement on the caller's transaction."""
        pass

    @abstractmethod
    async def close_if_open(
        self, conn: Any, movement_id: int, returned_at: datetime
    ) -> Movement | None:
        """Close a movement that is still open. None if absent or already closed."""
        pass

    @abstractmethod
    async def get_movement(self, movement_id: int) -> Movement | None:
        """Get movement by ID."""
        pass

    @abstractmethod
    async def list_movements(self, material_id: int | None = None) -> list[MovementRecord]:
        """List movements with names, most recent loan first."""
        pass

    @abstractmethod
    async def count_open(self, material_id: int) -> int:
        """Count movements of a material that are still on loan."""
        pass
