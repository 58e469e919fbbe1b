"""List Movements Use Case."""

from loanledger.application.dto.responses import MovementListResponse, MovementRecordResponse
from loanledger.config import get_logger
from loanledger.core.entities import MovementRecord
from loanledger.core.interfaces import IMovementStore

logger = get_logger(__name__)


class ListMovementsUseCase:
    """Read the loan history, newest loan first."""

    def __init__(self, movement_store: IMovementStore | None = None):
        self._movement_store = movement_store

    async def _get_movement_store(self) -> IMovementStore:
        if self._movement_store is None:
            from loanledger.infrastructure.storage.sqlite import get_movement_store

            self._movement_store = await get_movement_store()
        return self._movement_store

    async def execute(self, material_id: int | None = None) -> list[MovementRecord]:
        """Unknown material ids give an empty list."""
        store = await self._get_movement_store()
        records = await store.list_movements(material_id=material_id)
        logger.debug("movements_listed", material_id=material_id, count=len(records))
        return records

    def to_response(self, records: list[MovementRecord]) -> MovementListResponse:
        return MovementListResponse(
            movements=[MovementRecordResponse.from_record(r) for r in records],
            total=len(records),
        )
