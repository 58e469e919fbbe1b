"""Record Return Use Case: conditional close plus increment in one transaction."""

from dataclasses import dataclass

from loanledger.application.dto.requests import RecordReturnRequest
from loanledger.application.dto.responses import (
    MaterialResponse,
    MovementResponse,
    RecordReturnResponse,
)
from loanledger.application.use_cases.record_loan import TransactionFactory
from loanledger.application.use_cases.validation import require_positive_id, utc_or_now
from loanledger.config import get_logger
from loanledger.core.entities import Material, Movement
from loanledger.core.exceptions import MaterialNotFoundError, MovementNotFoundError
from loanledger.core.interfaces import IMaterialStore, IMovementStore

logger = get_logger(__name__)


@dataclass
class RecordReturnResult:
    """Result of closing a loan."""

    movement: Movement
    material: Material


class RecordReturnUseCase:
    """Close an open loan and put its unit back on the shelf."""

    def __init__(
        self,
        material_store: IMaterialStore | None = None,
        movement_store: IMovementStore | None = None,
        transaction: TransactionFactory | None = None,
    ):
        self._material_store = material_store
        self._movement_store = movement_store
        self._transaction = transaction

    async def _get_material_store(self) -> IMaterialStore:
        if self._material_store is None:
            from loanledger.infrastructure.storage.sqlite import get_material_store

            self._material_store = await get_material_store()
        return self._material_store

    async def _get_movement_store(self) -> IMovementStore:
        if self._movement_store is None:
            from loanledger.infrastructure.storage.sqlite import get_movement_store

            self._movement_store = await get_movement_store()
        return self._movement_store

    def _get_transaction(self) -> TransactionFactory:
        if self._transaction is None:
            from loanledger.infrastructure.storage.sqlite import get_write_transaction

            self._transaction = get_write_transaction
        return self._transaction

    async def execute(self, movement_id: int, request: RecordReturnRequest) -> RecordReturnResult:
        """Execute record return use case."""
        movement_id = require_positive_id("movement_id", movement_id)
        returned_at = utc_or_now("returned_at", request.returned_at)

        material_store = await self._get_material_store()
        movement_store = await self._get_movement_store()

        async with self._get_transaction()() as conn:
            # 1. Close only if still open; absent and already returned look the same
            movement = await movement_store.close_if_open(conn, movement_id, returned_at)
            if movement is None:
                logger.info("return_rejected", movement_id=movement_id)
                raise MovementNotFoundError(movement_id)

            # 2. Put the unit back
            material = await material_store.increment(conn, movement.material_id)
            if material is None:
                raise MaterialNotFoundError(movement.material_id)

        logger.info(
            "return_recorded",
            movement_id=movement_id,
            material_id=material.id,
            available_qty=material.quantity,
        )

        return RecordReturnResult(movement=movement, material=material)

    def to_response(self, result: RecordReturnResult) -> RecordReturnResponse:
        """Convert result to API response."""
        return RecordReturnResponse(
            movement=MovementResponse.from_entity(result.movement),
            material=MaterialResponse.from_entity(result.material),
        )
