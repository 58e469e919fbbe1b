"""Record Loan Use Case: guarded decrement plus open movement in one transaction."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

from loanledger.application.dto.requests import RecordLoanRequest
from loanledger.application.dto.responses import (
    MaterialResponse,
    MovementResponse,
    RecordLoanResponse,
)
from loanledger.application.use_cases.validation import require_positive_id, utc_or_now
from loanledger.config import get_logger
from loanledger.core.entities import Material, Movement
from loanledger.core.exceptions import MaterialNotFoundError, OutOfStockError
from loanledger.core.interfaces import IMaterialStore, IMovementStore

logger = get_logger(__name__)

TransactionFactory = Callable[[], AbstractAsyncContextManager[Any]]


@dataclass
class RecordLoanResult:
    """Result of lending one unit."""

    movement: Movement
    material: Material


class RecordLoanUseCase:
    """
    Lend one unit of a material to a borrower.

    The decrement and the movement insert share one write transaction, so a
    failure at either step leaves both the counter and the history unchanged.
    """

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

    async def execute(self, request: RecordLoanRequest) -> RecordLoanResult:
        """Execute record loan use case."""
        material_id = require_positive_id("material_id", request.material_id)
        borrower_id = require_positive_id("borrower_id", request.borrower_id)
        loaned_at = utc_or_now("loaned_at", request.loaned_at)

        material_store = await self._get_material_store()
        movement_store = await self._get_movement_store()

        async with self._get_transaction()() as conn:
            # 1. Guarded decrement
            material = await material_store.decrement_if_available(conn, material_id)
            if material is None:
                # Same transaction, so the row cannot change under us
                existing = await material_store.get_material(material_id, conn=conn)
                if existing is None:
                    raise MaterialNotFoundError(material_id)
                logger.info("loan_rejected_out_of_stock", material_id=material_id)
                raise OutOfStockError(material_id)

            # 2. Open movement; a missing borrower aborts the whole unit
            movement = await movement_store.insert_open(
                conn,
                Movement(
                    material_id=material_id,
                    borrower_id=borrower_id,
                    loaned_at=loaned_at,
                ),
            )

        logger.info(
            "loan_recorded",
            movement_id=movement.id,
            material_id=material_id,
            borrower_id=borrower_id,
            remaining_qty=material.quantity,
        )

        return RecordLoanResult(movement=movement, material=material)

    def to_response(self, result: RecordLoanResult) -> RecordLoanResponse:
        """Convert result to API response."""
        return RecordLoanResponse(
            movement=MovementResponse.from_entity(result.movement),
            material=MaterialResponse.from_entity(result.material),
        )
