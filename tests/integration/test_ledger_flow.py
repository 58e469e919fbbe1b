"""Loan/return flows through the real use cases and a migrated temp database."""

from datetime import UTC, datetime, timedelta

import pytest

from loanledger.application.dto.requests import RecordLoanRequest, RecordReturnRequest
from loanledger.application.use_cases import (
    ListMovementsUseCase,
    RecordLoanUseCase,
    RecordReturnUseCase,
)
from loanledger.core.entities import Material, User
from loanledger.core.exceptions import (
    MaterialNotFoundError,
    MovementNotFoundError,
    OutOfStockError,
    UserNotFoundError,
)
from loanledger.infrastructure.storage.sqlite import (
    SQLiteMaterialStore,
    SQLiteMovementStore,
    SQLiteUserStore,
)

T0 = datetime(2024, 9, 2, 8, 0, tzinfo=UTC)


@pytest.fixture
async def users(db_pool, user_store: SQLiteUserStore) -> dict[str, User]:
    created = {}
    for key in ("a", "b", "c"):
        created[key] = await user_store.create_user(
            User(name=f"User {key.upper()}", email=f"{key}@example.com"), "pw"
        )
    return created


async def _quantity(store: SQLiteMaterialStore, material_id: int) -> int:
    return (await store.get_material(material_id)).quantity


class TestLedgerScenarios:
    """Two units, three borrowers."""

    async def test_scenarios(
        self,
        db_pool,
        material: Material,
        users: dict[str, User],
        material_store: SQLiteMaterialStore,
    ):
        loan = RecordLoanUseCase()
        give_back = RecordReturnUseCase()
        history = ListMovementsUseCase()

        # A: two loans drain the shelf, the third is refused
        first = await loan.execute(
            RecordLoanRequest(material_id=material.id, borrower_id=users["a"].id, loaned_at=T0)
        )
        assert first.material.quantity == 1
        second = await loan.execute(
            RecordLoanRequest(
                material_id=material.id,
                borrower_id=users["b"].id,
                loaned_at=T0 + timedelta(minutes=5),
            )
        )
        assert second.material.quantity == 0

        with pytest.raises(OutOfStockError):
            await loan.execute(
                RecordLoanRequest(material_id=material.id, borrower_id=users["c"].id)
            )
        assert await _quantity(material_store, material.id) == 0

        # B: returning A's loan frees one unit, returning it again is refused
        returned = await give_back.execute(first.movement.id, RecordReturnRequest())
        assert returned.material.quantity == 1
        assert returned.movement.is_available is True
        assert returned.movement.returned_at is not None

        with pytest.raises(MovementNotFoundError):
            await give_back.execute(first.movement.id, RecordReturnRequest())
        assert await _quantity(material_store, material.id) == 1

        # C: history lists both loans, newest first
        records = await history.execute(material_id=material.id)
        assert [r.id for r in records] == [second.movement.id, first.movement.id]
        assert records[0].borrower_name == "User B"
        assert records[1].is_available is True
        assert records[0].is_available is False


class TestAtomicity:
    async def test_unknown_borrower_leaves_no_trace(
        self,
        db_pool,
        material: Material,
        material_store: SQLiteMaterialStore,
        movement_store: SQLiteMovementStore,
    ):
        with pytest.raises(UserNotFoundError):
            await RecordLoanUseCase().execute(
                RecordLoanRequest(material_id=material.id, borrower_id=4242)
            )

        assert await _quantity(material_store, material.id) == 2
        assert await movement_store.list_movements() == []

    async def test_unknown_material(self, db_pool, borrower: User):
        with pytest.raises(MaterialNotFoundError):
            await RecordLoanUseCase().execute(
                RecordLoanRequest(material_id=999, borrower_id=borrower.id)
            )

    async def test_unknown_movement(self, db_pool):
        with pytest.raises(MovementNotFoundError):
            await RecordReturnUseCase().execute(999, RecordReturnRequest())

    async def test_quantity_plus_open_loans_is_constant(
        self,
        db_pool,
        material: Material,
        users: dict[str, User],
        material_store: SQLiteMaterialStore,
        movement_store: SQLiteMovementStore,
    ):
        loan = RecordLoanUseCase()
        give_back = RecordReturnUseCase()
        total = material.quantity
        open_ids: list[int] = []

        async def check() -> None:
            quantity = await _quantity(material_store, material.id)
            assert quantity >= 0
            assert quantity + await movement_store.count_open(material.id) == total

        for step in range(6):
            if step % 3 == 2 and open_ids:
                await give_back.execute(open_ids.pop(0), RecordReturnRequest())
            else:
                try:
                    result = await loan.execute(
                        RecordLoanRequest(material_id=material.id, borrower_id=users["a"].id)
                    )
                    open_ids.append(result.movement.id)
                except OutOfStockError:
                    pass
            await check()
