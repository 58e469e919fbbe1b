"""Concurrent loans and returns against one material."""

import asyncio

import pytest

from loanledger.application.dto.requests import RecordLoanRequest, RecordReturnRequest
from loanledger.application.use_cases import RecordLoanUseCase, RecordReturnUseCase
from loanledger.core.entities import Material, User
from loanledger.core.exceptions import MovementNotFoundError, OutOfStockError
from loanledger.infrastructure.storage.sqlite import SQLiteMaterialStore, SQLiteMovementStore


@pytest.fixture
async def last_unit(db_pool, material_store: SQLiteMaterialStore) -> Material:
    return await material_store.create_material(Material(name="Last unit", quantity=1))


class TestConcurrentLedger:
    async def test_two_loans_for_one_unit(
        self,
        last_unit: Material,
        borrower: User,
        material_store: SQLiteMaterialStore,
        movement_store: SQLiteMovementStore,
    ):
        request = RecordLoanRequest(material_id=last_unit.id, borrower_id=borrower.id)

        results = await asyncio.gather(
            RecordLoanUseCase().execute(request),
            RecordLoanUseCase().execute(request),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], OutOfStockError)
        assert (await material_store.get_material(last_unit.id)).quantity == 0
        assert await movement_store.count_open(last_unit.id) == 1

    async def test_two_returns_of_one_loan(
        self,
        last_unit: Material,
        borrower: User,
        material_store: SQLiteMaterialStore,
    ):
        loan = await RecordLoanUseCase().execute(
            RecordLoanRequest(material_id=last_unit.id, borrower_id=borrower.id)
        )

        results = await asyncio.gather(
            RecordReturnUseCase().execute(loan.movement.id, RecordReturnRequest()),
            RecordReturnUseCase().execute(loan.movement.id, RecordReturnRequest()),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], MovementNotFoundError)
        assert (await material_store.get_material(last_unit.id)).quantity == 1

    async def test_many_borrowers_never_oversell(
        self,
        db_pool,
        borrower: User,
        material_store: SQLiteMaterialStore,
        movement_store: SQLiteMovementStore,
    ):
        material = await material_store.create_material(Material(name="Bands", quantity=3))
        request = RecordLoanRequest(material_id=material.id, borrower_id=borrower.id)

        results = await asyncio.gather(
            *(RecordLoanUseCase().execute(request) for _ in range(8)),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 3
        assert all(isinstance(r, OutOfStockError) for r in results if isinstance(r, Exception))
        assert (await material_store.get_material(material.id)).quantity == 0
        assert await movement_store.count_open(material.id) == 3
