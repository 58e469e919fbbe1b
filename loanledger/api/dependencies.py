"""
Dependency injection container for FastAPI.

Provides store and use case instances to route handlers.
"""

from loanledger.application.use_cases import (
    ListMovementsUseCase,
    RecordLoanUseCase,
    RecordReturnUseCase,
)
from loanledger.infrastructure.storage.sqlite import (
    SQLiteMaterialStore,
    SQLiteMovementStore,
    SQLiteUserStore,
    get_material_store,
    get_movement_store,
    get_user_store,
)


# Store dependencies
async def get_mat_store() -> SQLiteMaterialStore:
    """Get material store."""
    return await get_material_store()


async def get_mov_store() -> SQLiteMovementStore:
    """Get movement store."""
    return await get_movement_store()


async def get_usr_store() -> SQLiteUserStore:
    """Get user store."""
    return await get_user_store()


# Ledger use case dependencies
def get_record_loan_use_case() -> RecordLoanUseCase:
    """Get record loan use case."""
    return RecordLoanUseCase()


def get_record_return_use_case() -> RecordReturnUseCase:
    """Get record return use case."""
    return RecordReturnUseCase()


def get_list_movements_use_case() -> ListMovementsUseCase:
    """Get list movements use case."""
    return ListMovementsUseCase()
