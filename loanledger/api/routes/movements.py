"""Loan and return endpoints."""

from fastapi import APIRouter, Body, Depends, Path, Query, status

from loanledger.api.dependencies import (
    get_list_movements_use_case,
    get_mov_store,
    get_record_loan_use_case,
    get_record_return_use_case,
)
from loanledger.application.dto.requests import RecordLoanRequest, RecordReturnRequest
from loanledger.application.dto.responses import (
    ErrorResponse,
    MovementListResponse,
    MovementResponse,
    RecordLoanResponse,
    RecordReturnResponse,
)
from loanledger.application.use_cases.list_movements import ListMovementsUseCase
from loanledger.application.use_cases.record_loan import RecordLoanUseCase
from loanledger.application.use_cases.record_return import RecordReturnUseCase
from loanledger.core.exceptions import NotFoundError
from loanledger.core.limits import MAX_DB_INTEGER
from loanledger.infrastructure.storage.sqlite import SQLiteMovementStore

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.post(
    "",
    response_model=RecordLoanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_loan(
    request: RecordLoanRequest,
    use_case: RecordLoanUseCase = Depends(get_record_loan_use_case),
) -> RecordLoanResponse:
    """Lend one unit of a material."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.put(
    "/{movement_id}/return",
    response_model=RecordReturnResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def record_return(
    movement_id: int = Path(..., le=MAX_DB_INTEGER),
    request: RecordReturnRequest | None = Body(default=None),
    use_case: RecordReturnUseCase = Depends(get_record_return_use_case),
) -> RecordReturnResponse:
    """Close an open loan. The body is optional."""
    result = await use_case.execute(movement_id, request or RecordReturnRequest())
    return use_case.to_response(result)


@router.get("", response_model=MovementListResponse)
async def list_movements(
    material_id: int | None = Query(
        default=None, le=MAX_DB_INTEGER, description="Only this material"
    ),
    use_case: ListMovementsUseCase = Depends(get_list_movements_use_case),
) -> MovementListResponse:
    """Loan history, newest loan first."""
    records = await use_case.execute(material_id=material_id)
    return use_case.to_response(records)


@router.get(
    "/{movement_id}",
    response_model=MovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_movement(
    movement_id: int = Path(..., le=MAX_DB_INTEGER),
    store: SQLiteMovementStore = Depends(get_mov_store),
) -> MovementResponse:
    """Get a single movement."""
    movement = await store.get_movement(movement_id)
    if movement is None:
        raise NotFoundError(
            f"Movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )
    return MovementResponse.from_entity(movement)
