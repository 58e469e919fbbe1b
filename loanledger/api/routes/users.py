"""
User registration and login endpoints.
"""

from fastapi import APIRouter, Depends, Path, status

from loanledger.api.dependencies import get_usr_store
from loanledger.application.dto.requests import LoginRequest, RegisterUserRequest
from loanledger.application.dto.responses import ErrorResponse, UserResponse
from loanledger.core.entities import User
from loanledger.core.exceptions import InvalidCredentialsError, UserNotFoundError
from loanledger.core.limits import MAX_DB_INTEGER
from loanledger.infrastructure.storage.sqlite import SQLiteUserStore

router = APIRouter(prefix="/api/users", tags=["users"])
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register_user(
    request: RegisterUserRequest,
    store: SQLiteUserStore = Depends(get_usr_store),
) -> UserResponse:
    """Register a borrower."""
    user = await store.create_user(
        User(
            name=request.name,
            email=request.email,
            is_trainer=request.is_trainer,
            employee_code=request.employee_code,
        ),
        request.password,
    )
    return UserResponse.from_entity(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(
    user_id: int = Path(..., le=MAX_DB_INTEGER),
    store: SQLiteUserStore = Depends(get_usr_store),
) -> UserResponse:
    """Get a registered user."""
    user = await store.get_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return UserResponse.from_entity(user)


@auth_router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(
    request: LoginRequest,
    store: SQLiteUserStore = Depends(get_usr_store),
) -> UserResponse:
    """Check email and password; no session or token is issued."""
    user = await store.authenticate(request.email, request.password)
    if user is None:
        raise InvalidCredentialsError()
    return UserResponse.from_entity(user)
