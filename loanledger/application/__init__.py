"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing the stock ledger use cases over the storage interfaces

Catalog and user endpoints talk to their stores directly.
"""

from loanledger.application.dto import (
    CreateMaterialRequest,
    ErrorResponse,
    HealthResponse,
    LoginRequest,
    MaterialResponse,
    MovementListResponse,
    MovementResponse,
    DatabaseHealthResponse,
    RecordLoanRequest,
    RecordLoanResponse,
    RecordReturnRequest,
    RecordReturnResponse,
    RegisterUserRequest,
    UpdateMaterialRequest,
    UserResponse,
)
from loanledger.application.use_cases import (
    ListMovementsUseCase,
    RecordLoanUseCase,
    RecordReturnUseCase,
)

__all__ = [
    # Request DTOs
    "RecordLoanRequest",
    "RecordReturnRequest",
    "CreateMaterialRequest",
    "UpdateMaterialRequest",
    "RegisterUserRequest",
    "LoginRequest",
    # Response DTOs
    "MaterialResponse",
    "MovementResponse",
    "MovementListResponse",
    "RecordLoanResponse",
    "RecordReturnResponse",
    "UserResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    "ErrorResponse",
    # Use Cases
    "RecordLoanUseCase",
    "RecordReturnUseCase",
    "ListMovementsUseCase",
]
