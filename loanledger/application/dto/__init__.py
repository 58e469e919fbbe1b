"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from loanledger.application.dto.requests import (
    CreateMaterialRequest,
    LoginRequest,
    RecordLoanRequest,
    RecordReturnRequest,
    RegisterUserRequest,
    UpdateMaterialRequest,
)
from loanledger.application.dto.responses import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    LedgerEntryResponse,
    MaterialListResponse,
    MaterialResponse,
    MovementListResponse,
    MovementRecordResponse,
    MovementResponse,
    DatabaseHealthResponse,
    RecordLoanResponse,
    RecordReturnResponse,
    UserResponse,
)

__all__ = [
    # Requests
    "RecordLoanRequest",
    "RecordReturnRequest",
    "CreateMaterialRequest",
    "UpdateMaterialRequest",
    "RegisterUserRequest",
    "LoginRequest",
    # Responses
    "MaterialResponse",
    "MaterialListResponse",
    "MovementResponse",
    "MovementRecordResponse",
    "MovementListResponse",
    "LedgerEntryResponse",
    "RecordLoanResponse",
    "RecordReturnResponse",
    "UserResponse",
    "DeleteResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    "ErrorResponse",
]
