"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from loanledger.core.entities import Material, Movement, MovementRecord, User, utcnow


class MaterialResponse(BaseModel):
    """Material response DTO."""

    id: int = Field(..., description="Material ID")
    name: str = Field(..., description="Material name")
    type: str | None = Field(default=None, description="Material type")
    quantity: int = Field(..., description="Units on the shelf")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, material: Material) -> "MaterialResponse":
        return cls(
            id=material.id,  # type: ignore[arg-type]
            name=material.name,
            type=material.type,
            quantity=material.quantity,
            created_at=material.created_at,
            updated_at=material.updated_at,
        )


class MaterialListResponse(BaseModel):
    """List of materials."""

    materials: list[MaterialResponse]
    total: int


class MovementResponse(BaseModel):
    """Loan movement response DTO."""

    id: int = Field(..., description="Movement ID")
    material_id: int
    borrower_id: int
    loaned_at: datetime
    returned_at: datetime | None = None
    is_available: bool = Field(..., description="True once the unit was returned")
    status: str = Field(..., description="open or closed")

    @classmethod
    def from_entity(cls, movement: Movement) -> "MovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            material_id=movement.material_id,
            borrower_id=movement.borrower_id,
            loaned_at=movement.loaned_at,
            returned_at=movement.returned_at,
            is_available=movement.is_available,
            status=movement.status.value,
        )


class MovementRecordResponse(MovementResponse):
    """Movement joined with material and borrower names."""

    material_name: str
    borrower_name: str

    @classmethod
    def from_record(cls, record: MovementRecord) -> "MovementRecordResponse":
        return cls(
            id=record.id,  # type: ignore[arg-type]
            material_id=record.material_id,
            borrower_id=record.borrower_id,
            loaned_at=record.loaned_at,
            returned_at=record.returned_at,
            is_available=record.is_available,
            status=record.status.value,
            material_name=record.material_name,
            borrower_name=record.borrower_name,
        )


class MovementListResponse(BaseModel):
    """Movements ordered by loan time, newest first."""

    movements: list[MovementRecordResponse]
    total: int


class LedgerEntryResponse(BaseModel):
    """A movement together with the material snapshot it produced."""

    movement: MovementResponse
    material: MaterialResponse


class RecordLoanResponse(LedgerEntryResponse):
    """Result of lending one unit."""


class RecordReturnResponse(LedgerEntryResponse):
    """Result of closing a loan."""


class UserResponse(BaseModel):
    """User response DTO. The password hash is never exposed."""

    id: int
    name: str
    email: str
    is_trainer: bool
    employee_code: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,  # type: ignore[arg-type]
            name=user.name,
            email=user.email,
            is_trainer=user.is_trainer,
            employee_code=user.employee_code,
            created_at=user.created_at,
        )


class DeleteResponse(BaseModel):
    """Acknowledgement of a deletion."""

    deleted: bool
    id: int


class DatabaseHealthResponse(BaseModel):
    """Result of probing the ledger database."""

    name: str = "sqlite"
    available: bool
    latency_ms: float | None = None
    pool_size: int | None = None
    idle_connections: int | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: DatabaseHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. OUT_OF_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=utcnow)
