"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from loanledger.core.limits import MAX_DB_INTEGER

# --- Stock Ledger ---


class RecordLoanRequest(BaseModel):
    """Request to lend one unit of a material.

    Id bounds are checked by the use case so every caller gets the same error.
    """

    material_id: int = Field(..., description="Material to lend", examples=[1])
    borrower_id: int = Field(..., description="Borrowing user", examples=[1])
    loaned_at: datetime | None = Field(
        default=None,
        description="Loan time (defaults to now, naive values are UTC)",
    )


class RecordReturnRequest(BaseModel):
    """Request to close an open loan."""

    returned_at: datetime | None = Field(
        default=None,
        description="Return time (defaults to now, naive values are UTC)",
    )


# --- Material Catalog ---


class CreateMaterialRequest(BaseModel):
    """Request to add a material to the catalog."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Yoga mat"])
    type: str | None = Field(default=None, max_length=100, examples=["mat"])
    quantity: int = Field(default=0, ge=0, le=MAX_DB_INTEGER, description="Units on the shelf")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class UpdateMaterialRequest(BaseModel):
    """Partial material update; omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: str | None = Field(default=None, max_length=100)
    quantity: int | None = Field(
        default=None,
        ge=0,
        le=MAX_DB_INTEGER,
        description="Stock adjustment (restock or write-off)",
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


# --- Users ---


class RegisterUserRequest(BaseModel):
    """Request to register a borrower."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=254, examples=["ana@example.com"])
    password: str = Field(..., min_length=1)
    is_trainer: bool = False
    employee_code: str | None = Field(default=None, max_length=50)

    @field_validator("name", "email")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("must be an email address")
        return v.lower()


class LoginRequest(BaseModel):
    """Email and password credential check."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
