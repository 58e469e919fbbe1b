"""User domain entity (borrowers)."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class User(BaseModel):
    """A registered user who can borrow materials."""

    id: int | None = None
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    is_trainer: bool = False
    employee_code: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        # Uniqueness is case-insensitive
        return v.strip().lower()
