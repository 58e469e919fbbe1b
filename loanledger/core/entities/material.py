"""
Material domain entity for the materials catalog.

Represents a pool of identical physical units that can be lent out.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class Material(BaseModel):
    """
    A material in the catalog.

    ``quantity`` counts the units currently on the shelf, i.e. not on loan.
    """

    id: int | None = None
    name: str = Field(..., min_length=1)
    type: str | None = None
    quantity: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0
