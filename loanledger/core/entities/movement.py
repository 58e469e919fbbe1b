"""Stock movement (loan) domain entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utcnow() -> datetime:
    return datetime.now(UTC)


class MovementStatus(str, Enum):
    """Lifecycle state of a loan."""

    OPEN = "open"  # unit is on loan
    CLOSED = "closed"  # unit was returned


class Movement(BaseModel):
    """
    One loan of a single unit of a material.

    Open while ``returned_at`` is unset, closed once it is set. Availability is
    derived from ``returned_at`` and never stored on its own.
    """

    id: int | None = None
    material_id: int
    borrower_id: int
    loaned_at: datetime = Field(default_factory=utcnow)
    returned_at: datetime | None = None

    @field_validator("loaned_at")
    @classmethod
    def normalize_loaned_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("returned_at")
    @classmethod
    def normalize_returned_at(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    @property
    def is_available(self) -> bool:
        """True once the unit has been returned."""
        return self.returned_at is not None

    @property
    def status(self) -> MovementStatus:
        return MovementStatus.CLOSED if self.is_available else MovementStatus.OPEN


class MovementRecord(Movement):
    """A movement joined with the names of its material and borrower."""

    material_name: str
    borrower_name: str
