"""Timestamp encoding for SQLite text columns."""

from datetime import datetime

from loanledger.core.entities.movement import ensure_utc


def to_db_timestamp(value: datetime) -> str:
    """Encode as fixed-width UTC ISO-8601 so text order matches time order."""
    return ensure_utc(value).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))
