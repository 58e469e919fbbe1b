"""Input checks shared by the stock ledger use cases."""

from datetime import datetime

from loanledger.core.entities import ensure_utc, utcnow
from loanledger.core.exceptions import ValidationError
from loanledger.core.limits import MAX_DB_INTEGER


def require_positive_id(field: str, value: int | None) -> int:
    """Return ``value`` if it is a positive integer id, else raise ValidationError."""
    if value is None:
        raise ValidationError(field, "is required")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(field, "must be a positive integer", value)
    if value > MAX_DB_INTEGER:
        raise ValidationError(field, f"must not exceed {MAX_DB_INTEGER}", value)
    return value


def utc_or_now(field: str, value: datetime | None) -> datetime:
    """Normalise an optional timestamp to UTC, defaulting to the current time."""
    if value is None:
        return utcnow()
    try:
        return ensure_utc(value)
    except OverflowError as e:
        raise ValidationError(field, "is outside the supported date range", value) from e
