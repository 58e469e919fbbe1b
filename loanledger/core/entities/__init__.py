"""Core domain entities."""

from loanledger.core.entities.material import Material
from loanledger.core.entities.movement import (
    Movement,
    MovementRecord,
    MovementStatus,
    ensure_utc,
    utcnow,
)
from loanledger.core.entities.user import User

__all__ = [
    # Catalog
    "Material",
    # Ledger
    "Movement",
    "MovementRecord",
    "MovementStatus",
    "ensure_utc",
    "utcnow",
    # Users
    "User",
]
