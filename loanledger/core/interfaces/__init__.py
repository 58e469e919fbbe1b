"""Core interfaces (ports) for dependency injection."""

from loanledger.core.interfaces.material_store import IMaterialStore
from loanledger.core.interfaces.movement_store import IMovementStore
from loanledger.core.interfaces.user_store import IUserStore

__all__ = [
    "IMaterialStore",
    "IMovementStore",
    "IUserStore",
]
