"""Abstract interface for user storage."""

from abc import ABC, abstractmethod

from loanledger.core.entities.user import User


class IUserStore(ABC):
    """Interface for user registration and credential lookup."""

    @abstractmethod
    async def create_user(self, user: User, password: str) -> User:
        """Register a user, storing a hash of ``password``."""

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the user whose email and password match, else None."""
