"""
Domain exceptions for the loan ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Lookup Exceptions
class NotFoundError(LedgerError):
    """Referenced entity does not exist."""

    pass


class MaterialNotFoundError(NotFoundError):
    """Material not found in the catalog."""

    def __init__(self, material_id: int):
        super().__init__(
            f"Material not found: {material_id}",
            code="MATERIAL_NOT_FOUND",
            details={"material_id": material_id},
        )


class MovementNotFoundError(NotFoundError):
    """Loan does not exist or was already returned.

    The two causes are reported as one condition.
    """

    def __init__(self, movement_id: int):
        super().__init__(
            f"Loan not found or already returned: {movement_id}",
            code="LOAN_NOT_FOUND",
            details={"movement_id": movement_id},
        )


class UserNotFoundError(NotFoundError):
    """User not found in the registry."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


# Stock Exceptions
class OutOfStockError(LedgerError):
    """No units of the material are available for loan."""

    def __init__(self, material_id: int):
        super().__init__(
            f"Material out of stock: {material_id}",
            code="OUT_OF_STOCK",
            details={"material_id": material_id, "available": 0},
        )


# Conflict Exceptions
class ConflictError(LedgerError):
    """Request conflicts with existing state."""

    pass


class DuplicateEmailError(ConflictError):
    """A user with the same email is already registered."""

    def __init__(self, email: str):
        super().__init__(
            f"Email already registered: {email}",
            code="DUPLICATE_EMAIL",
            details={"email": email},
        )


class MaterialInUseError(ConflictError):
    """Material is referenced by loan history and cannot be deleted."""

    def __init__(self, material_id: int):
        super().__init__(
            f"Material {material_id} has loan history and cannot be deleted",
            code="MATERIAL_IN_USE",
            details={"material_id": material_id},
        )


# Authentication Exceptions
class AuthenticationError(LedgerError):
    """Credential check failed."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Email and password do not match a registered user."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )
