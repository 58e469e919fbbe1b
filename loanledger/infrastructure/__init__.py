"""Infrastructure layer implementations."""

from loanledger.infrastructure import storage

__all__ = ["storage"]
