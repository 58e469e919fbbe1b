"""Core domain layer - entities, interfaces, and exceptions."""

from loanledger.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
