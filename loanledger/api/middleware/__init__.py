"""API middleware."""

from loanledger.api.middleware.error_handler import ErrorHandlerMiddleware
from loanledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
