"""
Error responses for the ledger API.

Every failure leaves the API in the same JSON shape (``ErrorResponse``):
a machine-readable ``error_code``, a ``message``, a recovery ``hint`` and,
for client errors, a ``detail`` string built from the exception details.
Server-side failures are logged with their traceback and answered with an
opaque message.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from loanledger.application.dto.responses import ErrorResponse
from loanledger.config import get_logger
from loanledger.core.exceptions import (
    AuthenticationError,
    ConflictError,
    LedgerError,
    NotFoundError,
    OutOfStockError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"
INTERNAL_ERROR_MESSAGE = "Internal server error"

# First match wins; subclasses before their bases
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    OutOfStockError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

HINT_MAP: dict[str, str] = {
    "MATERIAL_NOT_FOUND": "Check the material ID and try GET /api/materials to list materials.",
    "LOAN_NOT_FOUND": "The loan does not exist or was already returned. See GET /api/movements.",
    "MOVEMENT_NOT_FOUND": "Check the movement ID and try GET /api/movements to list loans.",
    "USER_NOT_FOUND": "Register the borrower with POST /api/users first.",
    "OUT_OF_STOCK": "No units are on the shelf. Wait for a return or restock the material.",
    "DUPLICATE_EMAIL": "A user with this email already exists. Log in instead.",
    "MATERIAL_IN_USE": "The material has loan history and cannot be deleted.",
    "INVALID_CREDENTIALS": "Check the email and password.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
}

STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Authentication failed.",
    404: "The requested resource was not found. Verify the ID.",
    405: "Check the HTTP method for this path.",
    409: "The request conflicts with the current state. Reload and retry.",
    500: "An internal error occurred. Check server logs.",
}

# Codes for errors raised by routing itself (unknown path, wrong method)
HTTP_STATUS_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def _get_hint(error_code: str, status_code: int) -> str:
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _render(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_get_hint(error_code, status_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Translate a domain or unexpected exception into an error response."""
    status_code = _status_for(exc)
    if isinstance(exc, LedgerError):
        error_code, message = exc.code, exc.message
        details = exc.details
    else:
        # Unexpected failures never expose their exception class
        error_code = exc.__class__.__name__ if status_code < 500 else INTERNAL_ERROR_CODE
        message = str(exc)
        details = {}

    log = logger.bind(
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        error_code=error_code,
    )

    if status_code >= 500:
        log.error("request_failed_internally", error=str(exc), exc_info=exc)
        return _render(request, status_code, error_code, INTERNAL_ERROR_MESSAGE)

    log.info("request_rejected", status_code=status_code)
    detail = ", ".join(f"{k}={v}" for k, v in details.items() if v is not None) or None
    return _render(request, status_code, error_code, message, detail)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence for exceptions no handler claimed."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, request-validation and routing errors."""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed bodies and query strings are 400s, like domain validation."""
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _render(
            request,
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            "Request validation failed",
            "; ".join(problems),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        error_code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        return _render(request, exc.status_code, error_code, str(exc.detail or error_code))
