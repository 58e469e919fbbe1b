"""Per-request logging with a correlation id."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from loanledger.config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"


def _request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    return supplied[:64] or uuid.uuid4().hex[:8]


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one ``request_completed`` event per request.

    The request id (taken from ``X-Request-ID`` or generated) is bound into
    structlog's context vars for the duration of the request, so events from
    stores and use cases carry it too. It is echoed back in the response
    together with the handling time.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error("request_crashed", error=str(e))
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "request_completed", status=response.status_code, duration_ms=round(elapsed_ms, 2)
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.2f}ms"
        return response
