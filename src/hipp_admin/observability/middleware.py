"""
hipp_admin.observability.middleware

Request-scoped logging context and access log.

Responsibilities:
- Accept a caller-supplied `x-request-id` (bounded) or mint one.
- Bind request id, method, path and client address into structlog contextvars.
- Emit one `request_completed` line per request, or `request_failed` when the
  handler raises.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"
_MAX_REQUEST_ID_LEN = 128


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if incoming and len(incoming) <= _MAX_REQUEST_ID_LEN and incoming.isprintable():
        return incoming
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.error("request_failed", duration_ms=_elapsed_ms(started))
            raise
        else:
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
        finally:
            # Contextvars outlive the request under asyncio; reset per request.
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
