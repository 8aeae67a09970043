"""Request context middleware — X-Request-Id propagation and one access log line per request."""

import re
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-Id"
RESPONSE_TIME_HEADER = "X-Response-Time"

# Client-supplied ids end up in every log line, so only short opaque tokens are trusted
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Probes are polled constantly; logging them drowns the game traffic
_UNLOGGED_PATHS = frozenset({"/health", "/ready"})


def resolve_request_id(header_value: str | None) -> str:
    """Reuse the caller's id when it is well-formed, otherwise mint a fresh one."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request_id/method/path into the structlog context for the request's lifetime."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.1f}ms"

        if request.url.path not in _UNLOGGED_PATHS:
            logger.info("request_completed", status_code=response.status_code, duration_ms=round(elapsed_ms, 1))
        return response
