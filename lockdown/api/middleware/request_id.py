"""
Request correlation middleware.

Every request gets an id (taken from X-Request-ID when the caller sends one)
that is echoed on the response and attached to every log line written while
the request is handled. The principal id is cleared at the start of each
request; the principal dependency fills it in once the user is known.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lockdown.logging_config import get_logger, principal_id_var, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Scope the logging context to one request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        request_token = request_id_var.set(request_id)
        principal_token = principal_id_var.set(None)
        try:
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            response.headers[REQUEST_ID_HEADER] = request_id

            if elapsed_ms > SLOW_REQUEST_MS:
                logger.warning(
                    "Slow request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": elapsed_ms,
                    },
                )
            elif request.method in MUTATING_METHODS:
                logger.debug(
                    "%s %s -> %s",
                    request.method,
                    request.url.path,
                    response.status_code,
                    extra={"duration_ms": elapsed_ms},
                )
            return response
        finally:
            principal_id_var.reset(principal_token)
            request_id_var.reset(request_token)
