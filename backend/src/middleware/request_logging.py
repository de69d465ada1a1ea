"""
Request ID propagation and access logging.

Every request gets an ID, taken from the incoming X-Request-ID header or
freshly generated, which is echoed back on the response and attached to
both log lines emitted for the request.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

REQUEST_ID_HEADER = "X-Request-ID"


def client_address(request: Request) -> str:
    """Originating client address, honoring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log request arrival and completion under a propagated request ID."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "event": "request.start",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": client_address(request),
            },
        )

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "event": "request.complete",
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
