"""
Observability middleware and logging setup.

Adds correlation IDs and one structured log record per request.
"""

import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("courier.http")

CORRELATION_HEADER = "X-Correlation-ID"


def configure_logging(level: str = "INFO") -> None:
    """Configure the ``courier`` logger namespace once at startup."""
    root = logging.getLogger("courier")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s", defaults={"correlation_id": "-"})
        )
        root.addHandler(handler)


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}"

        logger.log(
            _level_for(response.status_code),
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "correlation_id": correlation_id,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "ip": request.client.host if request.client else "unknown",
            },
        )
        return response
