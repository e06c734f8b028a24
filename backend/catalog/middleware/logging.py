"""
Request/response logging middleware.
"""
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from catalog.core.logging import get_logger

logger = get_logger(__name__)

# Scraped on a timer; logged at debug so they don't drown catalog traffic
QUIET_PATHS = frozenset({"/health", "/health/detailed", "/metrics"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each catalog request once on the way in and once on the way out."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        quiet = path in QUIET_PATHS
        start_time = time.perf_counter()

        request_log = {
            "method": request.method,
            "path": path,
            "query_params": dict(request.query_params),
            "client_host": request.client.host if request.client else None,
            "authenticated": request.headers.get("authorization", "").lower().startswith("bearer "),
        }
        (logger.debug if quiet else logger.info)(
            f"Request: {request.method} {path}", extra={"request": request_log}
        )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Response: {request.method} {path} - unhandled error ({duration_ms:.2f}ms)",
                extra={"response": {"status_code": 500, "duration_ms": duration_ms}},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log = logger.error
        elif status >= 400:
            log = logger.warning
        elif quiet:
            log = logger.debug
        else:
            log = logger.info
        log(
            f"Response: {request.method} {path} - {status} ({duration_ms:.2f}ms)",
            extra={"response": {"status_code": status, "duration_ms": duration_ms}},
        )
        return response
