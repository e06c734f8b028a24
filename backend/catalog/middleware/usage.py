"""
API usage tracking middleware.
"""
from typing import Callable, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from catalog.core.config import settings
from catalog.core.database import get_db_session
from catalog.core.logging import get_logger
from catalog.core.metrics import normalize_path, usage_records_failed_total
from catalog.services.usage_tracker import usage_tracker

logger = get_logger(__name__)


class UsageTrackingMiddleware(BaseHTTPMiddleware):
    """Writes one api_usage row per API request."""

    def __init__(self, app: ASGIApp, path_prefix: Optional[str] = None, quota_cost: Optional[int] = None):
        """
        Initialize usage tracking middleware.

        Args:
            app: ASGI application
            path_prefix: Only requests under this prefix are recorded
            quota_cost: Quota units charged per request
        """
        super().__init__(app)
        self.path_prefix = path_prefix if path_prefix is not None else settings.API_PREFIX
        self.quota_cost = quota_cost if quota_cost is not None else settings.USAGE_QUOTA_COST_PER_REQUEST

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception as e:
            await self._record(request, 500, type(e).__name__)
            raise

        await self._record(request, response.status_code, getattr(request.state, "error_type", None))
        return response

    async def _record(self, request: Request, status_code: int, error_type: Optional[str]) -> None:
        """Persist the usage row. Failures are logged and never reach the caller."""
        try:
            async with get_db_session() as db:
                await usage_tracker.record(
                    db,
                    endpoint=normalize_path(request.url.path),
                    status_code=status_code,
                    method=request.method,
                    error_type=error_type,
                    quota_used=self.quota_cost,
                    metadata=getattr(request.state, "error_trace", None),
                )
        except Exception as e:
            usage_records_failed_total.inc()
            logger.warning(
                f"Failed to record API usage for {request.method} {request.url.path}: {e}",
                extra={"path": request.url.path, "status_code": status_code},
            )
