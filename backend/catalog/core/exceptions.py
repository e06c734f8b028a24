"""
Domain error taxonomy and the FastAPI handlers that render it.

Services raise these; routers let them propagate and the handlers
registered in ``create_app`` turn them into ``{"error", "detail"}`` bodies.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog.core.logging import get_logger
from catalog.core.metrics import errors_total, normalize_path
from catalog.core.sentry import capture_exception

logger = get_logger(__name__)


class CatalogError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "InternalError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CatalogError):
    """Bad or missing id or required field."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "ValidationError"


class NotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "NotFound"


class DuplicateReactionError(CatalogError):
    """A (comment, type, user) reaction already exists."""
    status_code = status.HTTP_409_CONFLICT
    error_type = "DuplicateReaction"


class AuthenticationError(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "AuthenticationError"


class InternalError(CatalogError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "InternalError"


def generate_debug_insights(request: Request, error_type: str, message: str) -> List[str]:
    """Short hints stored with the error trace of a failed request."""
    insights = [
        f"Request method: {request.method}",
        f"Request path: {request.url.path}",
    ]

    lowered = message.lower()
    if error_type == "ValidationError":
        insights.append("Request body, path or query parameters failed validation")
    if "duplicate" in lowered or error_type == "DuplicateReaction":
        insights.append("Attempting to insert duplicate unique value")
    if "syntax error" in lowered:
        insights.append("SQL syntax error in database query")
    if "does not exist" in lowered and "relation" in lowered:
        insights.append("Database table or relation not found")

    if request.query_params:
        insights.append(f"Query parameters: {dict(request.query_params)}")

    insights.append(f"Timestamp: {datetime.now(timezone.utc).isoformat()}")
    return insights


def _error_response(request: Request, status_code: int, error_type: str, message: str) -> JSONResponse:
    # Picked up by UsageTrackingMiddleware when it records the call
    request.state.error_type = error_type
    request.state.error_trace = {
        "message": message,
        "path": request.url.path,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "query": dict(request.query_params),
        "debugInsights": generate_debug_insights(request, error_type, message),
    }
    return JSONResponse(
        status_code=status_code,
        content={"error": error_type, "detail": message},
    )


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    errors_total.labels(error_type=exc.error_type, endpoint=normalize_path(request.url.path)).inc()
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{exc.error_type}: {exc.message}",
        extra={"path": request.url.path, "method": request.method, "error_type": exc.error_type},
    )
    return _error_response(request, exc.status_code, exc.error_type, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    fields = [".".join(str(loc) for loc in err.get("loc", ()) if loc != "body") for err in errors]
    message = "Invalid request: " + ", ".join(f for f in fields if f) if fields else "Invalid request"
    response = _error_response(request, status.HTTP_400_BAD_REQUEST, ValidationError.error_type, message)
    request.state.error_trace["errors"] = errors
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    errors_total.labels(error_type=type(exc).__name__, endpoint=normalize_path(request.url.path)).inc()
    capture_exception(exc, {"request": {"method": request.method, "path": request.url.path}})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": InternalError.error_type, "detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handlers to an application."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
