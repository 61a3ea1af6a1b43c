"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, framework and unexpected) and render the endpoint's JSON error
shapes with proper HTTP status codes.

Design:
- AppError subclasses → 400, 429 or 500 with ``{error, details?}``
- RateLimitAppError → 429 with ``{success, error, retryAfter}`` + Retry-After
- Framework HTTP errors (404, 405) → ``{error}``
- Malformed request bodies → 400 ``{error}``
- Unexpected Exception → generic 500 (safety net)
"""

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    AppError,
    ConfigurationAppError,
    RateLimitAppError,
    UpstreamDeliveryAppError,
    UpstreamProtocolAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"
INVALID_BODY_MESSAGE = "Invalid request body"
UNEXPECTED_ERROR_MESSAGE = "An error occurred while sending the request"


def _status_for(exc: AppError) -> int:
    if isinstance(exc, ValidationAppError):
        return 400
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, (ConfigurationAppError, UpstreamDeliveryAppError, UpstreamProtocolAppError)):
        return 500
    return 400


def _rate_limit_headers(request: Request, exc: RateLimitAppError) -> dict[str, str]:
    app_settings = getattr(request.app.state, "settings", None)
    if app_settings is not None and not app_settings.app.rate_limit_include_headers:
        return {}
    return {
        "Retry-After": str(exc.retry_after),
        "X-RateLimit-Limit": str(exc.limit),
        "X-RateLimit-Remaining": "0",
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    Routes domain errors to HTTP status codes:
    - ValidationAppError → 400 Bad Request (client fault)
    - RateLimitAppError → 429 Too Many Requests
    - ConfigurationAppError / Upstream*AppError → 500 (server fault)

    ``exc.context`` is logged only; ``exc.details`` is the sole diagnostic
    returned to the caller.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error body.
    """
    status_code = _status_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "error_context": exc.context or {},
            "request_id": get_request_id(),
        },
    )

    if isinstance(exc, RateLimitAppError):
        return JSONResponse(
            status_code=status_code,
            content={
                "success": False,
                "error": exc.message,
                "retryAfter": exc.retry_after,
            },
            headers=_rate_limit_headers(request, exc) or None,
        )

    content: dict[str, str] = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details

    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown path, wrong method) as ``{error}``."""
    if exc.status_code == 405:
        message = METHOD_NOT_ALLOWED_MESSAGE
    else:
        message = str(exc.detail)

    logger.info(
        "http_error_handled",
        extra={
            "status_code": exc.status_code,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render unparseable or wrongly typed request bodies as 400."""
    logger.warning(
        "request_validation_failed",
        extra={
            "error_count": len(exc.errors()),
            "locations": [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()],
            "request_path": request.url.path,
        },
    )
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. Prevents information leakage (no stack traces to client).

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={"error": UNEXPECTED_ERROR_MESSAGE},
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
