"""Global exception handlers for consistent error responses.

Every failure becomes the same JSON envelope as a success:
``{"status": <http status>, "message": <text>}``.

Design:
- AppError subclasses → the status code declared on the error class
- Starlette 404 → 404 "Unknown API"; 405 → 400 "Invalid request method"
- Request validation errors → 400
- Unexpected Exception → generic 500 (safety net, never leaks details)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import AppError
from app.core.logging import get_request_id
from app.schemas.articles import Envelope

logger = logging.getLogger(__name__)

UNKNOWN_ROUTE_MESSAGE = "Unknown API"
INVALID_METHOD_MESSAGE = "Invalid request method"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def envelope(status_code: int, message, headers: dict[str, str] | None = None) -> JSONResponse:
    """Build the response envelope shared by every endpoint."""
    return JSONResponse(
        status_code=status_code,
        content=Envelope(status=status_code, message=message).model_dump(),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    The status code comes from the error class (400, 401, 403, 429, 500).
    Structured details are logged, never returned.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse envelope with the error message.
    """
    status_code = exc.status_code
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "details": exc.details or {},
            "path": request.url.path,
            "request_id": get_request_id(),
        },
    )
    return envelope(status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Map routing errors from Starlette to the service's envelope."""
    if exc.status_code == 404:
        return envelope(404, UNKNOWN_ROUTE_MESSAGE)
    if exc.status_code == 405:
        logger.info(
            "invalid_method",
            extra={"path": request.url.path, "method": request.method},
        )
        return envelope(400, INVALID_METHOD_MESSAGE)
    return envelope(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report FastAPI parameter validation failures as 400."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    logger.warning("request_validation_failed", extra={"fields": fields, "path": request.url.path})
    return envelope(400, "Invalid request parameters.")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message; no stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
        exc_info=exc,
    )
    return envelope(500, INTERNAL_ERROR_MESSAGE)


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
