"""Error handling middleware."""

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.core.exceptions import AppException, StoreException
from app.core.responses import UTF8JSONResponse

logger = structlog.get_logger(__name__)


def _format_validation_error(error: dict) -> str:
    """Turn one pydantic error entry into a readable sentence."""
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    message = str(error.get("msg", "Invalid value"))
    # Custom validators raise ValueError; pydantic prefixes those messages.
    message = message.removeprefix("Value error, ")
    if error.get("type") == "missing" and location:
        return f"{location[-1]} is required"
    if location and error.get("type") != "value_error":
        return f"{'.'.join(location)}: {message}"
    return message


async def app_exception_handler(request: Request, exc: AppException) -> UTF8JSONResponse:
    """
    Handle custom application exceptions.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response
    """
    content = {"error": exc.message, **exc.payload()}

    if isinstance(exc, StoreException):
        logger.error(
            "store_error",
            method=request.method,
            path=request.url.path,
            error=str(exc.cause) if exc.cause else exc.message,
        )
        if not settings.is_production and exc.cause is not None:
            content["debug"] = str(exc.cause)

    return UTF8JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> UTF8JSONResponse:
    """
    Handle HTTP exceptions.

    Args:
        request: Request object
        exc: HTTP exception

    Returns:
        JSON error response
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)

    return UTF8JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> UTF8JSONResponse:
    """
    Handle request validation errors.

    All violated rules are aggregated into a single ``details`` list.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        JSON error response with validation details
    """
    details = [_format_validation_error(error) for error in exc.errors()]
    return UTF8JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


async def general_exception_handler(request: Request, exc: Exception) -> UTF8JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: Request object
        exc: Exception

    Returns:
        JSON error response
    """
    logger.exception("unhandled_exception", method=request.method, path=request.url.path)

    content = {"error": "An unexpected error occurred"}
    if not settings.is_production:
        content["debug"] = str(exc)

    return UTF8JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )
