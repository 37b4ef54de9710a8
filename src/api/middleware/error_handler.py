"""Global error handling middleware for consistent error responses."""

import logging
import traceback
from typing import Any, Callable

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.schemas.common import ErrorResponse, ValidationErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors.

    Use this class to raise application-specific errors that should
    be returned to the client with a specific status code and message.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Client-facing message from the error catalog.
            status_code: HTTP status code to return.
            error_type: Stable error code for client handling.
            details: Optional extra context for logs and clients.
        """
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Request validation error."""

    def __init__(self, message: str = "Validation error", details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="validation_error",
            details=details,
        )


class AuthenticationError(APIError):
    """Missing or invalid credentials."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_type: str = "authentication_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_type=error_type,
            details=details,
        )


class AuthorizationError(APIError):
    """Credentials were presented but rejected."""

    def __init__(
        self,
        message: str = "Access denied",
        error_type: str = "authorization_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_type=error_type,
            details=details,
        )


class ConflictError(APIError):
    """Request conflicts with existing state."""

    def __init__(
        self,
        message: str = "Resource already exists",
        error_type: str = "conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type=error_type,
            details=details,
        )


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_type: str = "not_found",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type=error_type,
            details=details,
        )


class UnlinkedResourceError(APIError):
    """Resource exists locally but is not yet linked upstream."""

    def __init__(
        self,
        message: str = "Resource is not ready",
        error_type: str = "unlinked_resource",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_type=error_type,
            details=details,
        )


class UpstreamError(APIError):
    """Fulfillment or payment provider failure."""

    def __init__(
        self,
        message: str = "Upstream service failed",
        error_type: str = "upstream_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type=error_type,
            details=details,
        )


class PersistenceError(APIError):
    """Database failure."""

    def __init__(
        self,
        message: str = "Database operation failed",
        error_type: str = "persistence_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type=error_type,
            details=details,
        )


class ConfigurationError(APIError):
    """Missing per-store configuration or secret."""

    def __init__(
        self,
        message: str = "Service is not configured",
        error_type: str = "configuration_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type=error_type,
            details=details,
        )


def create_error_response(
    message: str,
    status_code: int,
    error_type: str | None = None,
    details: dict[str, Any] | None = None,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Args:
        message: Client-facing error message.
        status_code: HTTP status code.
        error_type: Optional stable error code.
        details: Optional error details.
        request_id: Optional request ID for tracing.
        headers: Optional response headers.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse(
        error=message,
        code=error_type,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def _log_api_error(error: APIError, request_id: str | None) -> None:
    log = logger.error if error.status_code >= 500 else logger.warning
    log(
        "API error: %s - %s",
        error.error_type,
        error.message,
        extra={"request_id": request_id, "status_code": error.status_code, "details": error.details},
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Exception handler for APIError raised by routes and dependencies."""
    request_id = request.headers.get("X-Request-ID")
    _log_api_error(exc, request_id)
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return create_error_response(
        message=exc.message,
        status_code=exc.status_code,
        error_type=exc.error_type,
        details=exc.details,
        request_id=request_id,
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Exception handler for framework HTTP errors (unknown routes, bad methods)."""
    logger.warning("HTTP exception: %s - %s", exc.status_code, exc.detail)
    return create_error_response(
        message=str(exc.detail),
        status_code=exc.status_code,
        request_id=request.headers.get("X-Request-ID"),
        headers=getattr(exc, "headers", None),
    )


def _validation_message(error: dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if ctx.get("error"):
        return str(ctx["error"])
    msg = str(error.get("msg", ""))
    if msg.startswith("Value error, "):
        return msg.removeprefix("Value error, ")
    loc = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{loc}: {error.get('msg')}" if loc else str(error.get("msg"))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with a list of human-readable validation messages.

    Schema validators raise ValueError with catalog messages; those are
    surfaced verbatim. Other pydantic errors are rendered as "field: msg".
    """
    messages: list[str] = []
    for error in exc.errors():
        message = _validation_message(error)
        if message not in messages:
            messages.append(message)

    logger.info("Request validation failed for %s: %s", request.url.path, messages)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(errors=messages).model_dump(mode="json"),
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Middleware to catch and format all exceptions.

    Ensures consistent error response format across the application.
    Logs full stack traces for debugging while returning safe messages to clients.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        response = await call_next(request)
        return response

    except APIError as e:
        _log_api_error(e, request_id)
        return create_error_response(
            message=e.message,
            status_code=e.status_code,
            error_type=e.error_type,
            details=e.details,
            request_id=request_id,
        )

    except Exception as e:
        # Unexpected exceptions - log full stack trace
        logger.error(
            "Unhandled exception: %s\n%s",
            str(e),
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="internal_error",
            request_id=request_id,
        )
