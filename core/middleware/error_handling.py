"""
Error handling middleware with security-compliant error sanitization.

Every error leaves the API as ``{"error": <message>, "code": <CODE>}``;
``details`` is added only in debug mode or for validation failures.
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import FormHireError, ValidationError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that should never be logged or returned
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'(postgres(?:ql)?(?:\+\w+)?|redis)://[^\s"]+', re.IGNORECASE),  # DSNs
    re.compile(r'\b\d{3}-\d{2}-\d{4}\b'),  # SSN
    re.compile(r'\b\d{16}\b'),  # Credit card
]


def sanitize_error_message(message: Any) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def get_safe_error_details(exc: Exception, include_details: bool = False) -> dict[str, Any]:
    """
    Extract safe error details without exposing sensitive information.

    Args:
        exc: The exception to extract details from
        include_details: Whether to include the traceback (only in dev)

    Returns:
        Dictionary with safe error details
    """
    details = {
        "type": type(exc).__name__,
        "message": sanitize_error_message(str(exc)),
    }

    if include_details:
        details["traceback"] = sanitize_error_message(traceback.format_exc())

    return details


def error_body(
    message: str,
    code: str,
    details: Optional[Any] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"error": sanitize_error_message(message), "code": code}
    if details:
        body["details"] = details
    return body


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """
    Format request validation errors into a user-friendly structure.

    Input values are echoed back only when they are simple and
    match none of the sensitive patterns.
    """
    errors = []
    for error in exc.errors():
        error_dict = {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        }

        if "input" in error:
            input_value = error["input"]
            if isinstance(input_value, (str, int, float, bool)):
                input_str = str(input_value)
                if not any(pattern.search(input_str) for pattern in SENSITIVE_PATTERNS):
                    error_dict["input"] = input_value

        errors.append(error_dict)

    return errors


def _domain_error_response(exc: FormHireError, debug: bool) -> JSONResponse:
    details: Any = None
    if isinstance(exc, ValidationError) and exc.fields:
        details = {"fields": exc.fields}
    elif debug and exc.details:
        details = exc.details
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.code, details),
    )


class ErrorHandlingMiddleware:
    """
    Outermost safety net. Converts anything that escapes the route-level
    exception handlers into a sanitized JSON error.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            debug: Whether to include detailed error information
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = await self._handle_exception(exc, scope)
            await response(scope, receive, send)

    async def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        """
        Map an exception to a JSON response.

        Args:
            exc: The exception to handle
            scope: ASGI scope for context

        Returns:
            JSONResponse with error details
        """
        request_path = scope.get("path", "unknown")
        request_method = scope.get("method", "unknown")

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error_code = "INTERNAL_SERVER_ERROR"
        message = "An unexpected error occurred"
        details = None

        if isinstance(exc, FormHireError):
            logger.warning(
                f"{type(exc).__name__}: {request_method} {request_path} - "
                f"{sanitize_error_message(exc.message)}"
            )
            return _domain_error_response(exc, self.debug)

        elif isinstance(exc, StarletteHTTPException):
            status_code = exc.status_code
            error_code = f"HTTP_{exc.status_code}"
            message = sanitize_error_message(exc.detail)
            logger.warning(
                f"HTTP exception: {request_method} {request_path} - "
                f"Status: {status_code}, Message: {message}"
            )

        elif isinstance(exc, OperationalError):
            error_code = "DATABASE_ERROR"
            message = "Database service temporarily unavailable"
            logger.error(
                f"Database operational error: {request_method} {request_path}",
                exc_info=True,
            )

        elif isinstance(exc, SQLAlchemyError):
            error_code = "DATABASE_ERROR"
            message = "A database error occurred"
            if self.debug:
                details = get_safe_error_details(exc, include_details=True)
            logger.error(
                f"SQLAlchemy error: {request_method} {request_path}",
                exc_info=not self.debug,
            )

        else:
            if self.debug:
                details = get_safe_error_details(exc, include_details=True)
            logger.error(
                f"Unhandled exception: {request_method} {request_path} - "
                f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
                exc_info=True,
            )

        return JSONResponse(
            status_code=status_code,
            content=error_body(message, error_code, details),
        )


def setup_error_handlers(app, debug: bool = False):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
        debug: Whether 500 responses carry exception details
    """

    @app.exception_handler(FormHireError)
    async def formhire_exception_handler(request: Request, exc: FormHireError):
        """Handle domain errors raised by services and dependencies."""
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            f"{type(exc).__name__}: {request.method} {request.url.path} - "
            f"{sanitize_error_message(exc.message)}"
        )
        return _domain_error_response(exc, debug)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail, f"HTTP_{exc.status_code}"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request body/query validation errors."""
        errors = format_validation_errors(exc)
        fields = [e["field"] for e in errors if e["field"]]
        message = "Invalid request"
        if fields:
            message = f"Invalid or missing fields: {', '.join(fields)}"
        logger.warning(
            f"Validation error: {request.method} {request.url.path} - Fields: {fields}"
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(message, "VALIDATION_ERROR", errors),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Database failures on the primary path are fatal to the request."""
        logger.error(
            f"Database error: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )
        details = get_safe_error_details(exc) if debug else None
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("A database error occurred", "DATABASE_ERROR", details),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions."""
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )
        details = get_safe_error_details(exc) if debug else None
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("An unexpected error occurred", "INTERNAL_SERVER_ERROR", details),
        )
