"""
Core middleware package.

- Error handling with sensitive data sanitization
- Structured logging with PII masking
- Session authentication that resolves the caller's principal
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
    get_logger,
)

from core.middleware.authentication import (
    SessionAuthenticationMiddleware,
    get_principal,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    "get_logger",
    # Authentication
    "SessionAuthenticationMiddleware",
    "get_principal",
]
