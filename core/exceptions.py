"""
Domain exceptions.

Services raise these; the error handlers in core.middleware.error_handling
turn them into the ``{"error": ..., "code": ...}`` JSON envelope.
"""

from typing import Any, Optional


class FormHireError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(FormHireError):
    """Input failed validation. ``fields`` lists the offending field names."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message, {"fields": self.fields} if self.fields else None)


class DuplicateApplication(FormHireError):
    status_code = 400
    code = "DUPLICATE_APPLICATION"

    def __init__(self, message: str = "You have already applied for this position"):
        super().__init__(message)


class Unauthenticated(FormHireError):
    status_code = 401
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(FormHireError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class JobClosed(Forbidden):
    """The job exists but no longer accepts applications."""

    code = "JOB_CLOSED"

    def __init__(self, message: str = "This job is no longer accepting applications"):
        super().__init__(message)


class NotFound(FormHireError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class DependencyFailure(FormHireError):
    """An external system (storage, mail broker) failed."""

    status_code = 502
    code = "DEPENDENCY_FAILURE"
