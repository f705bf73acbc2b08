"""
Application Exceptions.

Services raise these; exception_handlers turns them into the error
envelope. Each class fixes its machine-readable code and HTTP status.
"""

from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors."""

    code = "SYS_INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class NotFoundError(ApplicationError):
    code = "RES_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Resource not found", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class ValidationError(ApplicationError):
    code = "VAL_VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str = "Validation failed", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class AuthenticationError(ApplicationError):
    code = "AUTH_UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AuthorizationError(ApplicationError):
    code = "AUTHZ_FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class ConflictError(ApplicationError):
    """A unique value (email, username, save) is already taken."""

    code = "RES_CONFLICT"
    status_code = 409

    def __init__(self, message: str = "Resource conflict", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class RateLimitError(ApplicationError):
    code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", retry_after_seconds: int = 0) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message)

    @property
    def headers(self) -> dict[str, str] | None:
        if self.retry_after_seconds > 0:
            return {"Retry-After": str(self.retry_after_seconds)}
        return None


class ExternalServiceError(ApplicationError):
    """Stripe, Resend, or another provider failed or is not configured."""

    code = "SYS_EXTERNAL_SERVICE_ERROR"
    status_code = 502

    def __init__(self, message: str = "External service error", service: str | None = None) -> None:
        self.service = service
        super().__init__(message)


class DatabaseError(ApplicationError):
    code = "SYS_DATABASE_ERROR"
    status_code = 503

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message)
