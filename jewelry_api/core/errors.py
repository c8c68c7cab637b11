# jewelry_api/core/errors.py
"""
Application error taxonomy.

Services raise these; the exception handlers registered in `main.py`
turn them into the JSON error envelope:

    {"success": false, "error": "<message>", "code": "<CODE>", "details": ...}
"""
from typing import Any

from fastapi import status


class AppError(Exception):
    """Base class for errors that map 1:1 to an HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "APP_ERROR"
    message: str = "Application error"

    def __init__(
        self,
        message: str | None = None,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.message
        self.details = details
        self.headers = headers
        super().__init__(self.message)

    def to_envelope(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details is not None:
            body["details"] = self.details
        return body


# ---- 400 ----


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Validation failed"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    message = "Bad request"


# ---- 401 ----


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Authentication required"


class InvalidCredentialsError(UnauthorizedError):
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class ExpiredTokenError(UnauthorizedError):
    code = "EXPIRED_TOKEN"
    message = "Token has expired"


class InvalidTokenError(UnauthorizedError):
    code = "INVALID_TOKEN"
    message = "Invalid token provided"


# ---- 403 / 404 ----


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", details: Any | None = None):
        super().__init__(f"{resource} not found", details)


# ---- 409 ----


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Conflict"


class DuplicateResourceError(ConflictError):
    code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(f"{resource} with {field} '{value}' already exists")


class InsufficientStockError(ConflictError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )


# ---- 429 ----


class RateLimitError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMIT_EXCEEDED"
    message = "Too many requests, please try again later"

    def __init__(self, retry_after: int, message: str | None = None):
        super().__init__(
            message,
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


# ---- 5xx ----


class InternalServerError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"
    message = "Internal server error"


class CodeAllocationError(InternalServerError):
    """Raised when the allocator runs out of attempts for a code family."""

    code = "CODE_ALLOCATION_FAILED"

    def __init__(self, family: str, attempts: int):
        super().__init__(
            f"Could not allocate a unique code for '{family}' "
            f"after {attempts} attempts"
        )
        self.family = family
        self.attempts = attempts


class ServiceUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"

    def __init__(self, service: str):
        super().__init__(f"{service} is currently unavailable")
