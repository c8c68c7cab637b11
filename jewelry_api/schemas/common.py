# jewelry_api/schemas/common.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, PlainSerializer

T = TypeVar("T")

# Decimal in Python, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def as_utc(value: datetime) -> datetime:
    """
    Timestamps without an offset are taken as UTC; others are converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Inbound datetimes (bodies and query params) always become aware UTC values
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class ApiResponse(BaseModel, Generic[T]):
    """
    Success envelope shared by every endpoint:

        {"success": true, "data": {...}, "message": "..."}
    """

    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """
    Error envelope built by the exception handlers in main.py:

        {"success": false, "error": "...", "code": "NOT_FOUND", "details": [...]}
    """

    success: bool = False
    error: str
    code: str
    details: Any | None = None


# OpenAPI documentation for the error envelope, shared by every router
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
    403: {"model": ErrorResponse, "description": "Insufficient role"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Conflict with existing data"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=(total + limit - 1) // limit if limit else 0,
        )
