# twr_engine/schemas/errors.py
"""
Pydantic schemas for error responses.

Every non-2xx response body has the same top-level keys (error, message,
details), whether it comes from a service exception, a routing error or
request validation. Produced by the global exception handlers in main.py.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """
    Error body for service and HTTP errors.

    Example:
        {
            "error": "InvalidRangeError",
            "message": "Invalid range: '2W'. Valid options: 1M, 3M, ...",
            "details": {"valid_options": ["1M", "3M", "6M", "YTD", "1Y", "5Y", "MAX"]}
        }
    """

    error: str = Field(..., description="Exception class name, e.g. 'EntityNotFoundError'")
    message: str
    details: dict[str, Any] | None = Field(
        default=None,
        description="Structured context such as the offending range or entity key",
    )


class FieldError(BaseModel):
    """One failed body, path or query field."""

    field: str = Field(..., description="Dotted location, e.g. 'body.instruments.ACME.quantity'")
    message: str
    type: str = Field(..., description="Pydantic error type, e.g. 'greater_than_equal'")


class ValidationErrorDetail(BaseModel):
    """Error body for request validation failures (422)."""

    error: str = "ValidationError"
    message: str = "Request validation failed"
    details: list[FieldError]
