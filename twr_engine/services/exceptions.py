# twr_engine/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The application layer (main.py) maps them to HTTP responses.

The calculation functions themselves never raise for bad data: missing prices,
malformed ledger rows and degenerate axes degrade to neutral values. These
exceptions cover caller mistakes at the service boundary and provider failures.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidRangeError
    │   └── AxisTooLongError
    ├── NotFoundError
    │   └── EntityNotFoundError
    └── ProviderError
        └── ProviderUnavailableError
"""

from datetime import date


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails at the service boundary.

    Request bodies are validated by Pydantic; this is for programmatic
    errors such as an inverted date range.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidRangeError(ValidationError):
    """
    Raised when a display range cannot be resolved.

    Either the range key is unknown or the resolved start lies after the end.
    """

    def __init__(
            self,
            message: str,
            start: date | None = None,
            end: date | None = None,
    ) -> None:
        self.start = start
        self.end = end
        super().__init__(message, field="range")


class AxisTooLongError(ValidationError):
    """Raised when a requested daily axis exceeds the configured maximum."""

    def __init__(self, days: int, max_days: int) -> None:
        self.days = days
        self.max_days = max_days
        super().__init__(
            f"Daily axis of {days} days exceeds the maximum of {max_days}",
            field="start_date",
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Entity")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class EntityNotFoundError(NotFoundError):
    """Raised when an aggregator slot is removed or read but was never set."""

    def __init__(self, entity_key: str) -> None:
        self.entity_key = entity_key
        super().__init__(
            f"Entity '{entity_key}' not found",
            resource_type="Entity",
            resource_id=entity_key,
        )


# =============================================================================
# PROVIDER ERRORS
# =============================================================================


class ProviderError(ServiceError):
    """
    Base exception for external data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(ProviderError):
    """
    Raised by a provider adapter when its backing source cannot answer.

    AnalyticsService catches this and continues with an empty input,
    so a dead price feed degrades the report instead of failing it.
    """

    def __init__(self, provider: str, reason: str | None = None) -> None:
        self.reason = reason
        message = f"Provider '{provider}' unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, provider=provider)
