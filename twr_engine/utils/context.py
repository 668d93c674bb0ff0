# twr_engine/utils/context.py
"""
Request context for the TWR engine.

Holds the correlation ID of the request being served in a ContextVar so
the logging filter can stamp it on every record, including records emitted
from deep inside the calculation layer.

Usage:
    from twr_engine.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")      # middleware
    get_correlation_id()               # anywhere else -> "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current request.

    Args:
        correlation_id: Unique identifier for this request
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Reset the correlation ID at the end of a request."""
    _correlation_id_var.set(None)
