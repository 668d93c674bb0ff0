# twr_engine/middleware/__init__.py
"""
ASGI middleware for the TWR engine.

Usage:
    from twr_engine.middleware import CorrelationIdMiddleware

    app.add_middleware(CorrelationIdMiddleware)
"""

from twr_engine.middleware.correlation import (
    CORRELATION_ID_HEADER,
    REQUEST_ID_HEADER,
    CorrelationIdMiddleware,
)

__all__ = [
    "CorrelationIdMiddleware",
    "CORRELATION_ID_HEADER",
    "REQUEST_ID_HEADER",
]
