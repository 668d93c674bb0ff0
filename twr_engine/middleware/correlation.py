# twr_engine/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

Every request gets an ID that is stored in a context variable (picked up by
CorrelationIdFilter on every log record) and echoed back in the response.

Sources, first match wins:
1. X-Correlation-ID header
2. X-Request-ID header
3. A fresh UUID4

Client Usage:
    curl -H "X-Correlation-ID: nightly-rebuild-42" \\
        -X POST http://localhost:8000/analytics/performance -d @snapshot.json
"""

import logging
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from twr_engine.utils.context import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to the request context and the response."""

    async def dispatch(
            self,
            request: Request,
            call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = self._get_correlation_id(request)
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}"
            )
            return response
        finally:
            clear_correlation_id()

    @staticmethod
    def _get_correlation_id(request: Request) -> str:
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header)
            if value:
                return value
        return str(uuid.uuid4())
