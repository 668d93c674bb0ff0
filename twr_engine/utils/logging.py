# twr_engine/utils/logging.py
"""
Logging configuration for the TWR engine.

One call to setup_logging() at application start configures the root logger:
- Level from LOG_LEVEL (DEBUG shows dropped cashflows and snapping decisions)
- Text or JSON output from LOG_FORMAT
- Correlation ID stamped on every record by CorrelationIdFilter

Modules log through the standard library:
    logger = logging.getLogger(__name__)

Log Levels:
    DEBUG   - Per-day decisions (flow snapped, flow beyond axis dropped)
    INFO    - Report built, aggregator slot replaced
    WARNING - Skipped ledger rows, negative reconstructed cash, provider down
    ERROR   - Unexpected failures surfaced to the HTTP layer
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from twr_engine.config import settings
from twr_engine.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "asyncio",
    "uvicorn.access",
]

# LogRecord attributes that never go into the JSON "extra" block
_STANDARD_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
})

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# FILTER AND FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to each record (usable as %(correlation_id)s)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation in production.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123000+00:00",
        "level": "WARNING",
        "logger": "twr_engine.services.cashflows.classifier",
        "correlation_id": "abc-123-def",
        "message": "Skipping malformed cashflow row 3: ...",
        "extra": {"row_index": 3}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        # Decimal amounts and dates are written as strings
        return json.dumps(entry, default=str)


# =============================================================================
# SETUP
# =============================================================================

def _build_handler(format_type: str) -> logging.Handler:
    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    return handler


def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Install one stdout handler on the root logger.

    Existing root handlers are replaced, so calling this twice (application
    start, then a test) does not duplicate output.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: 'text' or 'json'. Defaults to settings.log_format.
        suppress_noisy_loggers: Raise HTTP client and server access loggers to WARNING.

    Raises:
        ValueError: If the level name is unknown
    """
    level_name = level or settings.log_level
    numeric_level = _get_log_level(level_name)
    format_type = (log_format or settings.log_format).lower()

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(_build_handler(format_type))

    if suppress_noisy_loggers:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging ready ({level_name.upper().strip()}, {format_type})"
    )


def _get_log_level(level_str: str) -> int:
    """
    Convert a level name to its logging constant.

    Raises:
        ValueError: If level_str is not a valid log level
    """
    normalized = level_str.upper().strip()
    if normalized not in _LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {', '.join(_LEVELS)}"
        )
    return _LEVELS[normalized]
