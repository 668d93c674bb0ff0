# twr_engine/utils/__init__.py
"""
Utility modules for the TWR engine.

Cross-cutting helpers used throughout the application:
- logging: Logging setup with correlation ID support
- context: Request context (correlation ID)
- date_utils: Daily axis and calendar helpers

Usage:
    from twr_engine.utils import setup_logging
    from twr_engine.utils import get_correlation_id, set_correlation_id
    from twr_engine.utils.date_utils import build_daily_axis
"""

from twr_engine.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from twr_engine.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
