# twr_engine/services/constants.py
"""
Centralized constants for the TWR engine.

Single source of truth for the business constants used by the calculation
layer. Settings in config.py default to these values; pure functions take
them as keyword defaults so they stay usable without configuration.

Usage:
    from twr_engine.services.constants import (
        TRADING_DAYS_PER_YEAR,
        RETURN_EPSILON,
        ZERO,
    )
"""

from decimal import Decimal


# =============================================================================
# DECIMAL SHORTCUTS
# =============================================================================

ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Annualization factor for volatility and Sharpe ratio
TRADING_DAYS_PER_YEAR: int = 252

# Day count for CAGR: years = axis transitions / 365
CALENDAR_DAYS_PER_YEAR: int = 365


# =============================================================================
# TWR SETTINGS
# =============================================================================

# Previous-day value below which the daily return is defined as 0.
# Covers the first funding day and fully liquidated stretches.
RETURN_EPSILON: Decimal = Decimal("1e-9")


# =============================================================================
# RISK-FREE RATE
# =============================================================================

# Daily rate used when no risk-free provider is configured
DEFAULT_RISK_FREE_DAILY_RATE: Decimal = ZERO

# Starting level of the synthetic risk-free benchmark curve
RISK_FREE_CURVE_BASE: Decimal = HUNDRED

# Key under which the synthetic risk-free curve is reported among benchmarks
RISK_FREE_BENCHMARK_KEY: str = "risk_free"


# =============================================================================
# DISPLAY SETTINGS
# =============================================================================

# Long ranges are thinned to roughly one point per week for charts
DEFAULT_DOWNSAMPLE_INTERVAL_DAYS: int = 7

# Extra days of price history fetched before the axis start, so an axis
# that starts on a weekend or holiday still finds the previous close
PRICE_SEED_LOOKBACK_DAYS: int = 7

# Upper bound on a daily axis (100 years)
MAX_AXIS_DAYS: int = 36_500


# =============================================================================
# AGGREGATION
# =============================================================================

# Slot used for the unnamed (root) portfolio in multi-entity aggregation
ROOT_ENTITY_KEY: str = "__root__"
