# twr_engine/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging setup (see utils/logging.py)
- DEFAULT_RISK_FREE_DAILY_RATE: Daily rate used when no provider is wired
- DOWNSAMPLE_INTERVAL_DAYS: Spacing of display points for long ranges
- RETURN_EPSILON: Previous-value threshold below which a daily return is 0

The calculation functions take these values as explicit arguments; only the
service and HTTP layers read them from here.

Usage:
    from twr_engine.config import settings

    interval = settings.downsample_interval_days
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from twr_engine.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    DEFAULT_DOWNSAMPLE_INTERVAL_DAYS,
    DEFAULT_RISK_FREE_DAILY_RATE,
    MAX_AXIS_DAYS,
    RETURN_EPSILON,
    TRADING_DAYS_PER_YEAR,
)


_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Portfolio TWR Engine")
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")

    Calculation defaults (optional):
        - DEFAULT_RISK_FREE_DAILY_RATE: Daily risk-free rate (default: 0)
        - DOWNSAMPLE_INTERVAL_DAYS: Days between display points (default: 7)
        - RETURN_EPSILON: Bootstrap guard for daily returns (default: 1e-9)
        - MAX_AXIS_DAYS: Largest daily axis accepted by the service
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    app_name: str = "Portfolio TWR Engine"
    debug: bool = False

    # =========================================================================
    # CALCULATION DEFAULTS
    # =========================================================================
    default_risk_free_daily_rate: Decimal = Field(
        default=DEFAULT_RISK_FREE_DAILY_RATE,
        ge=Decimal("-0.01"),
        le=Decimal("0.01"),
        description="Daily risk-free rate used for Sharpe when no provider answers"
    )
    downsample_interval_days: int = Field(
        default=DEFAULT_DOWNSAMPLE_INTERVAL_DAYS,
        ge=1,
        le=31,
        description="Minimum calendar days between downsampled display points"
    )
    return_epsilon: Decimal = Field(
        default=RETURN_EPSILON,
        gt=Decimal("0"),
        description="Previous-day value at or below which the daily return is 0"
    )
    trading_days_per_year: int = Field(
        default=TRADING_DAYS_PER_YEAR,
        ge=1,
        description="Annualization factor for volatility and Sharpe"
    )
    calendar_days_per_year: int = Field(
        default=CALENDAR_DAYS_PER_YEAR,
        ge=1,
        description="Day count used to convert axis transitions into years"
    )
    max_axis_days: int = Field(
        default=MAX_AXIS_DAYS,
        ge=1,
        description="Upper bound on the number of days in a daily axis"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_logging_config(self) -> "Settings":
        """
        Normalize the log level and reject unknown names early.

        An invalid level would otherwise only surface when setup_logging()
        runs inside the application factory.
        """
        level = self.log_level.upper().strip()
        if level not in {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}:
            raise ValueError(
                f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL, got: {self.log_level}"
            )
        object.__setattr__(self, "log_level", level)
        return self


# Create single instance
settings = Settings()
