"""Configuration management service with Pydantic Settings.

This module provides centralized configuration management for DEX Trade
Forensics, loading and validating environment variables (and an optional
``.env`` file) at startup. Every detection threshold is overridable here.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dex_trade_forensics.ingestor.models import ValueThresholds

_ENV_FILE = ".env"
_ENV_FILE_ENCODING = "utf-8"


class ThresholdSettings(BaseSettings):
    """Single-trade value thresholds in quote currency."""

    model_config = SettingsConfigDict(env_prefix="THRESHOLD_", extra="ignore")

    whale: float = Field(
        default=10_000.0,
        alias="THRESHOLD_WHALE",
        gt=0,
        description="Trade value at or above which a trade is whale-sized",
    )
    medium: float = Field(
        default=1_000.0,
        alias="THRESHOLD_MEDIUM",
        gt=0,
        description="Trade value at or above which a sell counts as large after a pump",
    )
    retail: float = Field(
        default=100.0,
        alias="THRESHOLD_RETAIL",
        gt=0,
        description="Trade value at or below which a trade is retail-sized",
    )

    @model_validator(mode="after")
    def validate_ordering(self) -> "ThresholdSettings":
        """Require retail < medium < whale."""
        if not self.retail < self.medium < self.whale:
            raise ValueError("Thresholds must satisfy RETAIL < MEDIUM < WHALE")
        return self

    def to_value_thresholds(self) -> ValueThresholds:
        return ValueThresholds(whale=self.whale, medium=self.medium, retail=self.retail)


class IntervalSettings(BaseSettings):
    """Bucket widths for the three interval series."""

    model_config = SettingsConfigDict(env_prefix="INTERVAL_", extra="ignore")

    fine_seconds: int = Field(
        default=300,
        alias="INTERVAL_FINE_SECONDS",
        ge=1,
        le=86_400,
        description="Bucket width for wash trading / coordinated activity",
    )
    coarse_seconds: int = Field(
        default=600,
        alias="INTERVAL_COARSE_SECONDS",
        ge=1,
        le=86_400,
        description="Bucket width for the headline price series",
    )
    hourly_seconds: int = Field(
        default=3600,
        alias="INTERVAL_HOURLY_SECONDS",
        ge=1,
        le=86_400,
        description="Bucket width for whale entries and volume charts",
    )


class PriceSettings(BaseSettings):
    """Price movement and price sanity settings."""

    model_config = SettingsConfigDict(env_prefix="PRICE_", extra="ignore")

    record_threshold_pct: float = Field(
        default=5.0,
        alias="PRICE_RECORD_THRESHOLD_PCT",
        ge=0,
        description="Absolute % change above which a bucket-to-bucket move is recorded",
    )
    extreme_threshold_pct: float = Field(
        default=10.0,
        alias="PRICE_EXTREME_THRESHOLD_PCT",
        ge=0,
        description="Absolute % change above which a move is extreme",
    )
    min_sane_price: float = Field(
        default=1e-8,
        alias="PRICE_MIN_SANE",
        ge=0,
        description="Prices below this are logged as anomalous",
    )
    max_sane_price: float = Field(
        default=1000.0,
        alias="PRICE_MAX_SANE",
        gt=0,
        description="Prices above this are logged as anomalous",
    )
    fluctuation_risk_multiplier: float = Field(
        default=1000.0,
        alias="PRICE_FLUCTUATION_RISK_MULTIPLIER",
        gt=1,
        description="Max/min price ratio above which extra risk warnings are computed",
    )

    @model_validator(mode="after")
    def validate_bounds(self) -> "PriceSettings":
        if self.extreme_threshold_pct < self.record_threshold_pct:
            raise ValueError("PRICE_EXTREME_THRESHOLD_PCT must be >= PRICE_RECORD_THRESHOLD_PCT")
        if self.min_sane_price >= self.max_sane_price:
            raise ValueError("PRICE_MIN_SANE must be below PRICE_MAX_SANE")
        return self


class PumpSettings(BaseSettings):
    """Pump-and-dump and price impact settings."""

    model_config = SettingsConfigDict(env_prefix="PUMP_", extra="ignore")

    follow_window_seconds: int = Field(
        default=1800,
        alias="PUMP_FOLLOW_WINDOW_SECONDS",
        ge=60,
        le=86_400,
        description="Window after a pump in which large sells are collected",
    )
    min_retail_buys: int = Field(
        default=5,
        alias="PUMP_MIN_RETAIL_BUYS",
        ge=0,
        description="Retail buys during a pump must exceed this count",
    )
    accumulation_price_factor: float = Field(
        default=0.8,
        alias="PUMP_ACCUMULATION_PRICE_FACTOR",
        gt=0,
        le=1,
        description="Whale buys below this fraction of the pump start price count as accumulation",
    )
    impact_lookback_seconds: int = Field(
        default=1800,
        alias="PUMP_IMPACT_LOOKBACK_SECONDS",
        ge=60,
        le=86_400,
        description="Lookback window for attributing price moves to trades",
    )


class SuspicionSettings(BaseSettings):
    """Wallet suspicion ranking settings."""

    model_config = SettingsConfigDict(env_prefix="SUSPICION_", extra="ignore")

    top_n: int = Field(
        default=20,
        alias="SUSPICION_TOP_N",
        ge=1,
        le=10_000,
        description="Number of wallets kept in the suspected manipulators list",
    )
    flagged_score: int = Field(
        default=3,
        alias="SUSPICION_FLAGGED_SCORE",
        ge=1,
        description="Score at which a wallet is flagged",
    )
    high_score: int = Field(
        default=5,
        alias="SUSPICION_HIGH_SCORE",
        ge=1,
        description="Score at which a wallet is high-suspicion",
    )


class CycleSettings(BaseSettings):
    """Market cycle settings."""

    model_config = SettingsConfigDict(env_prefix="CYCLE_", extra="ignore")

    period_count: int = Field(
        default=6,
        alias="CYCLE_PERIOD_COUNT",
        ge=2,
        le=1000,
        description="Number of equal periods the time range is split into",
    )


class ChartSettings(BaseSettings):
    """Chart series settings."""

    model_config = SettingsConfigDict(env_prefix="CHART_", extra="ignore")

    max_price_points: int = Field(
        default=3000,
        alias="CHART_MAX_PRICE_POINTS",
        ge=10,
        description="Trade count above which the price series is downsampled",
    )
    top_wallets: int = Field(
        default=10,
        alias="CHART_TOP_WALLETS",
        ge=1,
        le=1000,
        description="Number of most active wallets charted",
    )
    ratio_cap: float = Field(
        default=5.0,
        alias="CHART_RATIO_CAP",
        gt=0,
        description="Display cap for hourly buy/sell ratios",
    )


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files via python-dotenv.

    Example:
        ```python
        from dex_trade_forensics.config import get_settings

        settings = get_settings()
        print(settings.thresholds.whale)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding=_ENV_FILE_ENCODING,
        extra="ignore",
    )

    # NOTE: Each nested BaseSettings must be given the same env_file, otherwise it
    # will only read from the process environment (and ignore `.env`).
    thresholds: ThresholdSettings = Field(
        default_factory=lambda: ThresholdSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    intervals: IntervalSettings = Field(
        default_factory=lambda: IntervalSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    price: PriceSettings = Field(
        default_factory=lambda: PriceSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    pump: PumpSettings = Field(
        default_factory=lambda: PumpSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    suspicion: SuspicionSettings = Field(
        default_factory=lambda: SuspicionSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    cycle: CycleSettings = Field(
        default_factory=lambda: CycleSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    chart: ChartSettings = Field(
        default_factory=lambda: ChartSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def summary(self) -> dict[str, str | dict[str, str]]:
        """Get a flat, printable summary of the effective settings."""
        return {
            "thresholds": {
                "whale": str(self.thresholds.whale),
                "medium": str(self.thresholds.medium),
                "retail": str(self.thresholds.retail),
            },
            "intervals": {
                "fine_seconds": str(self.intervals.fine_seconds),
                "coarse_seconds": str(self.intervals.coarse_seconds),
                "hourly_seconds": str(self.intervals.hourly_seconds),
            },
            "price": {
                "record_threshold_pct": str(self.price.record_threshold_pct),
                "extreme_threshold_pct": str(self.price.extreme_threshold_pct),
                "fluctuation_risk_multiplier": str(self.price.fluctuation_risk_multiplier),
            },
            "pump": {
                "follow_window_seconds": str(self.pump.follow_window_seconds),
                "min_retail_buys": str(self.pump.min_retail_buys),
            },
            "suspicion": {
                "top_n": str(self.suspicion.top_n),
                "flagged_score": str(self.suspicion.flagged_score),
            },
            "cycle_periods": str(self.cycle.period_count),
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Uses LRU cache to ensure settings are loaded only once and
    reused across the application.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
