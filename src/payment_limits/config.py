"""Limit configuration models (pydantic BaseModel)."""

from __future__ import annotations

from datetime import timezone, tzinfo
from enum import Enum
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RolloverPolicy(str, Enum):
    """Which active breaches a daily rollover clears."""

    SCOPED = "scoped"
    CLEAR_ALL = "clear_all"


class LimitConfiguration(BaseModel):
    """Transaction count and volume limits. Amounts are in minor units."""

    model_config = ConfigDict(frozen=True)

    max_daily_transactions: int = Field(default=100, ge=0)
    max_hourly_transactions: int = Field(default=20, ge=0)
    max_daily_volume_minor_units: int = Field(default=1_000_000, ge=0)
    max_monthly_volume_minor_units: int = Field(default=10_000_000, ge=0)
    max_per_transaction_minor_units: int = Field(default=10_000_000, ge=1)
    min_per_transaction_minor_units: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_per_transaction_bounds(self) -> LimitConfiguration:
        if self.min_per_transaction_minor_units > self.max_per_transaction_minor_units:
            raise ValueError(
                "min_per_transaction_minor_units "
                f"({self.min_per_transaction_minor_units}) must be <= "
                "max_per_transaction_minor_units "
                f"({self.max_per_transaction_minor_units})"
            )
        return self


class TrackerSettings(BaseModel):
    """Deployment policy of the tracker."""

    model_config = ConfigDict(frozen=True)

    environment: Literal["development", "staging", "production"] = "development"
    enforce_limits: bool = True
    timezone: str = "UTC"
    rollover_policy: RolloverPolicy = RolloverPolicy.SCOPED

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        resolve_timezone(value)
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)


class AppSection(BaseModel):
    """Service identity."""

    name: str = "payment-backend"
    version: str = "0.1.0"


class LogSection(BaseModel):
    """Log settings."""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class AppConfig(BaseModel):
    """Whole configuration file."""

    app: AppSection = Field(default_factory=AppSection)
    limits: LimitConfiguration = Field(default_factory=LimitConfiguration)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    log: LogSection = Field(default_factory=LogSection)


def resolve_timezone(name: str) -> tzinfo:
    """Return the tzinfo for an IANA zone name."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e
