"""Tracker data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class LimitKind(str, Enum):
    """Limit that a transaction breached."""

    HOURLY_COUNT = "hourly_count"
    DAILY_COUNT = "daily_count"
    DAILY_VOLUME = "daily_volume"
    MONTHLY_VOLUME = "monthly_volume"


class Window(str, Enum):
    """Wall-clock window over which counters accumulate."""

    HOUR = "hour"
    DAY = "day"
    MONTH = "month"


WINDOW_OF_KIND: dict[LimitKind, Window] = {
    LimitKind.HOURLY_COUNT: Window.HOUR,
    LimitKind.DAILY_COUNT: Window.DAY,
    LimitKind.DAILY_VOLUME: Window.DAY,
    LimitKind.MONTHLY_VOLUME: Window.MONTH,
}


@dataclass(frozen=True)
class LimitBreach:
    """An active limit breach."""

    kind: LimitKind
    message: str
    reset_at: datetime


@dataclass(frozen=True)
class Reservation:
    """Counters taken by try_reserve, tagged with the windows they landed in."""

    reservation_id: int
    amount_minor_units: int
    hour_bucket: int
    day_bucket: str
    month_bucket: int


@dataclass(frozen=True)
class LimitDecision:
    """Result of evaluating a prospective transaction."""

    limited: bool
    kind: LimitKind | None = None
    message: str | None = None
    reset_at: datetime | None = None
    reservation: Reservation | None = None

    @classmethod
    def allowed(cls, reservation: Reservation | None = None) -> LimitDecision:
        return cls(limited=False, reservation=reservation)

    @classmethod
    def from_breach(cls, breach: LimitBreach) -> LimitDecision:
        return cls(
            limited=True,
            kind=breach.kind,
            message=breach.message,
            reset_at=breach.reset_at,
        )


@dataclass(frozen=True)
class TrackerState:
    """Read-only copy of the tracker counters."""

    daily_transaction_count: int
    hourly_transaction_count: int
    daily_volume_minor_units: int
    monthly_volume_minor_units: int
    last_hour_bucket: int
    last_day_bucket: str
    last_month_bucket: int
    active_breach: LimitBreach | None = None
