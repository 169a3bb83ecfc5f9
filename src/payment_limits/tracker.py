"""In-memory transaction limit tracker."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

import structlog
from pydantic import ValidationError

from . import metrics
from .clock import Clock, SystemClock
from .config import AppConfig, LimitConfiguration, RolloverPolicy, TrackerSettings
from .exceptions import AmountValidationError, ConfigurationError, ResetNotAllowedError
from .models import (
    LimitBreach,
    LimitDecision,
    LimitKind,
    Reservation,
    TrackerState,
    Window,
)

logger = structlog.stdlib.get_logger(__name__)


class TransactionLimitTracker:
    """Rolling hourly, daily and monthly count and volume limits.

    One instance is created at service start and handed to the request
    handlers. Every public operation first rolls over the windows whose
    wall-clock bucket changed, then works on the current window, all under a
    single per-instance lock.

    Counters live in memory only and are lost on restart.
    """

    def __init__(
        self,
        limits: LimitConfiguration | Mapping[str, Any],
        settings: TrackerSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._limits = _validate_limits(limits)
        self._settings = settings or TrackerSettings()
        self._tz = self._settings.tzinfo
        self._clock = clock or SystemClock(self._tz)
        self._lock = threading.RLock()

        now = self._now()
        self._daily_count = 0
        self._hourly_count = 0
        self._daily_volume = 0
        self._monthly_volume = 0
        self._hour_bucket = now.hour
        self._day_bucket = now.date().isoformat()
        self._month_bucket = _month_index(now)
        self._breach: LimitBreach | None = None
        self._reservation_ids = itertools.count(1)
        self._open_reservations: set[int] = set()

    @classmethod
    def from_config(
        cls, config: AppConfig, clock: Clock | None = None
    ) -> TransactionLimitTracker:
        """Build a tracker from a loaded AppConfig."""
        return cls(config.limits, config.tracker, clock)

    @property
    def limits(self) -> LimitConfiguration:
        return self._limits

    @property
    def settings(self) -> TrackerSettings:
        return self._settings

    def check_and_maybe_reset(self) -> None:
        """Reset every window whose hour, date or month changed."""
        with self._lock:
            self._roll_over(self._now())

    def evaluate(self, amount_minor_units: int) -> LimitDecision:
        """Decide whether a transaction of this amount would break a limit.

        Counters are not touched, so evaluating the same amount again gives
        the same answer until the clock or the counters move.
        """
        _require_non_negative(amount_minor_units)
        with self._lock:
            now = self._now()
            self._roll_over(now)
            return self._decide(amount_minor_units, now)

    def record_accepted(self, amount_minor_units: int) -> None:
        """Count a transaction the payment provider has confirmed."""
        _require_non_negative(amount_minor_units)
        with self._lock:
            self._roll_over(self._now())
            self._apply(amount_minor_units)

    def try_reserve(self, amount_minor_units: int) -> LimitDecision:
        """Evaluate and, when allowed, count the transaction in one step.

        The returned decision carries the Reservation to hand to release()
        if the payment later fails.
        """
        _require_non_negative(amount_minor_units)
        with self._lock:
            now = self._now()
            self._roll_over(now)
            decision = self._decide(amount_minor_units, now)
            if decision.limited:
                return decision
            self._apply(amount_minor_units)
            reservation_id = next(self._reservation_ids)
            self._open_reservations.add(reservation_id)
            return LimitDecision.allowed(
                Reservation(
                    reservation_id=reservation_id,
                    amount_minor_units=amount_minor_units,
                    hour_bucket=self._hour_bucket,
                    day_bucket=self._day_bucket,
                    month_bucket=self._month_bucket,
                )
            )

    def release(self, reservation: Reservation) -> None:
        """Give back a reservation whose payment did not go through.

        Windows that rolled over since the reservation are left alone. A
        reservation that is unknown, already released or confirmed, or taken
        before a reset or month rollover is ignored.
        """
        amount = reservation.amount_minor_units
        with self._lock:
            self._roll_over(self._now())
            if reservation.reservation_id not in self._open_reservations:
                logger.warning(
                    "Ignoring release of a closed reservation",
                    reservation_id=reservation.reservation_id,
                    amount_minor_units=amount,
                )
                return
            self._open_reservations.discard(reservation.reservation_id)
            if reservation.day_bucket == self._day_bucket:
                self._daily_count = max(0, self._daily_count - 1)
                self._daily_volume = max(0, self._daily_volume - amount)
                if reservation.hour_bucket == self._hour_bucket:
                    self._hourly_count = max(0, self._hourly_count - 1)
            if reservation.month_bucket == self._month_bucket:
                self._monthly_volume = max(0, self._monthly_volume - amount)
        metrics.reservations_released_total.add(1)
        logger.info(
            "Transaction reservation released",
            reservation_id=reservation.reservation_id,
            amount_minor_units=amount,
        )

    def confirm(self, reservation: Reservation) -> None:
        """Keep a reservation whose payment went through; it can no longer be released."""
        with self._lock:
            self._open_reservations.discard(reservation.reservation_id)

    def snapshot(self) -> TrackerState:
        """Return a copy of the counters for the current windows."""
        with self._lock:
            self._roll_over(self._now())
            return TrackerState(
                daily_transaction_count=self._daily_count,
                hourly_transaction_count=self._hourly_count,
                daily_volume_minor_units=self._daily_volume,
                monthly_volume_minor_units=self._monthly_volume,
                last_hour_bucket=self._hour_bucket,
                last_day_bucket=self._day_bucket,
                last_month_bucket=self._month_bucket,
                active_breach=self._breach,
            )

    def force_reset(self) -> None:
        """Zero every counter and clear the breach. Not allowed in production."""
        if self._settings.is_production:
            logger.warning(
                "Limit reset rejected", environment=self._settings.environment
            )
            raise ResetNotAllowedError(self._settings.environment)
        with self._lock:
            now = self._now()
            self._daily_count = 0
            self._hourly_count = 0
            self._daily_volume = 0
            self._monthly_volume = 0
            self._hour_bucket = now.hour
            self._day_bucket = now.date().isoformat()
            self._month_bucket = _month_index(now)
            self._breach = None
            self._open_reservations.clear()
        logger.info("Limit counters reset", environment=self._settings.environment)

    def _now(self) -> datetime:
        return self._clock.now().astimezone(self._tz)

    def _roll_over(self, now: datetime) -> None:
        hour = now.hour
        day = now.date().isoformat()
        month = _month_index(now)

        if hour != self._hour_bucket:
            self._hourly_count = 0
            self._hour_bucket = hour
            self._clear_breach(LimitKind.HOURLY_COUNT)
            self._rolled_over(Window.HOUR)

        if day != self._day_bucket:
            # The hour bucket is hour-of-day, so a new date also starts a new hour.
            self._daily_count = 0
            self._hourly_count = 0
            self._daily_volume = 0
            self._day_bucket = day
            if self._settings.rollover_policy == RolloverPolicy.CLEAR_ALL:
                self._clear_breach(*LimitKind)
            else:
                self._clear_breach(
                    LimitKind.DAILY_COUNT,
                    LimitKind.DAILY_VOLUME,
                    LimitKind.HOURLY_COUNT,
                )
            self._rolled_over(Window.DAY)

        if month != self._month_bucket:
            self._monthly_volume = 0
            self._month_bucket = month
            self._open_reservations.clear()
            self._clear_breach(LimitKind.MONTHLY_VOLUME)
            self._rolled_over(Window.MONTH)

    def _rolled_over(self, window: Window) -> None:
        metrics.window_rollovers_total.add(1, {"window": window.value})
        logger.debug("Limit window rolled over", window=window.value)

    def _clear_breach(self, *kinds: LimitKind) -> None:
        if self._breach is not None and self._breach.kind in kinds:
            logger.info("Limit breach cleared", kind=self._breach.kind.value)
            self._breach = None

    def _decide(self, amount: int, now: datetime) -> LimitDecision:
        metrics.limit_evaluations_total.add(1)
        if not self._settings.enforce_limits:
            return LimitDecision.allowed()

        breach = self._find_breach(amount, now)
        if breach is None:
            return LimitDecision.allowed()

        self._breach = breach
        metrics.limit_breaches_total.add(1, {"kind": breach.kind.value})
        logger.warning(
            "Transaction limit reached",
            kind=breach.kind.value,
            amount_minor_units=amount,
            reset_at=breach.reset_at.isoformat(),
        )
        return LimitDecision.from_breach(breach)

    def _find_breach(self, amount: int, now: datetime) -> LimitBreach | None:
        limits = self._limits
        if self._daily_count >= limits.max_daily_transactions:
            return LimitBreach(
                kind=LimitKind.DAILY_COUNT,
                message=(
                    f"Daily transaction limit of {limits.max_daily_transactions} "
                    "reached. Please try again tomorrow."
                ),
                reset_at=_start_of_next_day(now),
            )
        if self._hourly_count >= limits.max_hourly_transactions:
            return LimitBreach(
                kind=LimitKind.HOURLY_COUNT,
                message=(
                    f"Hourly transaction limit of {limits.max_hourly_transactions} "
                    "reached. Please try again later."
                ),
                reset_at=_start_of_next_hour(now),
            )
        if self._daily_volume + amount > limits.max_daily_volume_minor_units:
            return LimitBreach(
                kind=LimitKind.DAILY_VOLUME,
                message=(
                    "Daily volume limit of "
                    f"{limits.max_daily_volume_minor_units} would be exceeded."
                ),
                reset_at=_start_of_next_day(now),
            )
        if self._monthly_volume + amount > limits.max_monthly_volume_minor_units:
            return LimitBreach(
                kind=LimitKind.MONTHLY_VOLUME,
                message=(
                    "Monthly volume limit of "
                    f"{limits.max_monthly_volume_minor_units} would be exceeded."
                ),
                reset_at=_start_of_next_month(now),
            )
        return None

    def _apply(self, amount: int) -> None:
        self._daily_count += 1
        self._hourly_count += 1
        self._daily_volume += amount
        self._monthly_volume += amount
        metrics.transactions_recorded_total.add(1)
        metrics.transaction_volume_recorded.add(amount)


def _validate_limits(
    limits: LimitConfiguration | Mapping[str, Any],
) -> LimitConfiguration:
    data = limits.model_dump() if isinstance(limits, LimitConfiguration) else dict(limits)
    try:
        return LimitConfiguration.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            message=f"Invalid limit configuration: {e}",
            cause=e,
        ) from e


def _require_non_negative(amount: int) -> None:
    if amount < 0:
        raise AmountValidationError(f"Amount must be >= 0, got {amount}")


def _month_index(moment: datetime) -> int:
    return moment.year * 12 + moment.month - 1


def _start_of_next_hour(now: datetime) -> datetime:
    return now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def _start_of_next_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)


def _start_of_next_month(now: datetime) -> datetime:
    if now.month == 12:
        return now.replace(
            year=now.year + 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0
        )
    return now.replace(
        month=now.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0
    )
