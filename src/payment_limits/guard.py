"""Payment guard tying limit decisions to the provider call."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from .amounts import validate_amount
from .exceptions import LimitExceededError
from .tracker import TransactionLimitTracker

T = TypeVar("T")

logger = structlog.stdlib.get_logger(__name__)


class PaymentGuard:
    """Counts a payment against the limits only if the provider accepts it."""

    def __init__(self, tracker: TransactionLimitTracker) -> None:
        self._tracker = tracker

    @property
    def tracker(self) -> TransactionLimitTracker:
        return self._tracker

    async def run(
        self,
        amount_minor_units: int,
        charge: Callable[[], Awaitable[T]],
        *,
        request_id: str | None = None,
    ) -> T:
        """Reserve the amount, run the provider call, release on failure.

        A cancelled charge keeps its reservation: the provider may still have
        taken the payment, so the amount stays counted against the limits.

        Raises:
            AmountValidationError: the amount is outside the per-transaction bounds
            LimitExceededError: a limit refused the transaction
            Exception: whatever ``charge`` raised, after the reservation is released
        """
        log = logger.bind(request_id=request_id, amount_minor_units=amount_minor_units)
        validate_amount(amount_minor_units, self._tracker.limits)

        decision = self._tracker.try_reserve(amount_minor_units)
        if decision.limited:
            log.warning("Payment refused by transaction limits", kind=decision.kind)
            raise LimitExceededError(decision)

        reservation = decision.reservation
        try:
            result = await charge()
        except asyncio.CancelledError:
            if reservation is not None:
                self._tracker.confirm(reservation)
            log.warning("Payment cancelled, reservation kept")
            raise
        except Exception as e:
            if reservation is not None:
                self._tracker.release(reservation)
            log.error("Payment failed, reservation released", error=str(e))
            raise

        if reservation is not None:
            self._tracker.confirm(reservation)
        log.info("Payment counted against transaction limits")
        return result
