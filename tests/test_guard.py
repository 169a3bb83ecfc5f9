"""PaymentGuard unit tests."""

import asyncio

import pytest

from payment_limits import (
    AmountValidationError,
    LimitConfiguration,
    LimitExceededError,
    LimitKind,
    ManualClock,
    PaymentGuard,
    TransactionLimitTracker,
)


def _guard(clock: ManualClock, **limits: int) -> PaymentGuard:
    return PaymentGuard(TransactionLimitTracker(LimitConfiguration(**limits), clock=clock))


async def _succeed() -> dict[str, str]:
    return {"id": "pay_123", "status": "COMPLETED"}


async def test_successful_payment_is_counted(clock: ManualClock) -> None:
    guard = _guard(clock)
    result = await guard.run(2500, _succeed, request_id="req_1")
    assert result == {"id": "pay_123", "status": "COMPLETED"}
    state = guard.tracker.snapshot()
    assert state.daily_transaction_count == 1
    assert state.daily_volume_minor_units == 2500


async def test_failed_payment_is_released(clock: ManualClock) -> None:
    guard = _guard(clock)

    async def decline() -> None:
        raise RuntimeError("card declined")

    with pytest.raises(RuntimeError, match="card declined"):
        await guard.run(2500, decline)
    state = guard.tracker.snapshot()
    assert state.daily_transaction_count == 0
    assert state.hourly_transaction_count == 0
    assert state.monthly_volume_minor_units == 0


async def test_limited_payment_is_not_charged(clock: ManualClock) -> None:
    guard = _guard(clock, max_hourly_transactions=1)
    calls: list[int] = []

    async def charge() -> int:
        calls.append(1)
        return len(calls)

    await guard.run(100, charge)
    with pytest.raises(LimitExceededError) as exc_info:
        await guard.run(100, charge)
    assert calls == [1]
    assert exc_info.value.decision.kind == LimitKind.HOURLY_COUNT
    assert guard.tracker.snapshot().hourly_transaction_count == 1


async def test_out_of_range_amount_is_rejected(clock: ManualClock) -> None:
    guard = _guard(clock, max_per_transaction_minor_units=1000)
    with pytest.raises(AmountValidationError):
        await guard.run(1001, _succeed)
    assert guard.tracker.snapshot().daily_transaction_count == 0


async def test_cancelled_payment_keeps_reservation(clock: ManualClock) -> None:
    guard = _guard(clock)
    started = asyncio.Event()

    async def hang() -> None:
        started.set()
        await asyncio.sleep(3600)

    task = asyncio.create_task(guard.run(2500, hang))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    state = guard.tracker.snapshot()
    assert state.daily_transaction_count == 1
    assert state.daily_volume_minor_units == 2500


async def test_successful_payment_cannot_be_released(clock: ManualClock) -> None:
    guard = _guard(clock)
    tracker = guard.tracker
    await guard.run(2500, _succeed)
    reserved = tracker.try_reserve(100)
    assert reserved.reservation is not None
    tracker.release(reserved.reservation)
    tracker.release(reserved.reservation)
    assert tracker.snapshot().daily_transaction_count == 1
