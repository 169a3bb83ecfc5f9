"""JSON bodies the HTTP layer returns for limit decisions and health."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from .config import LimitConfiguration
from .exceptions import AmountValidationError
from .models import LimitBreach, LimitDecision, TrackerState

HTTP_TOO_MANY_REQUESTS = 429
HTTP_BAD_REQUEST = 400


def limit_exceeded_response(
    decision: LimitDecision,
    *,
    request_id: str | None = None,
    now: datetime | None = None,
) -> tuple[int, dict[str, Any]]:
    """429 status and body for a limited decision."""
    if not decision.limited:
        raise ValueError("decision is not limited")
    body: dict[str, Any] = {
        "success": False,
        "error": decision.message,
        "kind": decision.kind.value if decision.kind is not None else None,
        "resetAt": _iso(decision.reset_at),
    }
    if decision.reset_at is not None:
        current = now or datetime.now(timezone.utc)
        body["retryAfter"] = max(0, math.ceil((decision.reset_at - current).total_seconds()))
    if request_id is not None:
        body["requestId"] = request_id
    return HTTP_TOO_MANY_REQUESTS, body


def validation_error_response(
    error: AmountValidationError,
    *,
    request_id: str | None = None,
) -> tuple[int, dict[str, Any]]:
    """400 status and body for a rejected amount."""
    body: dict[str, Any] = {
        "success": False,
        "error": "Validation failed",
        "details": [{"field": error.field, "message": error.message}],
    }
    if request_id is not None:
        body["requestId"] = request_id
    return HTTP_BAD_REQUEST, body


def breach_body(breach: LimitBreach | None) -> dict[str, Any] | None:
    if breach is None:
        return None
    return {
        "kind": breach.kind.value,
        "message": breach.message,
        "resetAt": _iso(breach.reset_at),
    }


def snapshot_body(state: TrackerState, limits: LimitConfiguration) -> dict[str, Any]:
    """Counters, headroom and active breach for /health and /api/metrics."""
    return {
        "dailyTransactions": state.daily_transaction_count,
        "hourlyTransactions": state.hourly_transaction_count,
        "dailyVolume": state.daily_volume_minor_units,
        "monthlyVolume": state.monthly_volume_minor_units,
        "remaining": {
            "dailyTransactions": max(
                0, limits.max_daily_transactions - state.daily_transaction_count
            ),
            "hourlyTransactions": max(
                0, limits.max_hourly_transactions - state.hourly_transaction_count
            ),
            "dailyVolume": max(
                0, limits.max_daily_volume_minor_units - state.daily_volume_minor_units
            ),
            "monthlyVolume": max(
                0, limits.max_monthly_volume_minor_units - state.monthly_volume_minor_units
            ),
        },
        "limits": {
            "maxDailyTransactions": limits.max_daily_transactions,
            "maxHourlyTransactions": limits.max_hourly_transactions,
            "maxDailyVolume": limits.max_daily_volume_minor_units,
            "maxMonthlyVolume": limits.max_monthly_volume_minor_units,
            "maxTransactionAmount": limits.max_per_transaction_minor_units,
            "minTransactionAmount": limits.min_per_transaction_minor_units,
        },
        "activeBreach": breach_body(state.active_breach),
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
