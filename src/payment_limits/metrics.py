"""OpenTelemetry metrics for the transaction limit tracker."""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("payment_limits", version="0.1.0")

limit_evaluations_total = _meter.create_counter(
    name="payment_limit_evaluations_total",
    description="Number of prospective transactions evaluated against the limits",
    unit="1",
)

limit_breaches_total = _meter.create_counter(
    name="payment_limit_breaches_total",
    description="Number of evaluations refused, by limit kind",
    unit="1",
)

transactions_recorded_total = _meter.create_counter(
    name="payment_transactions_recorded_total",
    description="Number of transactions counted against the limits",
    unit="1",
)

transaction_volume_recorded = _meter.create_counter(
    name="payment_transaction_volume_recorded",
    description="Volume counted against the limits, in minor currency units",
    unit="1",
)

window_rollovers_total = _meter.create_counter(
    name="payment_limit_window_rollovers_total",
    description="Number of window rollovers, by window",
    unit="1",
)

reservations_released_total = _meter.create_counter(
    name="payment_limit_reservations_released_total",
    description="Number of reservations released after a failed payment",
    unit="1",
)
