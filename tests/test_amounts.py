"""Amount conversion and bounds unit tests."""

from decimal import Decimal

import pytest

from payment_limits import (
    AmountValidationError,
    LimitConfiguration,
    TransactionLimitErrorCodes,
    to_minor_units,
    validate_amount,
)
from payment_limits.amounts import minor_unit_exponent


@pytest.mark.parametrize(
    ("amount", "currency", "expected"),
    [
        ("10.00", "USD", 1000),
        (19.99, "USD", 1999),
        (Decimal("0.005"), "EUR", 1),
        (42, "gbp", 4200),
        (1500, "JPY", 1500),
        ("1500.5", "JPY", 1501),
    ],
)
def test_to_minor_units(amount: object, currency: str, expected: int) -> None:
    assert to_minor_units(amount, currency) == expected  # type: ignore[arg-type]


def test_minor_unit_exponent() -> None:
    assert minor_unit_exponent("USD") == 2
    assert minor_unit_exponent("jpy") == 0


def test_unsupported_currency() -> None:
    with pytest.raises(AmountValidationError) as exc_info:
        to_minor_units("10", "BTC")
    assert exc_info.value.field == "currency"
    assert exc_info.value.code == TransactionLimitErrorCodes.UNSUPPORTED_CURRENCY


@pytest.mark.parametrize("amount", ["0", -5, "abc", "NaN", "Infinity", "0.004"])
def test_invalid_amount(amount: object) -> None:
    with pytest.raises(AmountValidationError) as exc_info:
        to_minor_units(amount)  # type: ignore[arg-type]
    assert exc_info.value.field == "amount"


def test_validate_amount_bounds() -> None:
    limits = LimitConfiguration()
    validate_amount(1, limits)
    validate_amount(10_000_000, limits)
    with pytest.raises(AmountValidationError):
        validate_amount(0, limits)
    with pytest.raises(AmountValidationError, match="between 1 and 10000000"):
        validate_amount(10_000_001, limits)


def test_validate_amount_custom_bounds() -> None:
    limits = LimitConfiguration(
        min_per_transaction_minor_units=50,
        max_per_transaction_minor_units=500,
    )
    validate_amount(50, limits)
    with pytest.raises(AmountValidationError):
        validate_amount(49, limits)


def test_sub_minor_unit_amount_rejected() -> None:
    with pytest.raises(AmountValidationError, match="smaller than the minor unit"):
        to_minor_units("0.4", "JPY")
