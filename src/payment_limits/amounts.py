"""Amount conversion and per-transaction bounds."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .config import LimitConfiguration
from .exceptions import AmountValidationError, TransactionLimitErrorCodes

SUPPORTED_CURRENCIES: frozenset[str] = frozenset({"USD", "CAD", "EUR", "GBP", "JPY", "AUD"})

# Currencies charged in whole units.
ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset({"JPY"})


def minor_unit_exponent(currency: str) -> int:
    """Number of decimal places between the major and minor unit."""
    return 0 if _normalize_currency(currency) in ZERO_DECIMAL_CURRENCIES else 2


def to_minor_units(amount: str | int | float | Decimal, currency: str = "USD") -> int:
    """Convert a major-unit amount (e.g. dollars) into minor units (e.g. cents).

    Rounds half up to the nearest minor unit.

    Raises:
        AmountValidationError: the amount is not a positive finite number or
            the currency is not supported.
    """
    exponent = minor_unit_exponent(currency)
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise AmountValidationError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise AmountValidationError(f"Amount must be a positive number, got {amount!r}")
    minor = (value * (Decimal(10) ** exponent)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if minor == 0:
        raise AmountValidationError(
            f"Amount {amount!r} is smaller than the minor unit of {currency.upper()}"
        )
    return int(minor)


def validate_amount(amount_minor_units: int, limits: LimitConfiguration) -> None:
    """Check a single transaction against the per-transaction bounds."""
    low = limits.min_per_transaction_minor_units
    high = limits.max_per_transaction_minor_units
    if not low <= amount_minor_units <= high:
        raise AmountValidationError(
            f"Amount must be between {low} and {high} minor units, got {amount_minor_units}"
        )


def _normalize_currency(currency: str) -> str:
    code = currency.strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise AmountValidationError(
            f"Invalid currency code: {currency}",
            field="currency",
            code=TransactionLimitErrorCodes.UNSUPPORTED_CURRENCY,
        )
    return code
