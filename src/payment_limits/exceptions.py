"""payment_limits exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import LimitDecision


class TransactionLimitError(Exception):
    """Base error of the payment_limits library."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class TransactionLimitErrorCodes:
    """Error code constants."""

    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
    INVALID_AMOUNT: str = "INVALID_AMOUNT"
    UNSUPPORTED_CURRENCY: str = "UNSUPPORTED_CURRENCY"
    RESET_FORBIDDEN: str = "RESET_FORBIDDEN"
    LIMIT_EXCEEDED: str = "LIMIT_EXCEEDED"


class ConfigurationError(TransactionLimitError):
    """Invalid limit configuration. Fatal at startup."""

    def __init__(
        self,
        message: str,
        code: str = TransactionLimitErrorCodes.VALIDATION,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, cause=cause)


class AmountValidationError(TransactionLimitError):
    """Transaction amount rejected before it reaches the tracker."""

    def __init__(
        self,
        message: str,
        *,
        field: str = "amount",
        code: str = TransactionLimitErrorCodes.INVALID_AMOUNT,
    ) -> None:
        super().__init__(code=code, message=message)
        self.field = field


class ResetNotAllowedError(TransactionLimitError):
    """force_reset was called in a production deployment."""

    def __init__(self, environment: str) -> None:
        super().__init__(
            code=TransactionLimitErrorCodes.RESET_FORBIDDEN,
            message=f"Limit reset is not allowed in environment: {environment}",
        )
        self.environment = environment


class LimitExceededError(TransactionLimitError):
    """Raised by PaymentGuard when the tracker refuses a transaction.

    The tracker itself returns breaches as LimitDecision values; this error
    only exists at the guard boundary so request handlers can map it to 429.
    """

    def __init__(self, decision: LimitDecision) -> None:
        super().__init__(
            code=TransactionLimitErrorCodes.LIMIT_EXCEEDED,
            message=decision.message or "Transaction limit exceeded",
        )
        self.decision = decision
