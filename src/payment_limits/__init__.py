"""In-memory transaction limits for payment services."""

from .amounts import SUPPORTED_CURRENCIES, to_minor_units, validate_amount
from .bootstrap import create_tracker
from .clock import Clock, ManualClock, SystemClock
from .config import (
    AppConfig,
    AppSection,
    LimitConfiguration,
    LogSection,
    RolloverPolicy,
    TrackerSettings,
)
from .envelope import limit_exceeded_response, snapshot_body, validation_error_response
from .exceptions import (
    AmountValidationError,
    ConfigurationError,
    LimitExceededError,
    ResetNotAllowedError,
    TransactionLimitError,
    TransactionLimitErrorCodes,
)
from .guard import PaymentGuard
from .health import HealthStatus, LimitsHealth, limits_health
from .loader import load
from .logger import new_logger
from .models import LimitBreach, LimitDecision, LimitKind, Reservation, TrackerState, Window
from .tracker import TransactionLimitTracker

__all__ = [
    "AmountValidationError",
    "AppConfig",
    "AppSection",
    "Clock",
    "ConfigurationError",
    "HealthStatus",
    "LimitBreach",
    "LimitConfiguration",
    "LimitDecision",
    "LimitExceededError",
    "LimitKind",
    "LimitsHealth",
    "LogSection",
    "ManualClock",
    "PaymentGuard",
    "Reservation",
    "ResetNotAllowedError",
    "RolloverPolicy",
    "SUPPORTED_CURRENCIES",
    "SystemClock",
    "TrackerSettings",
    "TrackerState",
    "TransactionLimitError",
    "TransactionLimitErrorCodes",
    "TransactionLimitTracker",
    "Window",
    "create_tracker",
    "limit_exceeded_response",
    "limits_health",
    "load",
    "new_logger",
    "snapshot_body",
    "to_minor_units",
    "validate_amount",
    "validation_error_response",
]
