"""Health reporting for the transaction limit tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .config import LimitConfiguration
from .envelope import snapshot_body
from .models import TrackerState
from .tracker import TransactionLimitTracker


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


@dataclass
class LimitsHealth:
    """Limit section of the service health response."""

    status: HealthStatus
    state: TrackerState
    limits: LimitConfiguration
    environment: str
    enforcing: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "environment": self.environment,
            "enforcing": self.enforcing,
            "timestamp": self.timestamp.isoformat(),
            "transactions": snapshot_body(self.state, self.limits),
        }


def limits_health(tracker: TransactionLimitTracker) -> LimitsHealth:
    """Degraded while a limit breach is active, healthy otherwise."""
    state = tracker.snapshot()
    status = HealthStatus.DEGRADED if state.active_breach is not None else HealthStatus.HEALTHY
    return LimitsHealth(
        status=status,
        state=state,
        limits=tracker.limits,
        environment=tracker.settings.environment,
        enforcing=tracker.settings.enforce_limits,
    )
