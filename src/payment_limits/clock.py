"""Clock sources for the tracker."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Protocol


class Clock(Protocol):
    """Source of the current time. Must return timezone-aware datetimes."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock."""

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class ManualClock:
    """Manually driven clock for testing."""

    def __init__(self, start: datetime) -> None:
        self._now = _require_aware(start)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        """Jump to an absolute time."""
        self._now = _require_aware(value)

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward by delta and return the new time."""
        self._now = self._now + delta
        return self._now


def _require_aware(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("Clock times must be timezone-aware")
    return value
