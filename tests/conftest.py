"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from payment_limits import ManualClock


@pytest.fixture
def clock() -> ManualClock:
    """Clock parked at 2024-03-15 10:30 UTC."""
    return ManualClock(datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc))
