"""Datetime helpers.

Provides UTC timestamp helpers without using deprecated ``datetime.utcnow()``.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

# Injectable "now" source. Returns naive UTC, matching stored timestamps.
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return current UTC time as a naive datetime.

    Records store UTC timestamps as naive datetimes, so comparisons
    against stored ``expires`` values must use this helper too.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch for a naive-UTC or aware datetime."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)
