# offer_service/core/clock.py
"""
Time sources for the offer lifecycle.

Every expiry computation takes "now" from a Clock so that the rules can be
exercised at any instant without touching the wall clock.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (some backends drop tzinfo on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Clock:
    """Supplies the current time."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, current: Optional[datetime] = None):
        self._current = ensure_aware(current or datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = ensure_aware(current)

    def advance(self, delta: timedelta) -> datetime:
        self._current = self._current + delta
        return self._current


system_clock = SystemClock()
