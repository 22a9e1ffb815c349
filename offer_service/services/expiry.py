# offer_service/services/expiry.py
"""
Read-time expiry rules for offers.

Expiry is never stored. Every caller that displays, filters or gates on
expiry goes through these functions so the numbers agree everywhere:

- is_expired:        valid_until < now
- days_until_expiry: ceiling of the remaining time in days; 0 or negative
                     means the offer lapsed today or earlier
- display_status:    "expired" for a stored "pending" offer that is expired
- can_respond:       stored "pending" and days_until_expiry > 0
"""
import math
from datetime import datetime, timedelta

from offer_service.core.clock import ensure_aware

PENDING = "pending"
EXPIRED = "expired"

ONE_DAY = timedelta(days=1)


def days_until_expiry(valid_until: datetime, now: datetime) -> int:
    remaining = ensure_aware(valid_until) - ensure_aware(now)
    return math.ceil(remaining / ONE_DAY)


def is_expired(valid_until: datetime, now: datetime) -> bool:
    return ensure_aware(valid_until) < ensure_aware(now)


def has_lapsed(valid_until: datetime, now: datetime) -> bool:
    """True once no whole or partial day of validity remains."""
    return days_until_expiry(valid_until, now) <= 0


def display_status(status: str, valid_until: datetime, now: datetime) -> str:
    if status == PENDING and is_expired(valid_until, now):
        return EXPIRED
    return status


def can_respond(status: str, valid_until: datetime, now: datetime) -> bool:
    return status == PENDING and not has_lapsed(valid_until, now)
