# skillswap/utils.py
import datetime as dt
from typing import Optional

from tortoise import timezone


def utc_now() -> dt.datetime:
    """Current time in the form Tortoise stores it (naive UTC unless use_tz is on)."""
    return timezone.now()


def iso(value: Optional[dt.datetime]) -> Optional[str]:
    """ISO-8601 string for API responses; naive datetimes are UTC and get a Z suffix."""
    if value is None:
        return None
    return value.isoformat() + ("Z" if value.tzinfo is None else "")


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0
