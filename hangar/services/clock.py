# hangar/services/clock.py
"""Business-local wall clock. All dates/times are stored as local strings."""

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import settings


def business_now(business=None) -> datetime:
    """Naive local datetime in the business timezone (falls back to settings)."""
    tz_name = getattr(business, "timezone", None) or settings.timezone
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo(settings.timezone)
    return datetime.now(tz).replace(tzinfo=None)


def business_today(business=None) -> date:
    return business_now(business).date()
