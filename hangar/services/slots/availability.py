# hangar/services/slots/availability.py
"""
Day availability for the booking flows.

Combines:
- Base business slots (calendar + interval + now, cached in Redis when available)
- Occupancy recounted from the appointments table on every call
"""

import calendar as month_calendar
import logging
from datetime import date, datetime

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from .calculator import calculate_day_slots
from .calendar import OperatingCalendar
from .config import BookingConfig, get_booking_config
from .occupancy import annotate_slots, occupancy_for
from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def calculate_day_availability(
    db: Session,
    business,
    target_date: date,
    now: datetime,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> dict:
    """
    Calculate bookable times for a business day.

    Returns:
        Dict for DayAvailabilityResponse.
    """
    config = config or get_booking_config()
    calendar = OperatingCalendar.from_business(business)

    base_times = _get_base_times(business, target_date, config, now, redis)

    appointments = _get_day_appointments(db, business.id, target_date)
    occupancy = occupancy_for(appointments, target_date)

    return {
        "business_id": business.id,
        "date": target_date.isoformat(),
        "is_open": calendar.is_open(target_date),
        "blocked_reason": calendar.blocked_reason(target_date),
        "box_capacity": business.box_capacity,
        "slot_interval_minutes": business.slot_interval_minutes,
        "slots": annotate_slots(base_times, occupancy, business.box_capacity),
    }


def open_days(business, year: int, month: int, today: date) -> list[dict]:
    """Days of a month from today onwards with their open/closed decision."""
    calendar = OperatingCalendar.from_business(business)
    _, days_in_month = month_calendar.monthrange(year, month)

    days = []
    for day in range(1, days_in_month + 1):
        dt = date(year, month, day)
        if dt < today:
            continue
        days.append({
            "date": dt,
            "is_open": calendar.is_open(dt),
            "blocked_reason": calendar.blocked_reason(dt),
        })
    return days


# ── Base times (with cache) ──────────────────────────────────────────────


def _get_base_times(
    business,
    target_date: date,
    config: BookingConfig,
    now: datetime,
    redis: Redis | None,
) -> list[str]:
    """Get base business times, using Redis cache when available."""
    if redis is not None:
        store = SlotsRedisStore(redis, config)
        try:
            cached = store.get_available_slots(business.id, target_date, now)
            if cached is not None:
                return cached

            # Cache miss, calculate and store
            slots = calculate_day_slots(business, target_date, now)
            store.store_day_slots(business.id, target_date, slots)
            return [time_str for time_str, _ in slots]
        except RedisError:
            logger.exception(f"Slots cache unavailable for business={business.id}")

    # No Redis, calculate on the fly
    slots = calculate_day_slots(business, target_date, now)
    return [time_str for time_str, _ in slots]


# ── Database helpers ─────────────────────────────────────────────────────


def _get_day_appointments(db: Session, business_id: str, target_date: date) -> list:
    """Fresh fetch of the day's appointments (all statuses)."""
    from ...models import Appointments

    return (
        db.query(Appointments)
        .filter(
            Appointments.business_id == business_id,
            Appointments.date == target_date.isoformat(),
        )
        .all()
    )
