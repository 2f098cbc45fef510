# hangar/services/slots/__init__.py
"""
Slots calculation module.

Calendar resolver → slot generator → occupancy counter.
Base slots may be cached in Redis Sorted Sets; occupancy never is.
"""

from .config import BookingConfig, get_booking_config
from .calendar import OperatingCalendar, TimeWindow, day_of_week
from .calculator import calculate_day_slots, generate_slots
from .occupancy import annotate_slots, is_bookable, occupancy_for
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_business_cache
from .availability import calculate_day_availability, open_days

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "OperatingCalendar",
    "TimeWindow",
    "day_of_week",
    "calculate_day_slots",
    "generate_slots",
    "annotate_slots",
    "is_bookable",
    "occupancy_for",
    "SlotsRedisStore",
    "invalidate_business_cache",
    "calculate_day_availability",
    "open_days",
]
