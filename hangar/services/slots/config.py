# hangar/services/slots/config.py
"""
Booking configuration and time helpers for slots calculation.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        horizon_days: How many days ahead the public site shows slots
        cache_ttl_seconds: Redis cache TTL for base day slots
    """
    horizon_days: int = 60
    cache_ttl_seconds: int = 86400

    def __post_init__(self):
        if self.horizon_days <= 0:
            raise ValueError(f"horizon_days must be positive, got {self.horizon_days}")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton), read from settings."""
    return BookingConfig(
        horizon_days=settings.horizon_days,
        cache_ttl_seconds=settings.slots_cache_ttl_seconds,
    )


def time_str_to_minutes(value: str) -> int:
    """"HH:MM" → minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Minutes since midnight → "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
