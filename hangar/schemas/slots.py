# hangar/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel


class DayStatus(BaseModel):
    """Status of a single day in the public calendar."""
    date: date
    is_open: bool
    blocked_reason: Optional[str] = None


class CalendarResponse(BaseModel):
    """Open/closed days of a month (past days omitted)."""
    business_id: str
    year: int
    month: int
    days: list[DayStatus]


class SlotStatus(BaseModel):
    """A candidate start time with its occupancy."""
    time: str  # "HH:MM"
    occupied: int
    capacity: int
    available: bool


class DayAvailabilityResponse(BaseModel):
    """Bookable times for one day."""
    business_id: str
    date: date
    is_open: bool
    blocked_reason: Optional[str] = None
    box_capacity: int
    slot_interval_minutes: int
    slots: list[SlotStatus]
