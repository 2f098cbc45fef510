# hangar/services/slots/occupancy.py
"""
Occupancy counter.

Counts non-cancelled appointments per exact start time. Same-time-bucket
model: two appointments overlapping in execution but starting at
different times do not count against each other.
"""

from collections import Counter
from datetime import date
from typing import Iterable

from ...schemas.appointments import AppointmentStatus


def occupancy_for(appointments: Iterable, target_date: date | str) -> dict[str, int]:
    """Map "HH:MM" → number of non-cancelled appointments on target_date."""
    date_str = target_date if isinstance(target_date, str) else target_date.isoformat()
    counts: Counter[str] = Counter()
    for apt in appointments:
        if apt.date == date_str and apt.status != AppointmentStatus.CANCELADO:
            counts[apt.time] += 1
    return dict(counts)


def is_bookable(occupancy: dict[str, int], time_str: str, box_capacity: int) -> bool:
    return occupancy.get(time_str, 0) < box_capacity


def annotate_slots(
    times: list[str],
    occupancy: dict[str, int],
    box_capacity: int,
) -> list[dict]:
    """Attach occupancy and availability to each candidate time."""
    return [
        {
            "time": time_str,
            "occupied": occupancy.get(time_str, 0),
            "capacity": box_capacity,
            "available": is_bookable(occupancy, time_str, box_capacity),
        }
        for time_str in times
    ]
