# hangar/services/slots/calculator.py
"""
Base slot calculation for a business day.

Produces start times "HH:MM" stepping by the business slot interval
from open_time. A start is kept only when a full interval fits before
close_time (no partial last slot), and only when it is strictly after
`now`. This deliberately differs from the earlier booking page, which
offered every start before close (08:00-18:00 at 45 min gave 17:45).

Contains:
✓ weekly operating rules
✓ blocked dates
✓ past-time exclusion

Does NOT contain:
✗ Appointments (occupancy is counted separately, never cached)
"""

from datetime import date, datetime, timedelta

from .calendar import OperatingCalendar, TimeWindow
from .config import time_str_to_minutes, minutes_to_time_str


def generate_slots(
    target_date: date,
    window: TimeWindow | None,
    interval_minutes: int,
    now: datetime,
) -> list[str]:
    """
    Enumerate candidate start times inside `window`.

    Returns:
        Ascending list of "HH:MM". Empty when closed or all times passed.
    """
    return [time_str for time_str, _ in _iter_slots(target_date, window, interval_minutes, now)]


def calculate_day_slots(
    business,
    target_date: date,
    now: datetime,
) -> list[tuple[str, float]]:
    """
    Calculate slots for a business on a specific date.

    Returns:
        List of (time_str, slot_ts) pairs. Empty list = no slots.
    """
    calendar = OperatingCalendar.from_business(business)
    window = calendar.window_for(target_date)
    return list(_iter_slots(target_date, window, business.slot_interval_minutes, now))


def _iter_slots(
    target_date: date,
    window: TimeWindow | None,
    interval_minutes: int,
    now: datetime,
):
    if window is None or not interval_minutes or interval_minutes <= 0:
        return

    start_min = time_str_to_minutes(window.open_time)
    end_min = time_str_to_minutes(window.close_time)
    day_start = datetime.combine(target_date, datetime.min.time())

    t = start_min
    while t + interval_minutes <= end_min:
        slot_dt = day_start + timedelta(minutes=t)
        if slot_dt > now:
            yield minutes_to_time_str(t), slot_dt.timestamp()
        t += interval_minutes
