# hangar/services/slots/calendar.py
"""
Operating calendar resolver.

Turns weekly operating rules plus blocked dates into a per-day
open/closed decision and a time window. Pure policy: it knows nothing
about "now", callers drop past dates themselves.

Fail-closed: a missing rule, a duplicated weekday, an inverted window
or unparseable stored configuration all resolve to "closed".
"""

import json
import logging
from datetime import date
from typing import Iterable, NamedTuple

from pydantic import TypeAdapter, ValidationError

from ...schemas.business import BlockedDate, OperatingRule

logger = logging.getLogger(__name__)

_rules_adapter = TypeAdapter(list[OperatingRule])
_blocked_adapter = TypeAdapter(list[BlockedDate])


class TimeWindow(NamedTuple):
    open_time: str
    close_time: str


def day_of_week(target_date: date) -> int:
    """0 = Sunday ... 6 = Saturday (stored rule convention)."""
    return (target_date.weekday() + 1) % 7


class OperatingCalendar:
    def __init__(
        self,
        rules: Iterable[OperatingRule],
        blocked_dates: Iterable[BlockedDate] = (),
    ):
        self._rules: dict[int, OperatingRule | None] = {}
        for rule in rules:
            if rule.day_of_week in self._rules:
                # Ambiguous weekday, never open
                self._rules[rule.day_of_week] = None
            else:
                self._rules[rule.day_of_week] = rule
        self._blocked = {b.date.isoformat(): b for b in blocked_dates}

    @classmethod
    def from_business(cls, business) -> "OperatingCalendar":
        rules = load_operating_rules(business)
        blocked = load_blocked_dates(business)
        if rules is None or blocked is None:
            return cls([])
        return cls(rules, blocked)

    def blocked_reason(self, target_date: date) -> str | None:
        blocked = self._blocked.get(target_date.isoformat())
        return blocked.reason if blocked else None

    def is_blocked(self, target_date: date) -> bool:
        return target_date.isoformat() in self._blocked

    def window_for(self, target_date: date) -> TimeWindow | None:
        rule = self._rules.get(day_of_week(target_date))
        if rule is None or not rule.is_open:
            return None
        if self.is_blocked(target_date):
            return None
        if rule.open_time >= rule.close_time:
            return None
        return TimeWindow(rule.open_time, rule.close_time)

    def is_open(self, target_date: date) -> bool:
        return self.window_for(target_date) is not None


# ── Stored configuration ─────────────────────────────────────────────────


def load_operating_rules(business) -> list[OperatingRule] | None:
    """Parse stored weekly rules. None when the stored JSON is unusable."""
    try:
        raw = json.loads(business.operating_days) if business.operating_days else []
        return _rules_adapter.validate_python(raw)
    except (json.JSONDecodeError, ValidationError):
        logger.warning(f"Invalid operating_days for business={business.id}, treating as closed")
        return None


def load_blocked_dates(business) -> list[BlockedDate] | None:
    """Parse stored blocked dates. None when the stored JSON is unusable."""
    try:
        raw = json.loads(business.blocked_dates) if business.blocked_dates else []
        return _blocked_adapter.validate_python(raw)
    except (json.JSONDecodeError, ValidationError):
        logger.warning(f"Invalid blocked_dates for business={business.id}, treating as closed")
        return None


def dump_operating_rules(rules: list[OperatingRule]) -> str:
    return json.dumps([r.model_dump(mode="json") for r in rules])


def dump_blocked_dates(blocked: list[BlockedDate]) -> str:
    ordered = sorted(blocked, key=lambda b: b.date)
    return json.dumps([b.model_dump(mode="json") for b in ordered])
