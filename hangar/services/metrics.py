# hangar/services/metrics.py
"""
Revenue / loyalty aggregator.

Read models derived from the appointment and ledger collections on every
read. Nothing here is persisted.

Counting rules:
- revenue counts FINALIZADO appointments only (by `price`)
- occupancy counts EM_EXECUCAO appointments of the day against box capacity
- washes = number of FINALIZADO appointments of a customer
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..schemas.appointments import AppointmentStatus
from ..schemas.expenses import EntryType

LOYALTY_CYCLE = 10

ZERO = Decimal("0")


def _date_str(value: date | str) -> str:
    return value if isinstance(value, str) else value.isoformat()


def _money(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value or 0))


def _finalized(appointments: Iterable) -> list:
    return [a for a in appointments if a.status == AppointmentStatus.FINALIZADO]


# ── Appointment rollups ──────────────────────────────────────────────────


def revenue_for_day(appointments: Iterable, day: date | str) -> Decimal:
    """Σ price of FINALIZADO appointments dated `day`."""
    day_str = _date_str(day)
    return sum(
        (_money(a.price) for a in _finalized(appointments) if a.date == day_str),
        ZERO,
    )


def in_execution_count(appointments: Iterable, day: date | str) -> int:
    day_str = _date_str(day)
    return sum(
        1 for a in appointments
        if a.date == day_str and a.status == AppointmentStatus.EM_EXECUCAO
    )


def occupancy_rate(appointments: Iterable, day: date | str, box_capacity: int) -> float:
    """EM_EXECUCAO count / box_capacity (capacity floor 1)."""
    return in_execution_count(appointments, day) / max(box_capacity or 0, 1)


def pending_inbox(appointments: Iterable) -> list:
    """All NOVO appointments, oldest slot first."""
    return sorted(
        (a for a in appointments if a.status == AppointmentStatus.NOVO),
        key=lambda a: (a.date, a.time),
    )


def production_line(appointments: Iterable, day: date | str) -> list:
    """The day's accepted work: not NOVO, not CANCELADO, by time."""
    day_str = _date_str(day)
    return sorted(
        (
            a for a in appointments
            if a.date == day_str
            and a.status not in (AppointmentStatus.NOVO, AppointmentStatus.CANCELADO)
        ),
        key=lambda a: a.time,
    )


def dashboard(appointments: list, box_capacity: int, today: date) -> dict:
    return {
        "date": today,
        "revenue_today": revenue_for_day(appointments, today),
        "occupancy_rate": round(occupancy_rate(appointments, today, box_capacity) * 100),
        "in_execution": in_execution_count(appointments, today),
        "pending": pending_inbox(appointments),
        "production": production_line(appointments, today),
    }


# ── Customer / loyalty ───────────────────────────────────────────────────


def customer_washes(appointments: Iterable, customer_id: str) -> int:
    return sum(1 for a in _finalized(appointments) if a.customer_id == customer_id)


def customer_lifetime_value(appointments: Iterable, customer_id: str) -> Decimal:
    return sum(
        (_money(a.price) for a in _finalized(appointments) if a.customer_id == customer_id),
        ZERO,
    )


def customer_last_visit(appointments: Iterable, customer_id: str) -> str | None:
    dates = [a.date for a in _finalized(appointments) if a.customer_id == customer_id]
    return max(dates) if dates else None


def loyalty_progress(washes: int) -> dict:
    """Every 10th finished service unlocks a reward."""
    return {
        "progress": washes % LOYALTY_CYCLE,
        "reward_available": washes > 0 and washes % LOYALTY_CYCLE == 0,
        "is_vip": washes >= LOYALTY_CYCLE,
    }


def count_finalized(db: Session, customer_id: str) -> int:
    """Recount a customer's finished services from the source of truth."""
    from ..models import Appointments

    return (
        db.query(func.count(Appointments.id))
        .filter(
            Appointments.customer_id == customer_id,
            Appointments.status == AppointmentStatus.FINALIZADO.value,
        )
        .scalar()
    )


# ── Finance ──────────────────────────────────────────────────────────────


def _is_income(entry) -> bool:
    return entry.type == EntryType.RECEITA


def _is_expense(entry) -> bool:
    # Entries without a type are outflows
    return not entry.type or entry.type == EntryType.DESPESA


def _entry_day(entry) -> str:
    return str(entry.date)[:10]


def financial_summary(appointments: list, expenses: list, today: date) -> dict:
    """Totals, last 7 days flow and expense breakdown."""
    service_revenue = sum((_money(a.price) for a in _finalized(appointments)), ZERO)
    manual_revenue = sum((_money(e.amount) for e in expenses if _is_income(e)), ZERO)
    total_expenses = sum((_money(e.amount) for e in expenses if _is_expense(e)), ZERO)
    total_revenue = service_revenue + manual_revenue

    last_7_days = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        day_str = day.isoformat()
        income = revenue_for_day(appointments, day_str) + sum(
            (_money(e.amount) for e in expenses if _is_income(e) and _entry_day(e) == day_str),
            ZERO,
        )
        expense = sum(
            (_money(e.amount) for e in expenses if _is_expense(e) and _entry_day(e) == day_str),
            ZERO,
        )
        last_7_days.append({"date": day, "income": income, "expense": expense})

    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for e in expenses:
        if _is_expense(e):
            by_category[e.category] += _money(e.amount)

    return {
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "net_profit": total_revenue - total_expenses,
        "last_7_days": last_7_days,
        "expenses_by_category": [
            {"name": name, "value": value} for name, value in by_category.items()
        ],
    }
