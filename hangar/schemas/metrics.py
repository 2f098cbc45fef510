# hangar/schemas/metrics.py

from datetime import date
from decimal import Decimal
from pydantic import BaseModel

from .appointments import AppointmentRead


class DashboardResponse(BaseModel):
    date: date
    revenue_today: Decimal
    occupancy_rate: int  # percent of box capacity in execution now
    in_execution: int
    pending: list[AppointmentRead]
    production: list[AppointmentRead]


class DailyFlow(BaseModel):
    date: date
    income: Decimal
    expense: Decimal


class CategoryTotal(BaseModel):
    name: str
    value: Decimal


class FinancialSummary(BaseModel):
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    last_7_days: list[DailyFlow]
    expenses_by_category: list[CategoryTotal]
