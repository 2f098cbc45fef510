# hangar/routers/metrics.py
# Read-only views, recomputed from a fresh snapshot on every request

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.metrics import DashboardResponse, FinancialSummary
from ..services import metrics
from ..services.clock import business_today
from ..services.snapshot import load_snapshot

router = APIRouter(prefix="/businesses/{business_id}/metrics", tags=["metrics"])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    business_id: str,
    day: Optional[date] = None,
    db: Session = Depends(get_db),
):
    snapshot = load_snapshot(db, business_id)
    today = day or business_today(snapshot.business)
    return metrics.dashboard(snapshot.appointments, snapshot.business.box_capacity, today)


@router.get("/financial", response_model=FinancialSummary)
def get_financial_summary(
    business_id: str,
    day: Optional[date] = None,
    db: Session = Depends(get_db),
):
    snapshot = load_snapshot(db, business_id)
    today = day or business_today(snapshot.business)
    return metrics.financial_summary(snapshot.appointments, snapshot.expenses, today)
