# hangar/routers/expenses.py
# Ledger entries: PATCH = ALLOWED, DELETE = ALLOWED (hard)

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Expenses as DBExpenses
from ..schemas.expenses import EntryType, ExpenseCreate, ExpenseRead
from ..services.entity_saver import save_entity
from ..services.snapshot import get_business

router = APIRouter(prefix="/businesses/{business_id}/expenses", tags=["expenses"])


def _get_expense(db: Session, business_id: str, id: str) -> DBExpenses:
    obj = db.get(DBExpenses, id)
    if not obj or obj.business_id != business_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[ExpenseRead])
def list_expenses(
    business_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Optional[EntryType] = None,
    db: Session = Depends(get_db),
):
    get_business(db, business_id)
    query = db.query(DBExpenses).filter(DBExpenses.business_id == business_id)

    if start_date:
        query = query.filter(DBExpenses.date >= start_date.isoformat())
    if end_date:
        query = query.filter(DBExpenses.date <= end_date.isoformat())
    if type:
        query = query.filter(DBExpenses.type == type.value)

    return query.order_by(DBExpenses.date.desc()).all()


@router.post("/", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    business_id: str,
    data: ExpenseCreate,
    db: Session = Depends(get_db),
):
    get_business(db, business_id)
    return save_entity(db, DBExpenses, data.model_dump(), business_id=business_id)


@router.patch("/{id}", response_model=ExpenseRead)
def update_expense(
    business_id: str,
    id: str,
    data: ExpenseCreate,
    db: Session = Depends(get_db),
):
    obj = _get_expense(db, business_id, id)
    return save_entity(db, DBExpenses, {"id": obj.id, **data.model_dump()}, business_id=business_id)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(business_id: str, id: str, db: Session = Depends(get_db)):
    obj = _get_expense(db, business_id, id)
    db.delete(obj)
    db.commit()
