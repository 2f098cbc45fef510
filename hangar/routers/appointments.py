# hangar/routers/appointments.py
# Status changes go through POST /{id}/status, DELETE = hard (needs ?confirm=true)

from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Appointments as DBAppointments
from ..schemas.appointments import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatus,
    CancelRequest,
    StatusTransition,
    TransitionResponse,
)
from ..services import lifecycle
from ..services.admission import submit_booking
from ..services.snapshot import get_business

router = APIRouter(prefix="/businesses/{business_id}/appointments", tags=["appointments"])


@router.get("/", response_model=list[AppointmentRead])
def list_appointments(
    business_id: str,
    date: Optional[date_type] = None,
    status: Optional[AppointmentStatus] = None,
    customer_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    get_business(db, business_id)
    query = db.query(DBAppointments).filter(DBAppointments.business_id == business_id)

    if date is not None:
        query = query.filter(DBAppointments.date == date.isoformat())
    if status is not None:
        query = query.filter(DBAppointments.status == status.value)
    if customer_id:
        query = query.filter(DBAppointments.customer_id == customer_id)

    return query.order_by(DBAppointments.date, DBAppointments.time).all()


@router.get("/{id}", response_model=AppointmentRead)
def get_appointment(business_id: str, id: str, db: Session = Depends(get_db)):
    return lifecycle.get_appointment(db, business_id, id)


@router.get("/{id}/transitions", response_model=list[AppointmentStatus])
def get_allowed_transitions(business_id: str, id: str, db: Session = Depends(get_db)):
    appointment = lifecycle.get_appointment(db, business_id, id)
    return lifecycle.allowed_transitions(appointment.status)


@router.post("/", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
def create_appointment(
    business_id: str,
    data: AppointmentCreate,
    db: Session = Depends(get_db),
):
    """
    Manual entry by staff.

    Same admission checks as the public flow except the time does not
    have to be a generated slot (walk-ins, phone bookings).
    """
    business = get_business(db, business_id)
    return submit_booking(
        db,
        business,
        data,
        price=data.price,
        box_id=data.box_id,
        observation=data.observation,
    )


@router.post("/{id}/status", response_model=TransitionResponse)
def change_status(
    business_id: str,
    id: str,
    data: StatusTransition,
    db: Session = Depends(get_db),
):
    business = get_business(db, business_id)
    return lifecycle.transition(db, business, id, data.status, data.reason)


@router.post("/{id}/cancel", response_model=TransitionResponse)
def cancel_appointment(
    business_id: str,
    id: str,
    data: Optional[CancelRequest] = None,
    db: Session = Depends(get_db),
):
    business = get_business(db, business_id)
    return lifecycle.cancel(db, business, id, data.reason if data else None)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    business_id: str,
    id: str,
    confirm: bool = Query(False),
    db: Session = Depends(get_db),
):
    business = get_business(db, business_id)
    lifecycle.hard_delete(db, business, id, confirm=confirm)
