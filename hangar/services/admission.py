# hangar/services/admission.py
"""
Booking admission control.

Checks, in order:
1. Date not blocked                       → DateBlocked
2. Service exists and is active           → ServiceUnavailable
3. (public flow) time is an open slot     → SlotUnavailable
4. Customer / vehicle identity resolution → IdentityConflict
5. Seat free at (date, time)              → SlotFull

Seats: every non-cancelled appointment holds a slot_ordinal in
[0, box_capacity). The unique constraint on
(business_id, date, time, slot_ordinal) turns a concurrent double-claim
of the last seat into an IntegrityError, reported as SlotFull.
The unique (business_id, phone) constraint on customers does the same
for two first bookings from one phone: the loser retries once and
attaches to the winner's customer.

The new appointment starts as NOVO. No confirmation, no notification.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import (
    DateBlocked,
    NotFound,
    PersistenceFailure,
    ServiceUnavailable,
    SlotFull,
    SlotUnavailable,
)
from ..models import Appointments, ServiceBays, Services
from ..schemas.appointments import AppointmentStatus, BookingSubmit
from .clock import business_now
from .events import emit_event
from .identity import apply_resolution, resolve_customer
from .slots.calculator import generate_slots
from .slots.calendar import OperatingCalendar

logger = logging.getLogger(__name__)


def submit_booking(
    db: Session,
    business,
    data: BookingSubmit,
    *,
    price: Optional[Decimal] = None,
    box_id: Optional[str] = None,
    observation: Optional[str] = None,
    enforce_schedule: bool = False,
    now: Optional[datetime] = None,
) -> Appointments:
    """
    Admit a booking and persist it as NOVO.

    Args:
        price: admin override of the service list price
        enforce_schedule: public flow, time must be a generated open slot

    Raises:
        DateBlocked, ServiceUnavailable, SlotUnavailable, IdentityConflict,
        SlotFull, NotFound, PersistenceFailure
    """
    date_str = data.date.isoformat()

    # Step 1: Blocked date (re-checked, nothing is held while the form is filled)
    calendar = OperatingCalendar.from_business(business)
    if calendar.is_blocked(data.date):
        logger.info(f"Booking rejected, date blocked: business={business.id}, date={date_str}")
        raise DateBlocked(date_str, calendar.blocked_reason(data.date))

    # Step 2: Service
    service = _get_active_service(db, business.id, data.service_id)
    if not service:
        logger.info(f"Booking rejected, service unavailable: service_id={data.service_id}")
        raise ServiceUnavailable("Service not found or inactive", service_id=data.service_id)

    if enforce_schedule:
        now = now or business_now(business)
        slots = generate_slots(
            data.date,
            calendar.window_for(data.date),
            business.slot_interval_minutes,
            now,
        )
        if data.time not in slots:
            logger.info(f"Booking rejected, not an open slot: {date_str} {data.time}")
            raise SlotUnavailable(date_str, data.time)

    if box_id is not None:
        box = db.get(ServiceBays, box_id)
        if not box or box.business_id != business.id:
            raise NotFound(f"Box {box_id} not found")

    # A concurrent first booking for the same phone can win the customer
    # insert; the second attempt then resolves to that customer.
    for attempt in range(2):
        # Step 3: Identity
        resolution = resolve_customer(db, business.id, data.customer)

        try:
            # Step 4: Seat
            ordinal = _claim_seat(db, business, date_str, data.time)

            customer, vehicle = apply_resolution(db, business.id, resolution, data.vehicle)

            # Step 5: Persist
            appointment = Appointments(
                business_id=business.id,
                customer_id=customer.id,
                vehicle_id=vehicle.id,
                service_id=service.id,
                box_id=box_id,
                service_type=service.name,
                date=date_str,
                time=data.time,
                duration_minutes=service.duration_minutes,
                price=price if price is not None else service.price,
                status=AppointmentStatus.NOVO.value,
                slot_ordinal=ordinal,
                observation=observation,
            )
            db.add(appointment)
            db.commit()
            break
        except IntegrityError as e:
            db.rollback()
            if "slot_ordinal" in str(e.orig):
                logger.warning(f"Concurrent booking lost the seat: {date_str} {data.time}")
                raise SlotFull(date_str, data.time, business.box_capacity)
            if _is_phone_conflict(e) and attempt == 0:
                logger.warning(f"Concurrent customer insert for phone {data.customer.phone}, retrying")
                continue
            logger.exception("Booking persistence failed")
            raise PersistenceFailure("Could not save the booking")
        except SlotFull:
            db.rollback()
            logger.info(f"Booking rejected, slot full: business={business.id}, {date_str} {data.time}")
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Booking persistence failed")
            raise PersistenceFailure("Could not save the booking")

    db.refresh(appointment)

    logger.info(
        f"Booking admitted: appointment_id={appointment.id}, "
        f"customer_id={customer.id}, service={service.name}, "
        f"time={date_str} {data.time}, seat={ordinal}"
    )

    emit_event("appointment_created", {
        "business_id": business.id,
        "appointment_id": appointment.id,
        "date": date_str,
        "time": data.time,
    })

    return appointment


# ── Helpers ──────────────────────────────────────────────────────────────


def _get_active_service(db: Session, business_id: str, service_id: str):
    return (
        db.query(Services)
        .filter(
            Services.id == service_id,
            Services.business_id == business_id,
            Services.is_active == 1,
        )
        .first()
    )


def _is_phone_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return "uq_customers_business_phone" in message or "customers.phone" in message


def _claim_seat(db: Session, business, date_str: str, time_str: str) -> int:
    """Lowest free seat ordinal at (date, time), SlotFull when none."""
    rows = (
        db.query(Appointments.slot_ordinal)
        .filter(
            Appointments.business_id == business.id,
            Appointments.date == date_str,
            Appointments.time == time_str,
            Appointments.status != AppointmentStatus.CANCELADO.value,
        )
        .all()
    )
    if len(rows) >= business.box_capacity:
        raise SlotFull(date_str, time_str, business.box_capacity)

    used = {ordinal for (ordinal,) in rows if ordinal is not None}
    for ordinal in range(business.box_capacity):
        if ordinal not in used:
            return ordinal
    raise SlotFull(date_str, time_str, business.box_capacity)
