# hangar/services/lifecycle.py
"""
Appointment lifecycle state machine.

    NOVO → CONFIRMADO → EM_EXECUCAO → FINALIZADO
      └──────┴──────────────┴──────→ CANCELADO

FINALIZADO and CANCELADO are terminal.

Transitions are compare-and-set on the current status, so two staff
members confirming the same appointment fire side effects once; the
second gets IllegalTransition.

Side effects:
- CONFIRMADO: a confirmation message offer (never sent by the server)
- FINALIZADO: loyalty recount returned to the caller (washes are
  derived, nothing is incremented)
- CANCELADO: seat released (slot_ordinal cleared)

Hard delete is not a transition: it removes the row regardless of
status and requires explicit confirmation.
"""

import logging

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ConfirmationRequired, IllegalTransition, NotFound, PersistenceFailure
from ..models import Appointments
from ..schemas.appointments import AppointmentStatus
from .events import emit_event
from .metrics import count_finalized, loyalty_progress
from .notifications import confirmation_offer

logger = logging.getLogger(__name__)

S = AppointmentStatus

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    S.NOVO: frozenset({S.CONFIRMADO, S.CANCELADO}),
    S.CONFIRMADO: frozenset({S.EM_EXECUCAO, S.CANCELADO}),
    S.EM_EXECUCAO: frozenset({S.FINALIZADO, S.CANCELADO}),
    S.FINALIZADO: frozenset(),
    S.CANCELADO: frozenset(),
}

TERMINAL = frozenset({S.FINALIZADO, S.CANCELADO})


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in TRANSITIONS[AppointmentStatus(current)]


def allowed_transitions(current: AppointmentStatus) -> list[AppointmentStatus]:
    """Targets the UI may offer for an appointment in `current`."""
    return sorted(TRANSITIONS[AppointmentStatus(current)], key=lambda s: list(S).index(s))


def get_appointment(db: Session, business_id: str, appointment_id: str) -> Appointments:
    appointment = db.get(Appointments, appointment_id)
    if not appointment or appointment.business_id != business_id:
        raise NotFound(f"Appointment {appointment_id} not found")
    return appointment


def transition(
    db: Session,
    business,
    appointment_id: str,
    target: AppointmentStatus,
    reason: str | None = None,
) -> dict:
    """
    Move an appointment to `target`.

    Returns:
        Dict with appointment, previous_status, the notification offer and
        the recounted loyalty state (each None when not applicable).

    Raises:
        NotFound, IllegalTransition, PersistenceFailure
    """
    target = AppointmentStatus(target)
    appointment = get_appointment(db, business.id, appointment_id)
    current = AppointmentStatus(appointment.status)

    if not can_transition(current, target):
        logger.warning(
            f"Illegal transition refused: appointment_id={appointment_id}, "
            f"{current.value} → {target.value}"
        )
        raise IllegalTransition(current.value, target.value)

    values = {
        "status": target.value,
        "updated_at": func.current_timestamp(),
    }
    if target == S.CANCELADO:
        values["slot_ordinal"] = None
        values["cancellation_reason"] = reason

    try:
        result = db.execute(
            update(Appointments)
            .where(
                Appointments.id == appointment_id,
                Appointments.status == current.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Someone else moved it first
            db.rollback()
            db.refresh(appointment)
            logger.warning(
                f"Concurrent transition lost: appointment_id={appointment_id}, "
                f"now {appointment.status}, requested {target.value}"
            )
            raise IllegalTransition(appointment.status, target.value)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Transition persistence failed: appointment_id={appointment_id}")
        raise PersistenceFailure("Could not update the appointment status")

    db.refresh(appointment)

    logger.info(
        f"Appointment {appointment_id}: {current.value} → {target.value}"
    )

    notification = None
    loyalty = None
    if target == S.CONFIRMADO:
        notification = confirmation_offer(business, appointment)
    elif target == S.FINALIZADO and appointment.customer_id:
        washes = count_finalized(db, appointment.customer_id)
        loyalty = {
            "customer_id": appointment.customer_id,
            "washes": washes,
            **loyalty_progress(washes),
        }
        logger.info(f"Loyalty recount: customer_id={appointment.customer_id}, washes={washes}")

    emit_event("appointment_status_changed", {
        "business_id": business.id,
        "appointment_id": appointment_id,
        "from": current.value,
        "to": target.value,
    })

    return {
        "appointment": appointment,
        "previous_status": current,
        "notification": notification,
        "loyalty": loyalty,
    }


def cancel(db: Session, business, appointment_id: str, reason: str | None = None) -> dict:
    return transition(db, business, appointment_id, S.CANCELADO, reason)


def hard_delete(db: Session, business, appointment_id: str, confirm: bool = False) -> None:
    """Irreversibly remove an appointment, whatever its status."""
    appointment = get_appointment(db, business.id, appointment_id)
    if not confirm:
        raise ConfirmationRequired(
            "Deleting an appointment is irreversible, confirm to proceed",
            appointment_id=appointment_id,
        )

    status = appointment.status
    try:
        db.delete(appointment)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Hard delete failed: appointment_id={appointment_id}")
        raise PersistenceFailure("Could not delete the appointment")

    logger.warning(f"Appointment hard-deleted: appointment_id={appointment_id}, status was {status}")

    emit_event("appointment_deleted", {
        "business_id": business.id,
        "appointment_id": appointment_id,
    })
