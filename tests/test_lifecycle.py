"""Tests for the appointment lifecycle state machine."""

import pytest

from conftest import booking_payload
from hangar.errors import ConfirmationRequired, IllegalTransition, NotFound
from hangar.models import Appointments
from hangar.schemas.appointments import AppointmentStatus as S, BookingSubmit
from hangar.services import lifecycle
from hangar.services.admission import submit_booking
from hangar.services.metrics import count_finalized


@pytest.fixture
def appointment(db, business, service, booking_day):
    data = BookingSubmit.model_validate(booking_payload(service.id, booking_day))
    return submit_booking(db, business, data)


def run_to(db, business, appointment_id, *targets):
    for target in targets:
        lifecycle.transition(db, business, appointment_id, target)


class TestTransitionTable:
    """Tests for the allowed-transition table."""

    def test_forward_path(self):
        assert lifecycle.can_transition(S.NOVO, S.CONFIRMADO)
        assert lifecycle.can_transition(S.CONFIRMADO, S.EM_EXECUCAO)
        assert lifecycle.can_transition(S.EM_EXECUCAO, S.FINALIZADO)

    def test_cancel_from_any_active_state(self):
        for state in (S.NOVO, S.CONFIRMADO, S.EM_EXECUCAO):
            assert lifecycle.can_transition(state, S.CANCELADO)

    def test_no_skipping(self):
        assert not lifecycle.can_transition(S.NOVO, S.EM_EXECUCAO)
        assert not lifecycle.can_transition(S.NOVO, S.FINALIZADO)
        assert not lifecycle.can_transition(S.CONFIRMADO, S.FINALIZADO)

    def test_terminal_states(self):
        for state in lifecycle.TERMINAL:
            assert lifecycle.allowed_transitions(state) == []

    def test_allowed_transitions_ordered(self):
        assert lifecycle.allowed_transitions(S.NOVO) == [S.CONFIRMADO, S.CANCELADO]

    def test_accepts_raw_status_strings(self):
        assert lifecycle.can_transition("NOVO", S.CONFIRMADO)


class TestTransition:
    """Tests for applying transitions."""

    def test_confirm(self, db, business, appointment):
        result = lifecycle.transition(db, business, appointment.id, S.CONFIRMADO)
        assert result["appointment"].status == "CONFIRMADO"
        assert result["previous_status"] == S.NOVO

    def test_confirm_offers_whatsapp_message(self, db, business, appointment):
        result = lifecycle.transition(db, business, appointment.id, S.CONFIRMADO)
        offer = result["notification"]
        assert offer["phone"] == "11987654321"
        assert offer["link"].startswith("https://wa.me/5511987654321?text=")
        assert "João Silva" in offer["message"]
        assert "Lavagem Completa" in offer["message"]

    def test_other_transitions_offer_nothing(self, db, business, appointment):
        run_to(db, business, appointment.id, S.CONFIRMADO)
        result = lifecycle.transition(db, business, appointment.id, S.EM_EXECUCAO)
        assert result["notification"] is None

    def test_illegal_transition_leaves_status(self, db, business, appointment):
        with pytest.raises(IllegalTransition) as exc:
            lifecycle.transition(db, business, appointment.id, S.EM_EXECUCAO)

        assert exc.value.details == {"current": "NOVO", "requested": "EM_EXECUCAO"}
        db.refresh(appointment)
        assert appointment.status == "NOVO"

    def test_double_confirm_rejected(self, db, business, appointment):
        lifecycle.transition(db, business, appointment.id, S.CONFIRMADO)
        with pytest.raises(IllegalTransition):
            lifecycle.transition(db, business, appointment.id, S.CONFIRMADO)

    def test_finalized_is_terminal(self, db, business, appointment):
        run_to(db, business, appointment.id, S.CONFIRMADO, S.EM_EXECUCAO, S.FINALIZADO)
        with pytest.raises(IllegalTransition):
            lifecycle.cancel(db, business, appointment.id)

    def test_cancelled_is_terminal(self, db, business, appointment):
        lifecycle.cancel(db, business, appointment.id, "Chuva")
        with pytest.raises(IllegalTransition):
            lifecycle.transition(db, business, appointment.id, S.CONFIRMADO)

    def test_cancel_releases_seat_and_keeps_reason(self, db, business, appointment):
        result = lifecycle.cancel(db, business, appointment.id, "Chuva")
        cancelled = result["appointment"]
        assert cancelled.status == "CANCELADO"
        assert cancelled.slot_ordinal is None
        assert cancelled.cancellation_reason == "Chuva"

    def test_unknown_appointment(self, db, business):
        with pytest.raises(NotFound):
            lifecycle.transition(db, business, "missing", S.CONFIRMADO)

    def test_finalize_counts_one_wash(self, db, business, appointment):
        customer_id = appointment.customer_id
        assert count_finalized(db, customer_id) == 0

        run_to(db, business, appointment.id, S.CONFIRMADO, S.EM_EXECUCAO, S.FINALIZADO)
        assert count_finalized(db, customer_id) == 1

        # A repeated finalize is refused, so the count cannot double
        with pytest.raises(IllegalTransition):
            lifecycle.transition(db, business, appointment.id, S.FINALIZADO)
        assert count_finalized(db, customer_id) == 1

    def test_finalize_returns_loyalty_state(self, db, business, appointment):
        run_to(db, business, appointment.id, S.CONFIRMADO, S.EM_EXECUCAO)
        result = lifecycle.transition(db, business, appointment.id, S.FINALIZADO)
        assert result["loyalty"] == {
            "customer_id": appointment.customer_id,
            "washes": 1,
            "progress": 1,
            "reward_available": False,
            "is_vip": False,
        }

    def test_loyalty_only_on_finalize(self, db, business, appointment):
        result = lifecycle.transition(db, business, appointment.id, S.CONFIRMADO)
        assert result["loyalty"] is None


class TestHardDelete:
    """Tests for irreversible deletion."""

    def test_requires_confirmation(self, db, business, appointment):
        with pytest.raises(ConfirmationRequired):
            lifecycle.hard_delete(db, business, appointment.id)
        assert db.get(Appointments, appointment.id) is not None

    def test_confirmed_delete(self, db, business, appointment):
        appointment_id = appointment.id
        lifecycle.hard_delete(db, business, appointment_id, confirm=True)
        assert db.get(Appointments, appointment_id) is None

    def test_deletes_terminal_appointments_too(self, db, business, appointment):
        appointment_id = appointment.id
        lifecycle.cancel(db, business, appointment_id)
        lifecycle.hard_delete(db, business, appointment_id, confirm=True)
        assert db.get(Appointments, appointment_id) is None
