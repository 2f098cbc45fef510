"""Tests for booking admission control and identity resolution."""

import json
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import booking_payload
from hangar.errors import (
    DateBlocked,
    NotFound,
    ServiceUnavailable,
    SlotFull,
    SlotUnavailable,
)
from hangar.models import Appointments, Businesses, Customers, Services, Vehicles
from hangar.schemas.appointments import BookingSubmit
from hangar.services import admission, lifecycle
from hangar.services.admission import submit_booking
from hangar.services.identity import MatchedByPhone, New


def submit(db, business, service, day, **kwargs):
    options = {
        k: kwargs.pop(k)
        for k in ("price", "box_id", "observation", "enforce_schedule")
        if k in kwargs
    }
    data = BookingSubmit.model_validate(booking_payload(service.id, day, **kwargs))
    return submit_booking(db, business, data, **options)


class TestAdmission:
    """Tests for the happy path."""

    def test_booking_lands_as_novo(self, db, business, service, booking_day):
        appointment = submit(db, business, service, booking_day)
        assert appointment.status == "NOVO"
        assert appointment.date == booking_day.isoformat()
        assert appointment.time == "10:00"
        assert appointment.service_type == "Lavagem Completa"
        assert appointment.duration_minutes == 60
        assert appointment.price == Decimal("80.00")
        assert appointment.slot_ordinal == 0

    def test_price_override(self, db, business, service, booking_day):
        appointment = submit(db, business, service, booking_day, price=Decimal("65.50"))
        assert appointment.price == Decimal("65.50")

    def test_observation_stored(self, db, business, service, booking_day):
        appointment = submit(db, business, service, booking_day, observation="Cliente aguarda")
        assert appointment.observation == "Cliente aguarda"

    def test_unknown_box_rejected(self, db, business, service, booking_day):
        with pytest.raises(NotFound):
            submit(db, business, service, booking_day, box_id="missing-box")
        assert db.query(Appointments).count() == 0


class TestIdentityResolution:
    """Tests for phone / plate dedupe."""

    def test_same_phone_reuses_customer(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day, plate="ABC1D23")
        second = submit(db, business, service, booking_day, time="11:00", plate="XYZ9876")

        assert first.customer_id == second.customer_id
        assert db.query(Customers).count() == 1
        assert db.query(Vehicles).count() == 2

    def test_formatted_phone_matches(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day, phone="11987654321")
        second = submit(db, business, service, booking_day, time="11:00", phone="(11) 98765-4321")
        assert first.customer_id == second.customer_id

    def test_plate_match_is_case_insensitive(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day, plate="ABC1D23")
        second = submit(db, business, service, booking_day, time="11:00", plate="abc-1d23")

        assert first.vehicle_id == second.vehicle_id
        assert db.query(Vehicles).count() == 1

    def test_new_phone_creates_customer(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day, phone="11987654321")
        second = submit(db, business, service, booking_day, phone="21912345678", name="Maria")
        assert first.customer_id != second.customer_id
        assert db.query(Customers).count() == 2

    def test_phone_unique_per_business(self, db, business):
        db.add(Customers(business_id=business.id, name="Ana", phone="11987654321"))
        db.commit()
        db.add(Customers(business_id=business.id, name="Ana B.", phone="11987654321"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_concurrent_first_bookings_share_customer(
        self, db, session_factory, business, service, booking_day, monkeypatch
    ):
        real_resolve = admission.resolve_customer
        seen = []

        def resolve_then_lose_race(session, business_id, identity):
            resolution = real_resolve(session, business_id, identity)
            if session is db:
                seen.append(resolution)
                if len(seen) == 1:
                    # Another request books the same phone between our read and insert
                    other = session_factory()
                    try:
                        submit(other, other.get(Businesses, business_id), service, booking_day, time="11:00")
                    finally:
                        other.close()
            return resolution

        monkeypatch.setattr(admission, "resolve_customer", resolve_then_lose_race)
        appointment = submit(db, business, service, booking_day)

        assert isinstance(seen[0], New)
        assert isinstance(seen[1], MatchedByPhone)
        assert db.query(Customers).count() == 1
        assert db.query(Appointments).count() == 2
        assert appointment.customer_id == seen[1].customer_id

        # Later bookings from that phone still resolve to the one customer
        monkeypatch.undo()
        third = submit(db, business, service, booking_day, time="12:00")
        assert third.customer_id == appointment.customer_id

    def test_unknown_customer_id_rejected(self, db, business, service, booking_day):
        payload = booking_payload(service.id, booking_day)
        payload["customer"]["customer_id"] = "f" * 36
        with pytest.raises(NotFound):
            submit_booking(db, business, BookingSubmit.model_validate(payload))


class TestCapacity:
    """Tests for box capacity per time bucket."""

    def test_capacity_reached(self, db, business, service, booking_day):
        submit(db, business, service, booking_day, phone="11900000001")
        submit(db, business, service, booking_day, phone="11900000002")

        with pytest.raises(SlotFull):
            submit(db, business, service, booking_day, phone="11900000003")

        assert db.query(Appointments).count() == 2

    def test_rejected_booking_creates_no_customer(self, db, business, service, booking_day):
        submit(db, business, service, booking_day, phone="11900000001")
        submit(db, business, service, booking_day, phone="11900000002")

        with pytest.raises(SlotFull):
            submit(db, business, service, booking_day, phone="11900000003")

        assert db.query(Customers).count() == 2

    def test_other_time_unaffected(self, db, business, service, booking_day):
        submit(db, business, service, booking_day, phone="11900000001")
        submit(db, business, service, booking_day, phone="11900000002")
        third = submit(db, business, service, booking_day, time="11:00", phone="11900000003")
        assert third.slot_ordinal == 0

    def test_seats_get_distinct_ordinals(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day, phone="11900000001")
        second = submit(db, business, service, booking_day, phone="11900000002")
        assert {first.slot_ordinal, second.slot_ordinal} == {0, 1}

    def test_cancelled_frees_seat(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day, phone="11900000001")
        submit(db, business, service, booking_day, phone="11900000002")

        lifecycle.cancel(db, business, first.id, "Desistiu")

        third = submit(db, business, service, booking_day, phone="11900000003")
        assert third.slot_ordinal == 0

    def test_duplicate_seat_rejected_by_database(self, db, business, service, booking_day):
        first = submit(db, business, service, booking_day)
        db.add(Appointments(
            business_id=business.id,
            service_type="Lavagem",
            date=first.date,
            time=first.time,
            duration_minutes=60,
            price=Decimal("10"),
            slot_ordinal=first.slot_ordinal,
        ))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestRejections:
    """Tests for blocked dates, services and schedule enforcement."""

    def test_blocked_date(self, db, business, service, booking_day):
        business.blocked_dates = json.dumps([{"date": booking_day.isoformat(), "reason": "Feriado"}])
        db.commit()

        with pytest.raises(DateBlocked) as exc:
            submit(db, business, service, booking_day)

        assert exc.value.details["reason"] == "Feriado"
        assert db.query(Appointments).count() == 0

    def test_inactive_service(self, db, business, service, booking_day):
        service.is_active = 0
        db.commit()

        with pytest.raises(ServiceUnavailable):
            submit(db, business, service, booking_day)

    def test_service_of_other_business(self, db, business, booking_day):
        other = Businesses(business_name="Outra", slug="outra")
        db.add(other)
        db.flush()
        foreign = Services(
            business_id=other.id,
            name="Polimento",
            duration_minutes=120,
            price=Decimal("300"),
        )
        db.add(foreign)
        db.commit()

        with pytest.raises(ServiceUnavailable):
            submit(db, business, foreign, booking_day)

    def test_public_flow_requires_generated_slot(self, db, business, service, booking_day):
        with pytest.raises(SlotUnavailable):
            submit(db, business, service, booking_day, time="10:30", enforce_schedule=True)

    def test_public_flow_rejects_past_day(self, db, business, service, booking_day):
        with pytest.raises(SlotUnavailable):
            submit(
                db, business, service, booking_day - timedelta(days=14),
                enforce_schedule=True,
            )

    def test_public_flow_accepts_open_slot(self, db, business, service, booking_day):
        appointment = submit(db, business, service, booking_day, time="09:00", enforce_schedule=True)
        assert appointment.status == "NOVO"

    def test_manual_entry_accepts_off_grid_time(self, db, business, service, booking_day):
        appointment = submit(db, business, service, booking_day, time="10:30")
        assert appointment.time == "10:30"
