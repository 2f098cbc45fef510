"""Shared fixtures: in-memory SQLite, no Redis."""

import json
import os
from datetime import timedelta
from decimal import Decimal

# Must be set before hangar.config is imported
os.environ["REDIS_URL"] = ""
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hangar.database import enable_sqlite_fk, get_db
from hangar.main import app
from hangar.models import Base, Businesses, Services
from hangar.services.clock import business_today

ALL_WEEK = [
    {"day_of_week": d, "is_open": True, "open_time": "08:00", "close_time": "18:00"}
    for d in range(7)
]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_fk)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """Test client bound to the in-memory database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def business(db):
    """Open every day 08:00-18:00, hourly slots, two boxes."""
    obj = Businesses(
        business_name="Hangar Estética Automotiva",
        slug="hangar",
        whatsapp="11999990000",
        box_capacity=2,
        slot_interval_minutes=60,
        operating_days=json.dumps(ALL_WEEK),
        blocked_dates="[]",
        loyalty_program_enabled=1,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def service(db, business):
    obj = Services(
        business_id=business.id,
        name="Lavagem Completa",
        duration_minutes=60,
        price=Decimal("80.00"),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def booking_day(business):
    """A date a week ahead: every slot of it is in the future."""
    return business_today(business) + timedelta(days=7)


def booking_payload(service_id, day, time="10:00", phone="11987654321", plate="ABC1D23", name="João Silva"):
    return {
        "service_id": service_id,
        "date": day.isoformat(),
        "time": time,
        "customer": {"name": name, "phone": phone},
        "vehicle": {"brand": "Toyota", "model": "Corolla", "plate": plate},
    }
