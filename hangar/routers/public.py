# hangar/routers/public.py
"""
Public booking page API.

GET  /public/{slug}           - Profile + active services
GET  /public/{slug}/calendar  - Open/closed days of a month
GET  /public/{slug}/slots     - Bookable times for a day
POST /public/{slug}/bookings  - Submit a booking (lands as NOVO)
"""

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Services as DBServices
from ..redis_client import redis_client
from ..schemas.appointments import AppointmentRead, BookingSubmit
from ..schemas.business import PublicProfile
from ..schemas.slots import CalendarResponse, DayAvailabilityResponse
from ..services.admission import submit_booking
from ..services.clock import business_now
from ..services.slots import calculate_day_availability, get_booking_config, open_days
from ..services.snapshot import get_business_by_slug

router = APIRouter(prefix="/public", tags=["public"])


def _bookable_business(db: Session, slug: str):
    business = get_business_by_slug(db, slug)
    if not business.online_booking_enabled:
        raise HTTPException(status_code=403, detail="Online booking is disabled")
    return business


@router.get("/{slug}", response_model=PublicProfile)
def get_public_profile(slug: str, db: Session = Depends(get_db)):
    business = _bookable_business(db, slug)
    services = (
        db.query(DBServices)
        .filter(DBServices.business_id == business.id, DBServices.is_active == 1)
        .order_by(DBServices.name)
        .all()
    )
    return PublicProfile(
        business_name=business.business_name,
        slug=business.slug,
        address=business.address,
        whatsapp=business.whatsapp,
        box_capacity=business.box_capacity,
        slot_interval_minutes=business.slot_interval_minutes,
        loyalty_program_enabled=bool(business.loyalty_program_enabled),
        services=services,
    )


@router.get("/{slug}/calendar", response_model=CalendarResponse)
def get_public_calendar(
    slug: str,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Days of the month from today on (Level 1)."""
    business = _bookable_business(db, slug)
    config = get_booking_config()
    today = business_now(business).date()
    max_date = today + timedelta(days=config.horizon_days)

    days = [d for d in open_days(business, year, month, today) if d["date"] <= max_date]

    return CalendarResponse(
        business_id=business.id,
        year=year,
        month=month,
        days=days,
    )


@router.get("/{slug}/slots", response_model=DayAvailabilityResponse)
def get_public_slots(
    slug: str,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Bookable times with live occupancy for one day (Level 2)."""
    business = _bookable_business(db, slug)
    config = get_booking_config()

    now = business_now(business)
    today = now.date()
    max_date = today + timedelta(days=config.horizon_days)

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    if target_date > max_date:
        raise HTTPException(status_code=400, detail=f"Date cannot be more than {config.horizon_days} days ahead")

    result = calculate_day_availability(
        db=db,
        business=business,
        target_date=target_date,
        now=now,
        config=config,
        redis=redis_client,
    )

    return DayAvailabilityResponse(**result)


@router.post("/{slug}/bookings", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
def submit_public_booking(
    slug: str,
    data: BookingSubmit,
    db: Session = Depends(get_db),
):
    business = _bookable_business(db, slug)
    return submit_booking(db, business, data, enforce_schedule=True)
