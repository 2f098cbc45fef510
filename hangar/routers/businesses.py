# hangar/routers/businesses.py
# Profile PATCH = ALLOWED, DELETE = 405 (businesses are never deleted)

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Businesses as DBBusinesses, ServiceBays as DBServiceBays
from ..redis_client import redis_client
from ..schemas.business import (
    BlockedDate,
    BusinessCreate,
    BusinessRead,
    BusinessUpdate,
    OperatingDaysUpdate,
    ServiceBayCreate,
    ServiceBayRead,
)
from ..schemas.slots import DayAvailabilityResponse
from ..services.clock import business_now
from ..services.entity_saver import save_entity
from ..services.slots import calculate_day_availability, invalidate_business_cache
from ..services.slots.calendar import (
    dump_blocked_dates,
    dump_operating_rules,
    load_blocked_dates,
    load_operating_rules,
)
from ..services.snapshot import get_business, get_business_by_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["businesses"])


def business_view(business: DBBusinesses) -> BusinessRead:
    return BusinessRead(
        id=business.id,
        business_name=business.business_name,
        slug=business.slug,
        address=business.address,
        whatsapp=business.whatsapp,
        box_capacity=business.box_capacity,
        patio_capacity=business.patio_capacity,
        slot_interval_minutes=business.slot_interval_minutes,
        timezone=business.timezone,
        online_booking_enabled=bool(business.online_booking_enabled),
        loyalty_program_enabled=bool(business.loyalty_program_enabled),
        operating_days=load_operating_rules(business) or [],
        blocked_dates=load_blocked_dates(business) or [],
    )


@router.post("/", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
def create_business(data: BusinessCreate, db: Session = Depends(get_db)):
    if db.query(DBBusinesses).filter(DBBusinesses.slug == data.slug).first():
        raise HTTPException(status_code=409, detail="Slug already taken")

    payload = data.model_dump(exclude={"operating_days"})
    obj = DBBusinesses(
        **payload,
        operating_days=dump_operating_rules(data.operating_days),
        blocked_dates="[]",
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Business created: business_id={obj.id}, slug={obj.slug}")
    return business_view(obj)


@router.get("/by_slug/{slug}", response_model=BusinessRead)
def get_business_by_slug_route(slug: str, db: Session = Depends(get_db)):
    return business_view(get_business_by_slug(db, slug))


@router.get("/{id}", response_model=BusinessRead)
def get_business_route(id: str, db: Session = Depends(get_db)):
    return business_view(get_business(db, id))


@router.patch("/{id}", response_model=BusinessRead)
def update_business(id: str, data: BusinessUpdate, db: Session = Depends(get_db)):
    business = get_business(db, id)
    old_interval = business.slot_interval_minutes
    old_timezone = business.timezone

    obj = save_entity(db, DBBusinesses, {"id": business.id, **data.model_dump(exclude_unset=True)})

    if obj.slot_interval_minutes != old_interval or obj.timezone != old_timezone:
        invalidate_business_cache(redis_client, obj.id)
    return business_view(obj)


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


# ── Weekly rules / blocked dates ─────────────────────────────────────────


@router.put("/{id}/operating_days", response_model=BusinessRead)
def replace_operating_days(id: str, data: OperatingDaysUpdate, db: Session = Depends(get_db)):
    business = get_business(db, id)
    business.operating_days = dump_operating_rules(data.operating_days)
    db.commit()
    db.refresh(business)

    invalidate_business_cache(redis_client, business.id)
    return business_view(business)


@router.post("/{id}/blocked_dates", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
def add_blocked_date(id: str, data: BlockedDate, db: Session = Depends(get_db)):
    business = get_business(db, id)
    blocked = [b for b in (load_blocked_dates(business) or []) if b.date != data.date]
    blocked.append(data)
    business.blocked_dates = dump_blocked_dates(blocked)
    db.commit()
    db.refresh(business)

    logger.info(f"Date blocked: business_id={business.id}, date={data.date}, reason={data.reason!r}")
    invalidate_business_cache(redis_client, business.id, [data.date])
    return business_view(business)


@router.delete("/{id}/blocked_dates/{blocked_date}", response_model=BusinessRead)
def remove_blocked_date(id: str, blocked_date: date, db: Session = Depends(get_db)):
    business = get_business(db, id)
    current = load_blocked_dates(business) or []
    remaining = [b for b in current if b.date != blocked_date]
    if len(remaining) == len(current):
        raise HTTPException(status_code=404, detail="Not found")

    business.blocked_dates = dump_blocked_dates(remaining)
    db.commit()
    db.refresh(business)

    invalidate_business_cache(redis_client, business.id, [blocked_date])
    return business_view(business)


# ── Boxes ────────────────────────────────────────────────────────────────


@router.get("/{id}/bays", response_model=list[ServiceBayRead])
def list_bays(id: str, db: Session = Depends(get_db)):
    get_business(db, id)
    return (
        db.query(DBServiceBays)
        .filter(DBServiceBays.business_id == id, DBServiceBays.is_active == 1)
        .order_by(DBServiceBays.name)
        .all()
    )


@router.post("/{id}/bays", response_model=ServiceBayRead, status_code=status.HTTP_201_CREATED)
def create_bay(id: str, data: ServiceBayCreate, db: Session = Depends(get_db)):
    get_business(db, id)
    return save_entity(db, DBServiceBays, data.model_dump(), business_id=id)


# ── Staff availability view / cache ──────────────────────────────────────


@router.get("/{id}/availability", response_model=DayAvailabilityResponse)
def get_availability(
    id: str,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Day grid for staff: no horizon limit, works with online booking off."""
    business = get_business(db, id)
    result = calculate_day_availability(
        db=db,
        business=business,
        target_date=target_date,
        now=business_now(business),
        redis=redis_client,
    )
    return DayAvailabilityResponse(**result)


@router.post("/{id}/slots/invalidate")
def invalidate_slots_cache(
    id: str,
    dates: list[date] | None = None,
    db: Session = Depends(get_db),
):
    """Manually invalidate the slots cache of a business."""
    business = get_business(db, id)
    deleted = invalidate_business_cache(redis_client, business.id, dates)

    return {
        "business_id": business.id,
        "deleted_keys": deleted,
        "dates": [d.isoformat() for d in dates] if dates else "all",
    }
