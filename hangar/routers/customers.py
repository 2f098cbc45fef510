# hangar/routers/customers.py
# PATCH = 405, DELETE = ALLOWED (hard, vehicles cascade)

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import IdentityConflict
from ..models import Customers as DBCustomers, Vehicles as DBVehicles
from ..schemas.appointments import VehicleInfo
from ..schemas.customers import CustomerCreate, CustomerRead, VehicleRead
from ..services.identity import match_vehicle
from ..services.snapshot import get_business, load_snapshot
from ..utils.identity_utils import normalize_plate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses/{business_id}/customers", tags=["customers"])


def _get_customer(db: Session, business_id: str, id: str) -> DBCustomers:
    obj = db.get(DBCustomers, id)
    if not obj or obj.business_id != business_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _customer_by_phone(db: Session, business_id: str, phone: str):
    return (
        db.query(DBCustomers)
        .filter(DBCustomers.business_id == business_id, DBCustomers.phone == phone)
        .first()
    )


@router.get("/", response_model=list[CustomerRead])
def list_customers(business_id: str, db: Session = Depends(get_db)):
    snapshot = load_snapshot(db, business_id)
    return [snapshot.customer_view(c) for c in snapshot.customers]


@router.get("/{id}", response_model=CustomerRead)
def get_customer(business_id: str, id: str, db: Session = Depends(get_db)):
    _get_customer(db, business_id, id)
    snapshot = load_snapshot(db, business_id)
    customer = next(c for c in snapshot.customers if c.id == id)
    return snapshot.customer_view(customer)


@router.post("/", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(
    business_id: str,
    data: CustomerCreate,
    db: Session = Depends(get_db),
):
    get_business(db, business_id)

    existing = _customer_by_phone(db, business_id, data.phone)
    if existing:
        raise IdentityConflict(
            f"Phone {data.phone} already belongs to a customer",
            customer_id=existing.id,
        )

    plates = [v.plate for v in data.vehicles]
    if len(plates) != len(set(plates)):
        raise HTTPException(status_code=422, detail="Duplicate plate in vehicles")

    obj = DBCustomers(
        business_id=business_id,
        name=data.name,
        phone=data.phone,
        email=data.email,
        vehicles=[
            DBVehicles(
                brand=v.brand,
                model=v.model,
                plate=v.plate,
                color=v.color,
                type=v.type.value,
            )
            for v in data.vehicles
        ],
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another insert for the same phone
        db.rollback()
        existing = _customer_by_phone(db, business_id, data.phone)
        raise IdentityConflict(
            f"Phone {data.phone} already belongs to a customer",
            customer_id=existing.id if existing else None,
        )
    db.refresh(obj)

    logger.info(f"Customer created: customer_id={obj.id}, vehicles={len(plates)}")

    snapshot = load_snapshot(db, business_id)
    return snapshot.customer_view(obj)


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(business_id: str, id: str, db: Session = Depends(get_db)):
    obj = _get_customer(db, business_id, id)
    db.delete(obj)
    db.commit()
    logger.info(f"Customer deleted: customer_id={id}")


# ── Vehicles ─────────────────────────────────────────────────────────────


@router.post("/{id}/vehicles", response_model=VehicleRead, status_code=status.HTTP_201_CREATED)
def add_vehicle(
    business_id: str,
    id: str,
    data: VehicleInfo,
    db: Session = Depends(get_db),
):
    customer = _get_customer(db, business_id, id)

    if match_vehicle(db, customer.id, data.plate):
        raise HTTPException(status_code=409, detail="Plate already registered for this customer")

    obj = DBVehicles(
        customer_id=customer.id,
        brand=data.brand,
        model=data.model,
        plate=normalize_plate(data.plate),
        color=data.color,
        type=data.type.value,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
