# hangar/services/identity.py
"""
Customer / vehicle identity resolution for bookings.

Policy (deliberately lenient):
1. Caller supplied a customer id → reuse that customer.
2. Otherwise exact phone match within the business → reuse that customer.
3. Otherwise create a new customer.
Vehicle: exact plate match (normalized) among the customer's vehicles,
else a new vehicle under that customer. No email or name matching.
"""

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from ..errors import IdentityConflict, NotFound
from ..models import Customers, Vehicles
from ..schemas.appointments import CustomerIdentity, VehicleInfo
from ..utils.identity_utils import normalize_plate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Existing:
    customer_id: str


@dataclass(frozen=True)
class MatchedByPhone:
    customer_id: str


@dataclass(frozen=True)
class New:
    name: str
    phone: str
    email: str | None = None


CustomerResolution = Union[Existing, MatchedByPhone, New]


def resolve_customer(
    db: Session,
    business_id: str,
    identity: CustomerIdentity,
) -> CustomerResolution:
    """Decide once which customer a booking belongs to. No writes."""
    if identity.customer_id:
        customer = db.get(Customers, identity.customer_id)
        if not customer or customer.business_id != business_id:
            raise NotFound(f"Customer {identity.customer_id} not found")
        return Existing(customer.id)

    matches = (
        db.query(Customers)
        .filter(
            Customers.business_id == business_id,
            Customers.phone == identity.phone,
        )
        .all()
    )
    if len(matches) > 1:
        raise IdentityConflict(
            f"{len(matches)} customers share phone {identity.phone}",
            phone=identity.phone,
        )
    if matches:
        return MatchedByPhone(matches[0].id)

    return New(name=identity.name, phone=identity.phone, email=identity.email)


def apply_resolution(
    db: Session,
    business_id: str,
    resolution: CustomerResolution,
    vehicle_info: VehicleInfo,
) -> tuple[Customers, Vehicles]:
    """
    Materialize the resolution: fetch or create customer and vehicle.

    Only flushes; the caller owns the transaction.
    """
    if isinstance(resolution, New):
        customer = Customers(
            business_id=business_id,
            name=resolution.name,
            phone=resolution.phone,
            email=resolution.email,
        )
        db.add(customer)
        db.flush()
        logger.info(f"Customer created: customer_id={customer.id}, phone={customer.phone}")
        vehicle = _create_vehicle(db, customer.id, vehicle_info)
        return customer, vehicle

    customer = db.get(Customers, resolution.customer_id)
    if customer is None:
        raise NotFound(f"Customer {resolution.customer_id} not found")
    vehicle = match_vehicle(db, customer.id, vehicle_info.plate)
    if vehicle is None:
        vehicle = _create_vehicle(db, customer.id, vehicle_info)
    return customer, vehicle


def match_vehicle(db: Session, customer_id: str, plate: str) -> Vehicles | None:
    """Exact (normalized, case-insensitive) plate match among a customer's vehicles."""
    wanted = normalize_plate(plate)
    vehicles = db.query(Vehicles).filter(Vehicles.customer_id == customer_id).all()
    matches = [v for v in vehicles if normalize_plate(v.plate) == wanted]
    if len(matches) > 1:
        raise IdentityConflict(
            f"{len(matches)} vehicles share plate {wanted}",
            customer_id=customer_id,
            plate=wanted,
        )
    return matches[0] if matches else None


def _create_vehicle(db: Session, customer_id: str, info: VehicleInfo) -> Vehicles:
    vehicle = Vehicles(
        customer_id=customer_id,
        brand=info.brand,
        model=info.model,
        plate=normalize_plate(info.plate),
        color=info.color,
        type=info.type.value,
    )
    db.add(vehicle)
    db.flush()
    logger.info(f"Vehicle created: vehicle_id={vehicle.id}, customer_id={customer_id}, plate={vehicle.plate}")
    return vehicle
