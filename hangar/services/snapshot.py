# hangar/services/snapshot.py
"""
Per-business snapshot: the read collaborator.

Loads every service, customer (with vehicles), appointment and ledger
entry of one business in a single pass. Read endpoints build their views
from a fresh snapshot after any write instead of patching cached state.
"""

from dataclasses import dataclass, field

from sqlalchemy.orm import Session, selectinload

from ..errors import NotFound
from ..models import Appointments, Businesses, Customers, Expenses, Services
from . import metrics


@dataclass
class BusinessSnapshot:
    business: Businesses
    services: list = field(default_factory=list)
    customers: list = field(default_factory=list)
    appointments: list = field(default_factory=list)
    expenses: list = field(default_factory=list)

    def appointments_on(self, date_str: str) -> list:
        return [a for a in self.appointments if a.date == date_str]

    def customer_view(self, customer) -> dict:
        """Customer with derived washes / total spent / loyalty."""
        washes = metrics.customer_washes(self.appointments, customer.id)
        view = {
            "id": customer.id,
            "business_id": customer.business_id,
            "name": customer.name,
            "phone": customer.phone,
            "email": customer.email,
            "vehicles": list(customer.vehicles),
            "washes": washes,
            "total_spent": metrics.customer_lifetime_value(self.appointments, customer.id),
            "last_visit": metrics.customer_last_visit(self.appointments, customer.id),
            "loyalty": None,
        }
        if self.business.loyalty_program_enabled:
            view["loyalty"] = metrics.loyalty_progress(washes)
        return view


def get_business(db: Session, business_id: str) -> Businesses:
    business = db.get(Businesses, business_id)
    if not business:
        raise NotFound(f"Business {business_id} not found")
    return business


def get_business_by_slug(db: Session, slug: str) -> Businesses:
    business = db.query(Businesses).filter(Businesses.slug == slug).first()
    if not business:
        raise NotFound(f"Business {slug} not found")
    return business


def load_snapshot(db: Session, business_id: str) -> BusinessSnapshot:
    business = get_business(db, business_id)

    services = (
        db.query(Services)
        .filter(Services.business_id == business_id)
        .order_by(Services.name)
        .all()
    )
    customers = (
        db.query(Customers)
        .options(selectinload(Customers.vehicles))
        .filter(Customers.business_id == business_id)
        .order_by(Customers.name)
        .all()
    )
    appointments = (
        db.query(Appointments)
        .filter(Appointments.business_id == business_id)
        .order_by(Appointments.date, Appointments.time)
        .all()
    )
    expenses = (
        db.query(Expenses)
        .filter(Expenses.business_id == business_id)
        .order_by(Expenses.date)
        .all()
    )

    return BusinessSnapshot(
        business=business,
        services=services,
        customers=customers,
        appointments=appointments,
        expenses=expenses,
    )
