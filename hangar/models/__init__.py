from .tables import (
    Base,
    Businesses,
    ServiceBays,
    Services,
    Customers,
    Vehicles,
    Appointments,
    Expenses,
    generate_id,
)

__all__ = [
    "Base",
    "Businesses",
    "ServiceBays",
    "Services",
    "Customers",
    "Vehicles",
    "Appointments",
    "Expenses",
    "generate_id",
]
