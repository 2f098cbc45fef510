# hangar/schemas/customers.py

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..utils.identity_utils import is_valid_phone, normalize_phone
from .appointments import VehicleInfo, VehicleType


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: str
    email: Optional[str] = None
    vehicles: list[VehicleInfo] = []

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        if not is_valid_phone(v):
            raise ValueError("Phone must have 10 or 11 digits (DDD + number)")
        return normalize_phone(v)


class VehicleRead(BaseModel):
    id: str
    customer_id: str
    brand: str
    model: str
    plate: str
    color: Optional[str] = None
    type: VehicleType

    model_config = {"from_attributes": True}


class LoyaltyRead(BaseModel):
    progress: int
    reward_available: bool
    is_vip: bool


class CustomerRead(BaseModel):
    id: str
    business_id: str
    name: str
    phone: str
    email: Optional[str] = None
    vehicles: list[VehicleRead] = []

    # Derived from appointments on every read
    washes: int = 0
    total_spent: Decimal = Decimal("0")
    last_visit: Optional[str] = None
    loyalty: Optional[LoyaltyRead] = None
