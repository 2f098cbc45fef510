# hangar/schemas/appointments.py

from datetime import date as date_type
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.identity_utils import is_valid_phone, normalize_phone, normalize_plate
from .business import validate_time_str


class AppointmentStatus(str, Enum):
    NOVO = "NOVO"
    CONFIRMADO = "CONFIRMADO"
    EM_EXECUCAO = "EM_EXECUCAO"
    FINALIZADO = "FINALIZADO"
    CANCELADO = "CANCELADO"


class VehicleType(str, Enum):
    CARRO = "CARRO"
    SUV = "SUV"
    MOTO = "MOTO"
    UTILITARIO = "UTILITARIO"


class VehicleInfo(BaseModel):
    brand: str = Field(min_length=1)
    model: str = Field(min_length=1)
    plate: str
    color: Optional[str] = None
    type: VehicleType = VehicleType.CARRO

    @field_validator("plate")
    @classmethod
    def check_plate(cls, v: str) -> str:
        plate = normalize_plate(v)
        if not plate:
            raise ValueError("Plate is required")
        return plate


class CustomerIdentity(BaseModel):
    """Either an existing customer id, or name + phone for lookup/creation."""
    customer_id: Optional[str] = None
    name: str = Field(min_length=1)
    phone: str
    email: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        if not is_valid_phone(v):
            raise ValueError("Phone must have 10 or 11 digits (DDD + number)")
        return normalize_phone(v)


class BookingSubmit(BaseModel):
    """Public booking form."""
    service_id: str
    date: date_type
    time: str
    customer: CustomerIdentity
    vehicle: VehicleInfo

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return validate_time_str(v)


class AppointmentCreate(BookingSubmit):
    """Admin manual entry."""
    price: Optional[Decimal] = Field(default=None, ge=0)
    box_id: Optional[str] = None
    observation: Optional[str] = None


class StatusTransition(BaseModel):
    status: AppointmentStatus
    reason: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class AppointmentRead(BaseModel):
    id: str
    business_id: str
    customer_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    service_id: Optional[str] = None
    box_id: Optional[str] = None
    service_type: str
    date: str
    time: str
    duration_minutes: int
    price: Decimal
    status: AppointmentStatus
    observation: Optional[str] = None
    cancellation_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class ConfirmationOffer(BaseModel):
    """Customer-facing message the staff may send; never sent by the server."""
    phone: str
    message: str
    link: str


class LoyaltyUpdate(BaseModel):
    """Customer loyalty state recounted after a service is finished."""
    customer_id: str
    washes: int
    progress: int
    reward_available: bool
    is_vip: bool


class TransitionResponse(BaseModel):
    appointment: AppointmentRead
    previous_status: AppointmentStatus
    notification: Optional[ConfirmationOffer] = None
    loyalty: Optional[LoyaltyUpdate] = None
