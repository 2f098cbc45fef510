# hangar/schemas/services.py

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    duration_minutes: int = Field(gt=0)
    price: Decimal = Field(ge=0)

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = None
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("is_active", "name", "duration_minutes", "price")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: str
    business_id: str
    name: str
    description: Optional[str] = None
    duration_minutes: int
    price: Decimal
    is_active: bool

    model_config = {"from_attributes": True}
