# hangar/schemas/business.py

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .services import ServiceRead

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def validate_time_str(v: str) -> str:
    if not TIME_RE.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v


class OperatingRule(BaseModel):
    """Weekly rule. day_of_week: 0 = Sunday ... 6 = Saturday."""
    day_of_week: int = Field(ge=0, le=6)
    is_open: bool = False
    open_time: str = "08:00"
    close_time: str = "18:00"

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return validate_time_str(v)

    @model_validator(mode="after")
    def open_before_close(self):
        if self.is_open and self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time")
        return self


class BlockedDate(BaseModel):
    date: date
    reason: str = ""


class BusinessCreate(BaseModel):
    business_name: str = Field(min_length=1)
    slug: str
    address: Optional[str] = None
    whatsapp: Optional[str] = None
    box_capacity: int = Field(default=5, ge=1)
    patio_capacity: int = Field(default=15, ge=0)
    slot_interval_minutes: int = Field(default=30, gt=0)
    timezone: Optional[str] = None
    online_booking_enabled: bool = True
    loyalty_program_enabled: bool = False
    operating_days: list[OperatingRule] = []

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        v = v.strip().lower()
        if not SLUG_RE.match(v):
            raise ValueError("Slug must be lowercase letters, digits and dashes")
        return v

    @field_validator("operating_days")
    @classmethod
    def one_rule_per_weekday(cls, v: list[OperatingRule]) -> list[OperatingRule]:
        return check_unique_weekdays(v)


class BusinessUpdate(BaseModel):
    business_name: Optional[str] = None
    address: Optional[str] = None
    whatsapp: Optional[str] = None
    box_capacity: Optional[int] = Field(default=None, ge=1)
    patio_capacity: Optional[int] = Field(default=None, ge=0)
    slot_interval_minutes: Optional[int] = Field(default=None, gt=0)
    timezone: Optional[str] = None
    online_booking_enabled: Optional[bool] = None
    loyalty_program_enabled: Optional[bool] = None

    @field_validator(
        "business_name",
        "box_capacity",
        "patio_capacity",
        "slot_interval_minutes",
        "online_booking_enabled",
        "loyalty_program_enabled",
    )
    @classmethod
    def not_null(cls, v):
        # Omit a field to leave it unchanged; null would clear a required column
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class OperatingDaysUpdate(BaseModel):
    operating_days: list[OperatingRule]

    @field_validator("operating_days")
    @classmethod
    def one_rule_per_weekday(cls, v: list[OperatingRule]) -> list[OperatingRule]:
        return check_unique_weekdays(v)


class BusinessRead(BaseModel):
    id: str
    business_name: str
    slug: str
    address: Optional[str] = None
    whatsapp: Optional[str] = None
    box_capacity: int
    patio_capacity: int
    slot_interval_minutes: int
    timezone: Optional[str] = None
    online_booking_enabled: bool
    loyalty_program_enabled: bool
    operating_days: list[OperatingRule]
    blocked_dates: list[BlockedDate]


class ServiceBayCreate(BaseModel):
    name: str = Field(min_length=1)


class ServiceBayRead(BaseModel):
    id: str
    business_id: str
    name: str
    is_active: bool

    model_config = {"from_attributes": True}


def check_unique_weekdays(rules: list[OperatingRule]) -> list[OperatingRule]:
    seen = set()
    for rule in rules:
        if rule.day_of_week in seen:
            raise ValueError(f"Duplicate rule for day_of_week={rule.day_of_week}")
        seen.add(rule.day_of_week)
    return sorted(rules, key=lambda r: r.day_of_week)


class PublicProfile(BaseModel):
    """What the public booking page shows before a day is picked."""
    business_name: str
    slug: str
    address: Optional[str] = None
    whatsapp: Optional[str] = None
    box_capacity: int
    slot_interval_minutes: int
    loyalty_program_enabled: bool
    services: list[ServiceRead]
