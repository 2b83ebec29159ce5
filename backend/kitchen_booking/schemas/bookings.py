# backend/kitchen_booking/schemas/bookings.py

from datetime import date, datetime
from typing import Optional
import pytz
from pydantic import BaseModel, Field, field_validator

from .base import CAMEL_CONFIG, TIME_PATTERN


class StorageSelection(BaseModel):
    storage_listing_id: int
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        """Naive values are taken as UTC so both ends compare."""
        if v.tzinfo is None:
            return pytz.utc.localize(v)
        return v.astimezone(pytz.utc)

    model_config = CAMEL_CONFIG


class BookingCreate(BaseModel):
    kitchen_id: int
    booking_date: date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)

    special_notes: Optional[str] = None
    selected_storage: list[StorageSelection] = []
    selected_equipment_ids: list[int] = []

    model_config = CAMEL_CONFIG


class ExternalContact(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None

    model_config = CAMEL_CONFIG


class ExternalBookingCreate(BaseModel):
    kitchen_id: int
    booking_date: date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)

    external_contact: ExternalContact
    special_notes: Optional[str] = None

    model_config = CAMEL_CONFIG


class StorageBookingRead(BaseModel):
    id: int
    storage_listing_id: int
    start_date: datetime
    end_date: datetime
    status: str
    total_price: int
    pricing_model: str
    currency: str

    model_config = CAMEL_CONFIG


class EquipmentBookingRead(BaseModel):
    id: int
    equipment_listing_id: int
    status: str
    total_price: int
    damage_deposit: int
    currency: str

    model_config = CAMEL_CONFIG


class BookingRead(BaseModel):
    id: int

    kitchen_id: int
    chef_id: Optional[int] = None
    booking_type: str
    created_by: Optional[int] = None

    booking_date: date
    start_time: str
    end_time: str

    status: str
    hourly_rate: Optional[int] = None
    duration_hours: Optional[float] = None
    total_price: Optional[int] = None
    service_fee: int
    currency: str

    special_notes: Optional[str] = None
    external_contact_name: Optional[str] = None
    external_contact_email: Optional[str] = None
    external_contact_phone: Optional[str] = None
    external_contact_company: Optional[str] = None

    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    storage_bookings: list[StorageBookingRead] = []
    equipment_bookings: list[EquipmentBookingRead] = []

    model_config = CAMEL_CONFIG
