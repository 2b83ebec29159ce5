# backend/kitchen_booking/schemas/availability.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from .base import CAMEL_CONFIG, TIME_PATTERN


class WeeklyAvailabilityCreate(BaseModel):
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday")
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    is_available: bool = True
    max_slots_per_chef: Optional[int] = None

    model_config = CAMEL_CONFIG


class WeeklyAvailabilityRead(BaseModel):
    id: int
    kitchen_id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool
    max_slots_per_chef: Optional[int] = None

    model_config = CAMEL_CONFIG


class DateOverrideCreate(BaseModel):
    specific_date: date
    is_available: bool = False
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    reason: Optional[str] = None
    max_slots_per_chef: Optional[int] = None

    model_config = CAMEL_CONFIG


class DateOverrideRead(BaseModel):
    id: int
    kitchen_id: int
    specific_date: date
    is_available: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    max_slots_per_chef: Optional[int] = None

    model_config = CAMEL_CONFIG
