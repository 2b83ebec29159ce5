# backend/kitchen_booking/schemas/slots.py
"""
Pydantic schemas for slots and policy API.
"""

from datetime import date
from pydantic import BaseModel, Field

from .base import CAMEL_CONFIG


class SlotRead(BaseModel):
    """Capacity of a single slot."""
    time: str  # "HH:MM"
    available_count: int
    capacity: int
    is_fully_booked: bool

    model_config = CAMEL_CONFIG


class DailyPolicyRead(BaseModel):
    kitchen_id: int
    date: date
    max_slots_per_chef: int = Field(description="Max slot-hours one chef may hold in this kitchen on this date")

    model_config = CAMEL_CONFIG
