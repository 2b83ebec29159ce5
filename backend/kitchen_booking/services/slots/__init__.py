# backend/kitchen_booking/services/slots/__init__.py
"""
Slots calculation module.

Level 1: Base kitchen slots from schedule + overrides (cached in Redis Sorted Sets)
Level 2: Capacity per slot from confirmed bookings (calculated on-the-fly)
"""

from .config import BookingConfig, get_booking_config
from .resolver import TimeRange, resolve_kitchen_day, resolve_open_ranges
from .calculator import calculate_day_slots, generate_slots
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_kitchen_cache
from .availability import SlotAvailability, count_slot_capacity, get_open_slots

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "TimeRange",
    "resolve_kitchen_day",
    "resolve_open_ranges",
    "calculate_day_slots",
    "generate_slots",
    "SlotsRedisStore",
    "invalidate_kitchen_cache",
    "SlotAvailability",
    "count_slot_capacity",
    "get_open_slots",
]
