# backend/kitchen_booking/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from math import ceil

from ...config import settings

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the booking/slots system.

    Attributes:
        slot_step_minutes: Slot width in minutes (kitchens book by the hour)
        default_capacity: Concurrent confirmed bookings per slot when a kitchen has none set
        fallback_daily_limit: Per-chef daily slot cap when nothing else is configured
        service_fee_rate: Platform fee as a fraction of the base price
        default_timezone: IANA zone for locations without a valid one
        cache_ttl_seconds: Redis cache TTL for resolved slot grids
    """
    slot_step_minutes: int = 60
    default_capacity: int = 1
    fallback_daily_limit: int = 2
    service_fee_rate: float = 0.05
    default_timezone: str = "America/St_Johns"
    cache_ttl_seconds: int = 86400  # 24 hours

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.fallback_daily_limit < 1:
            raise ValueError("fallback_daily_limit must be positive")

    def slot_hours(self, duration_minutes: int) -> int:
        """Number of slots a range of this length occupies (partial slots count whole)."""
        return ceil(duration_minutes / self.slot_step_minutes)


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton) built from settings."""
    return BookingConfig(
        fallback_daily_limit=settings.fallback_daily_booking_limit,
        service_fee_rate=settings.service_fee_rate,
        default_timezone=settings.default_timezone,
    )


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight.

    "24:00" is accepted as the end of the day. Raises ValueError on anything else
    that is not a valid time of day.
    """
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if not 0 <= minute < 60:
        raise ValueError(f"Invalid time {value!r}")
    total = hour * 60 + minute
    if hour < 0 or total > MINUTES_PER_DAY:
        raise ValueError(f"Invalid time {value!r}")
    return total


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(target_date: date) -> int:
    """Weekday with Sunday = 0, as stored in kitchen_availability."""
    return (target_date.weekday() + 1) % 7
