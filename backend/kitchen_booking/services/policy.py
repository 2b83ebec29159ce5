# backend/kitchen_booking/services/policy.py
"""
Daily booking policy: how many slots one chef may hold per kitchen per day.

Rule: the first positive value wins, in this order:
  1. date override   (kitchen_date_overrides.max_slots_per_chef for the date)
  2. weekly schedule (kitchen_availability.max_slots_per_chef for the weekday)
  3. location        (locations.default_daily_booking_limit)
  4. fallback        (BookingConfig.fallback_daily_limit, 2 by default)

Missing, malformed or non-positive values are skipped, never read as zero.
"""

from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..errors import NotFound
from ..models.generated import (
    Kitchens as DBKitchen,
    Locations as DBLocation,
)
from .slots.config import BookingConfig, get_booking_config
from .slots.resolver import get_date_overrides, get_weekly_row

PolicySource = Callable[[Session, DBKitchen, date], Optional[int]]


def positive_int(value) -> Optional[int]:
    """Coerce a stored cap to a positive int, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _from_date_override(db: Session, kitchen: DBKitchen, target_date: date) -> Optional[int]:
    for ovr in get_date_overrides(db, kitchen.id, target_date):
        value = positive_int(ovr.max_slots_per_chef)
        if value is not None:
            return value
    return None


def _from_weekly_schedule(db: Session, kitchen: DBKitchen, target_date: date) -> Optional[int]:
    row = get_weekly_row(db, kitchen.id, target_date)
    return positive_int(row.max_slots_per_chef) if row else None


def _from_location(db: Session, kitchen: DBKitchen, target_date: date) -> Optional[int]:
    location = db.get(DBLocation, kitchen.location_id)
    return positive_int(location.default_daily_booking_limit) if location else None


POLICY_SOURCES: tuple[PolicySource, ...] = (
    _from_date_override,
    _from_weekly_schedule,
    _from_location,
)


def first_positive(candidates) -> Optional[int]:
    """First candidate that is a positive int, evaluated lazily."""
    for candidate in candidates:
        value = positive_int(candidate)
        if value is not None:
            return value
    return None


def resolve_daily_limit(
    db: Session,
    kitchen_id: int,
    target_date: date,
    config: BookingConfig | None = None,
) -> int:
    """Max slots per chef per day for a kitchen on a date."""
    config = config or get_booking_config()

    kitchen = db.get(DBKitchen, kitchen_id)
    if not kitchen:
        raise NotFound("Kitchen not found")

    value = first_positive(source(db, kitchen, target_date) for source in POLICY_SOURCES)
    return value if value is not None else config.fallback_daily_limit


def get_daily_policy(
    db: Session,
    kitchen_id: int,
    target_date: date,
    config: BookingConfig | None = None,
) -> dict:
    """Policy view for the query surface."""
    return {
        "kitchen_id": kitchen_id,
        "date": target_date,
        "max_slots_per_chef": resolve_daily_limit(db, kitchen_id, target_date, config),
    }
