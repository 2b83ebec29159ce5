# backend/kitchen_booking/services/slots/availability.py
"""
Level 2: Slot capacity for browsing.

Takes into account:
- Base kitchen slots (Level 1, cached in Redis Sorted Set)
- Kitchen capacity (concurrent confirmed bookings per slot)
- Confirmed bookings on the date

Pending bookings do not consume capacity here; the authoritative check runs
again at admission time, so this view may be slightly stale.
"""

import logging
from dataclasses import dataclass
from datetime import date
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ...errors import NotFound
from .config import BookingConfig, get_booking_config, minutes_to_time_str, time_str_to_minutes
from .calculator import calculate_day_slots
from .redis_store import SlotsRedisStore
from .resolver import TimeRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAvailability:
    time: str
    available_count: int
    capacity: int
    is_fully_booked: bool


def count_slot_capacity(
    slot_starts: list[int],
    capacity: int,
    bookings: list[TimeRange],
    config: BookingConfig | None = None,
) -> list[SlotAvailability]:
    """
    Count overlapping bookings per slot.

    Args:
        slot_starts: Slot start minutes, sorted
        capacity: Concurrent bookings a slot can hold
        bookings: Ranges of the bookings that consume capacity

    Returns:
        One SlotAvailability per slot, same order.
    """
    config = config or get_booking_config()
    step = config.slot_step_minutes

    result = []
    for start in slot_starts:
        slot = TimeRange(start, start + step)
        overlap = sum(1 for b in bookings if b.overlaps(slot))
        result.append(SlotAvailability(
            time=minutes_to_time_str(start),
            available_count=max(0, capacity - overlap),
            capacity=capacity,
            is_fully_booked=overlap >= capacity,
        ))
    return result


def get_open_slots(
    db: Session,
    kitchen_id: int,
    target_date: date,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> list[SlotAvailability]:
    """Slots of a kitchen on a date with remaining capacity."""
    config = config or get_booking_config()

    kitchen = _get_kitchen(db, kitchen_id)
    if not kitchen:
        raise NotFound("Kitchen not found")

    base_times = _get_base_times(db, kitchen_id, target_date, config, redis)
    if not base_times:
        return []

    capacity = kitchen.capacity or config.default_capacity
    confirmed = [
        rng
        for rng in (
            TimeRange.parse(b.start_time, b.end_time)
            for b in get_day_bookings(db, kitchen_id, target_date, statuses=("confirmed",))
        )
        if rng is not None
    ]

    return count_slot_capacity(
        [time_str_to_minutes(t) for t in base_times],
        capacity,
        confirmed,
        config,
    )


# ── Base times (Level 1 with cache) ─────────────────────────────────────


def _get_base_times(
    db: Session,
    kitchen_id: int,
    target_date: date,
    config: BookingConfig,
    redis: Redis | None,
) -> list[str]:
    """Get base kitchen times, using Redis cache when available."""
    if redis is not None:
        store = SlotsRedisStore(redis, config)
        try:
            cached = store.get_day_slots(kitchen_id, target_date)
            if cached is not None:
                return cached

            # Cache miss, calculate and store
            slots = calculate_day_slots(db, kitchen_id, target_date, config)
            store.store_day_slots(kitchen_id, target_date, slots)
            return slots
        except RedisError:
            logger.warning("Slot cache unavailable, calculating kitchen %s on the fly", kitchen_id)

    # No Redis, calculate on the fly
    return calculate_day_slots(db, kitchen_id, target_date, config)


# ── Database helpers ─────────────────────────────────────────────────────


def _get_kitchen(db: Session, kitchen_id: int):
    """Get active kitchen by ID."""
    from ...models.generated import Kitchens
    return db.query(Kitchens).filter(
        Kitchens.id == kitchen_id,
        Kitchens.is_active == 1,
    ).first()


def get_day_bookings(
    db: Session,
    kitchen_id: int,
    target_date: date,
    statuses: tuple[str, ...] = ("pending", "confirmed"),
    chef_id: int | None = None,
) -> list:
    """Get bookings of a kitchen on a date with the given statuses."""
    from ...models.generated import KitchenBookings

    query = db.query(KitchenBookings).filter(
        KitchenBookings.kitchen_id == kitchen_id,
        KitchenBookings.booking_date == target_date.isoformat(),
        KitchenBookings.status.in_(statuses),
    )
    if chef_id is not None:
        query = query.filter(KitchenBookings.chef_id == chef_id)

    return query.order_by(KitchenBookings.start_time).all()
