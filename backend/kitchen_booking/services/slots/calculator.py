# backend/kitchen_booking/services/slots/calculator.py
"""
Level 1: Base kitchen slot calculation.

Produces the ordered list of slot start times "HH:MM" for a kitchen on a date.

Contains:
✓ kitchen_availability (weekly schedule)
✓ kitchen_date_overrides (closures, custom hours, blocks)

Does NOT contain:
✗ Bookings (counted at Level 2, see availability.py)
✗ Minimum booking window (checked at admission)
"""

from datetime import date
from sqlalchemy.orm import Session

from .config import BookingConfig, get_booking_config, minutes_to_time_str
from .resolver import TimeRange, resolve_kitchen_day


def generate_slots(
    ranges: list[TimeRange],
    config: BookingConfig | None = None,
) -> list[int]:
    """
    Turn open ranges into slot start minutes.

    Slots start on step boundaries (whole hours for a 60 minute step) and must fit
    entirely inside a range: 09:00-11:30 gives 09:00 and 10:00, the trailing
    half hour yields nothing.
    """
    config = config or get_booking_config()
    step = config.slot_step_minutes

    starts: set[int] = set()
    for rng in ranges:
        # first step boundary at or after the range start
        t = -(-rng.start // step) * step
        while t + step <= rng.end:
            starts.add(t)
            t += step

    return sorted(starts)


def calculate_day_slots(
    db: Session,
    kitchen_id: int,
    target_date: date,
    config: BookingConfig | None = None,
) -> list[str]:
    """
    Calculate base slots for a kitchen on a specific date.

    Returns:
        Sorted list of "HH:MM". Empty list = closed.
    """
    config = config or get_booking_config()
    ranges = resolve_kitchen_day(db, kitchen_id, target_date)
    return [minutes_to_time_str(t) for t in generate_slots(ranges, config)]
