# backend/kitchen_booking/services/slots/resolver.py
"""
Availability resolution: effective open hours of a kitchen on a date.

Precedence:
✓ kitchen_date_overrides for the date (if any row exists, it wins)
    - first is_available row = base window
    - every other non-available row carves a block out of it
✓ kitchen_availability row for the weekday otherwise

Result is an ordered list of TimeRange. Empty list = closed.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from .config import MINUTES_PER_DAY, day_of_week, minutes_to_time_str, time_str_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open [start, end) range in minutes since midnight."""
    start: int
    end: int

    @classmethod
    def parse(cls, start: Optional[str], end: Optional[str]) -> Optional["TimeRange"]:
        """Build from "HH:MM" strings; None when missing, malformed or empty."""
        if not start or not end:
            return None
        try:
            start_min = time_str_to_minutes(start)
            end_min = time_str_to_minutes(end)
        except ValueError:
            return None
        if end_min <= start_min:
            return None
        return cls(start_min, end_min)

    @property
    def minutes(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeRange") -> bool:
        # touching endpoints do not overlap
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def subtract(self, block: "TimeRange") -> list["TimeRange"]:
        """Remove block from this range, returning 0, 1 or 2 pieces."""
        if not self.overlaps(block):
            return [self]
        pieces = []
        if block.start > self.start:
            pieces.append(TimeRange(self.start, block.start))
        if block.end < self.end:
            pieces.append(TimeRange(block.end, self.end))
        return pieces

    def __str__(self) -> str:
        return f"{minutes_to_time_str(self.start)}-{minutes_to_time_str(self.end)}"


WHOLE_DAY = TimeRange(0, MINUTES_PER_DAY)


def carve_out(base: TimeRange, blocks: Iterable[TimeRange]) -> list[TimeRange]:
    """Subtract every block from base."""
    remaining = [base]
    for block in blocks:
        remaining = [piece for r in remaining for piece in r.subtract(block)]
        if not remaining:
            break
    return sorted(remaining)


def resolve_open_ranges(overrides: list, weekly) -> list[TimeRange]:
    """
    Resolve open ranges from already-loaded rows.

    Args:
        overrides: kitchen_date_overrides rows for the date, ordered by id
        weekly: kitchen_availability row for the weekday, or None

    Returns:
        Ordered open ranges; empty list = closed.
    """
    if overrides:
        base_row = next((o for o in overrides if o.is_available), None)
        if base_row is None:
            return []

        base = TimeRange.parse(base_row.start_time, base_row.end_time)
        if base is None:
            # available row without usable hours: treat the day as closed
            return []

        blocks = []
        for ovr in overrides:
            if ovr is base_row or ovr.is_available:
                continue
            block = TimeRange.parse(ovr.start_time, ovr.end_time)
            # a block without hours closes the whole day
            blocks.append(block or WHOLE_DAY)

        return carve_out(base, blocks)

    if weekly is None or not weekly.is_available:
        return []

    base = TimeRange.parse(weekly.start_time, weekly.end_time)
    return [base] if base else []


def resolve_kitchen_day(db: Session, kitchen_id: int, target_date: date) -> list[TimeRange]:
    """Effective open ranges for a kitchen on a date."""
    overrides = get_date_overrides(db, kitchen_id, target_date)
    weekly = None if overrides else get_weekly_row(db, kitchen_id, target_date)
    ranges = resolve_open_ranges(overrides, weekly)

    logger.debug(
        "Kitchen %s on %s: %s",
        kitchen_id,
        target_date,
        ", ".join(str(r) for r in ranges) or "closed",
    )
    return ranges


# ── Database helpers ─────────────────────────────────────────────────────


def get_date_overrides(db: Session, kitchen_id: int, target_date: date) -> list:
    """Get date overrides for kitchen on date, oldest first."""
    from ...models.generated import KitchenDateOverrides

    return (
        db.query(KitchenDateOverrides)
        .filter(
            KitchenDateOverrides.kitchen_id == kitchen_id,
            KitchenDateOverrides.specific_date == target_date.isoformat(),
        )
        .order_by(KitchenDateOverrides.id)
        .all()
    )


def get_weekly_row(db: Session, kitchen_id: int, target_date: date):
    """Get the weekly availability row for the date's weekday."""
    from ...models.generated import KitchenAvailability

    return (
        db.query(KitchenAvailability)
        .filter(
            KitchenAvailability.kitchen_id == kitchen_id,
            KitchenAvailability.day_of_week == day_of_week(target_date),
        )
        .first()
    )
