# backend/kitchen_booking/services/pricing.py
"""
Kitchen booking price calculation.

All amounts are integers in minor units (cents). Rounding is half away from
zero (Decimal ROUND_HALF_UP) and happens once per quantity:

    billable_hours = max(duration_hours, kitchen.minimum_booking_hours)
    base           = round(hourly_rate * billable_hours)
    service_fee    = round(base * service_fee_rate)
    total          = base + service_fee

Add-ons (storage, equipment) are priced from their listings and added to the
booking total; the stored service fee is computed once on the grand total.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from math import ceil
from typing import Optional

from .slots.config import BookingConfig, get_booking_config


def round_minor(value: Decimal) -> int:
    """Round to whole minor units, half away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_service_fee(base_cents: int, rate: float) -> int:
    return round_minor(Decimal(base_cents) * Decimal(str(rate)))


@dataclass(frozen=True)
class KitchenPrice:
    hourly_rate: int
    duration_hours: float
    billable_hours: float
    total_price: int  # base, without fee
    service_fee: int
    total_with_fee: int
    currency: str


def calculate_kitchen_price(
    hourly_rate: Optional[int],
    duration_minutes: int,
    minimum_booking_hours: Optional[int],
    currency: str = "CAD",
    config: BookingConfig | None = None,
) -> KitchenPrice:
    """
    Price a kitchen booking.

    Args:
        hourly_rate: Rate in cents per hour; None is treated as free
        duration_minutes: end - start in minutes
        minimum_booking_hours: Kitchen minimum billable duration
    """
    config = config or get_booking_config()
    rate = int(hourly_rate or 0)
    minimum_minutes = max(0, int(minimum_booking_hours or 0)) * 60
    billable_minutes = max(duration_minutes, minimum_minutes)

    # rate * minutes / 60 keeps fractional hours exact until the single rounding
    base = round_minor(Decimal(rate) * Decimal(billable_minutes) / Decimal(60))
    fee = calculate_service_fee(base, config.service_fee_rate)

    return KitchenPrice(
        hourly_rate=rate,
        duration_hours=duration_minutes / 60,
        billable_hours=billable_minutes / 60,
        total_price=base,
        service_fee=fee,
        total_with_fee=base + fee,
        currency=currency,
    )


# ── Add-ons ──────────────────────────────────────────────────────────────


def calculate_storage_price(listing, start: datetime, end: datetime) -> int:
    """
    Price a storage add-on for [start, end).

    Pricing models:
        daily        → base_price * max(ceil(days), minimum_booking_duration)
        hourly       → base_price * max(1, ceil(hours))
        monthly-flat → base_price
    """
    base = int(listing.base_price or 0)
    seconds = max(0.0, (end - start).total_seconds())
    model = listing.pricing_model or "daily"

    if model == "hourly":
        return base * max(1, ceil(seconds / 3600))
    if model == "monthly-flat":
        return base

    days = ceil(seconds / 86400)
    return base * max(days, int(listing.minimum_booking_duration or 1))


def calculate_equipment_price(listing) -> Optional[int]:
    """Flat session rate; None for equipment included with the kitchen."""
    if listing.availability_type == "included":
        return None
    return int(listing.session_rate or 0)


def calculate_booking_totals(
    kitchen_price: KitchenPrice,
    addons_total: int,
    config: BookingConfig | None = None,
) -> tuple[int, int]:
    """
    Totals stored on the booking.

    Returns:
        (total_price, service_fee) where total_price excludes the fee.
    """
    config = config or get_booking_config()
    if not addons_total:
        return kitchen_price.total_price, kitchen_price.service_fee

    grand_total = kitchen_price.total_price + addons_total
    return grand_total, calculate_service_fee(grand_total, config.service_fee_rate)
