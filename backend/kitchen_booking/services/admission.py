# backend/kitchen_booking/services/admission.py
"""
Booking admission: the checks a request must pass before a booking exists.

Order (fail fast, each failure is its own BookingError):
  0. request shape   → InvalidRange / NotFound
  1. eligibility     → NotEligible
  2. kitchen license → LicenseNotApproved
  3. booking window  → TooSoonToBook (location timezone)
  4. open hours      → KitchenClosed
  ── lock (kitchen, date) ──
  5. daily limit     → DailyLimitExceeded
  6. conflicts       → SlotConflict
  7. commit pending booking + add-ons
Notifications go out after the commit and never undo it.

Steps 5-7 run in one transaction that first takes an exclusive row lock on
kitchen_day_locks(kitchen_id, lock_date), so two overlapping requests for the
same kitchen and date cannot both pass the conflict check.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import atomic
from ..errors import (
    DailyLimitExceeded,
    Forbidden,
    InvalidRange,
    KitchenClosed,
    LicenseNotApproved,
    NotEligible,
    NotFound,
    SlotConflict,
    TooSoonToBook,
)
from ..models.generated import (
    EquipmentBookings as DBEquipmentBooking,
    EquipmentListings as DBEquipmentListing,
    KitchenBookings as DBBooking,
    KitchenDayLocks as DBKitchenDayLock,
    Kitchens as DBKitchen,
    Locations as DBLocation,
    StorageBookings as DBStorageBooking,
    StorageListings as DBStorageListing,
)
from ..principal import Actor
from ..schemas.bookings import BookingCreate, ExternalBookingCreate
from .access import (
    APPROVED,
    EligibilityProvider,
    LicenseProvider,
    SqlEligibilityProvider,
    SqlLicenseProvider,
)
from .events import BookingNotifier, publish
from .policy import resolve_daily_limit
from .pricing import (
    calculate_booking_totals,
    calculate_equipment_price,
    calculate_kitchen_price,
    calculate_storage_price,
)
from .slots.availability import get_day_bookings
from .slots.config import BookingConfig, get_booking_config, minutes_to_time_str, time_str_to_minutes
from .slots.resolver import TimeRange, resolve_kitchen_day

logger = logging.getLogger(__name__)

DEFAULT_BOOKING_WINDOW_HOURS = 1


# ── Request shape ────────────────────────────────────────────────────────


def parse_requested_range(start_time: str, end_time: str) -> TimeRange:
    """Parse and validate a same-day [start, end) request."""
    try:
        start = time_str_to_minutes(start_time)
        end = time_str_to_minutes(end_time)
    except ValueError:
        raise InvalidRange("Times must be valid HH:MM values") from None

    if end == start:
        raise InvalidRange("End time must be after start time")
    if end < start:
        raise InvalidRange("Bookings cannot span midnight; end time must be after start time on the same day")
    return TimeRange(start, end)


def get_active_kitchen(db: Session, kitchen_id: int) -> DBKitchen:
    kitchen = db.get(DBKitchen, kitchen_id)
    if not kitchen or not kitchen.is_active:
        raise NotFound("Kitchen not found")
    return kitchen


# ── Booking window ───────────────────────────────────────────────────────


def location_timezone(location, config: BookingConfig | None = None):
    """pytz zone of a location, falling back to the default zone."""
    config = config or get_booking_config()
    name = (location.timezone if location is not None else None) or config.default_timezone
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {name!r}, using {config.default_timezone}")
        return pytz.timezone(config.default_timezone)


def booking_start_at(location, booking_date: date, start_minutes: int, config: BookingConfig | None = None) -> datetime:
    """Absolute start instant of a civil date + time at the location."""
    tz = location_timezone(location, config)
    naive = datetime.combine(booking_date, time()) + timedelta(minutes=start_minutes)
    return tz.localize(naive)


def current_time(now: Optional[datetime] = None) -> datetime:
    """Aware 'now'; naive values are taken as UTC."""
    if now is None:
        return datetime.now(pytz.utc)
    if now.tzinfo is None:
        return pytz.utc.localize(now)
    return now


def booking_window_hours(location) -> float:
    value = getattr(location, "minimum_booking_window_hours", None)
    if value is None:
        return DEFAULT_BOOKING_WINDOW_HOURS
    # 0 allows same-day bookings up to the start time
    return max(0, value)


def check_booking_window(
    location,
    booking_date: date,
    requested: TimeRange,
    config: BookingConfig | None = None,
    now: Optional[datetime] = None,
) -> None:
    """
    Reject starts in the past or inside the minimum notice window.

    The boundary is inclusive: a start exactly `window` hours away is accepted.
    """
    start_at = booking_start_at(location, booking_date, requested.start, config)
    lead = start_at - current_time(now)
    window = booking_window_hours(location)
    hours_available = lead.total_seconds() / 3600

    if lead < timedelta(hours=window):
        raise TooSoonToBook(window, hours_available)


# ── Open hours, limits, conflicts ────────────────────────────────────────


def check_open_hours(db: Session, kitchen_id: int, booking_date: date, requested: TimeRange) -> None:
    ranges = resolve_kitchen_day(db, kitchen_id, booking_date)
    if not ranges:
        raise KitchenClosed("Kitchen is closed on this date")
    if not any(r.contains(requested) for r in ranges):
        raise KitchenClosed()


def lock_kitchen_day(db: Session, kitchen_id: int, booking_date: date) -> None:
    """
    Take the exclusive per-(kitchen, date) lock for the current transaction.

    UPDATE first so the row lock (PostgreSQL) or the write lock (SQLite) is held
    until commit/rollback; the row is created on first use.
    """
    key = booking_date.isoformat()
    bump = (
        update(DBKitchenDayLock)
        .where(
            DBKitchenDayLock.kitchen_id == kitchen_id,
            DBKitchenDayLock.lock_date == key,
        )
        .values(version=DBKitchenDayLock.version + 1)
    )
    if db.execute(bump).rowcount:
        return

    try:
        with db.begin_nested():
            db.add(DBKitchenDayLock(kitchen_id=kitchen_id, lock_date=key, version=0))
    except IntegrityError:
        # created concurrently; the bump below waits for that transaction
        logger.debug(f"Lock row for kitchen {kitchen_id} on {key} created concurrently")
    db.execute(bump)


def booked_ranges(bookings: list) -> list[tuple[object, TimeRange]]:
    pairs = []
    for booking in bookings:
        rng = TimeRange.parse(booking.start_time, booking.end_time)
        if rng is not None:
            pairs.append((booking, rng))
    return pairs


def check_daily_limit(
    db: Session,
    kitchen_id: int,
    chef_id: int,
    booking_date: date,
    requested: TimeRange,
    config: BookingConfig | None = None,
) -> None:
    """A chef's pending + confirmed slot-hours for the day, including this request, must fit the cap."""
    config = config or get_booking_config()
    limit = resolve_daily_limit(db, kitchen_id, booking_date, config)

    own = get_day_bookings(db, kitchen_id, booking_date, statuses=("pending", "confirmed"), chef_id=chef_id)
    existing = sum(config.slot_hours(rng.minutes) for _, rng in booked_ranges(own))
    requested_hours = config.slot_hours(requested.minutes)

    if existing + requested_hours > limit:
        logger.warning(f"Chef {chef_id} over daily limit {limit} in kitchen {kitchen_id} on {booking_date}")
        raise DailyLimitExceeded(limit, existing, requested_hours)


def peak_concurrency(ranges: list[TimeRange], within: TimeRange) -> int:
    """Max number of ranges overlapping at any instant inside `within`."""
    events = []
    for rng in ranges:
        if rng.overlaps(within):
            events.append((max(rng.start, within.start), 1))
            events.append((min(rng.end, within.end), -1))
    # ends sort before starts at the same minute: touching ranges never stack
    events.sort(key=lambda e: (e[0], e[1]))

    peak = current = 0
    for _, delta in events:
        current += delta
        peak = max(peak, current)
    return peak


def check_conflicts(
    db: Session,
    kitchen: DBKitchen,
    booking_date: date,
    requested: TimeRange,
    config: BookingConfig | None = None,
) -> None:
    """Reject when non-cancelled bookings already fill the kitchen somewhere in the range."""
    config = config or get_booking_config()
    capacity = kitchen.capacity or config.default_capacity

    active = get_day_bookings(db, kitchen.id, booking_date, statuses=("pending", "confirmed"))
    overlapping = [(b, rng) for b, rng in booked_ranges(active) if rng.overlaps(requested)]
    if not overlapping:
        return

    if peak_concurrency([rng for _, rng in overlapping], requested) >= capacity:
        logger.warning(f"Slot conflict in kitchen {kitchen.id} on {booking_date} at {requested}")
        raise SlotConflict(sorted(b.id for b, _ in overlapping))


# ── Persistence ──────────────────────────────────────────────────────────


def _new_booking(
    kitchen: DBKitchen,
    booking_date: date,
    requested: TimeRange,
    config: BookingConfig,
    now: datetime,
    **fields,
) -> tuple[DBBooking, object]:
    price = calculate_kitchen_price(
        kitchen.hourly_rate,
        requested.minutes,
        kitchen.minimum_booking_hours,
        currency=kitchen.currency or "CAD",
        config=config,
    )
    stamp = now.isoformat()
    booking = DBBooking(
        kitchen_id=kitchen.id,
        booking_date=booking_date.isoformat(),
        start_time=minutes_to_time_str(requested.start),
        end_time=minutes_to_time_str(requested.end),
        status="pending",
        hourly_rate=price.hourly_rate,
        duration_hours=price.duration_hours,
        total_price=price.total_price,
        service_fee=price.service_fee,
        currency=price.currency,
        created_at=stamp,
        updated_at=stamp,
        **fields,
    )
    return booking, price


def _attach_addons(
    db: Session,
    booking: DBBooking,
    kitchen: DBKitchen,
    data: BookingCreate,
    requested: TimeRange,
) -> int:
    """Create storage/equipment rows for the booking; returns their total in cents."""
    total = 0

    for selection in data.selected_storage:
        listing = db.get(DBStorageListing, selection.storage_listing_id)
        if not listing or listing.kitchen_id != kitchen.id or not listing.is_active:
            raise NotFound(f"Storage listing {selection.storage_listing_id} not found")
        if selection.end_date <= selection.start_date:
            raise InvalidRange("Storage end date must be after its start date")

        price = calculate_storage_price(listing, selection.start_date, selection.end_date)
        db.add(DBStorageBooking(
            kitchen_booking_id=booking.id,
            storage_listing_id=listing.id,
            chef_id=booking.chef_id,
            start_date=selection.start_date.isoformat(),
            end_date=selection.end_date.isoformat(),
            status=booking.status,
            total_price=price,
            pricing_model=listing.pricing_model or "daily",
            currency=booking.currency,
        ))
        total += price

    day = date.fromisoformat(booking.booking_date)
    session_start = datetime.combine(day, time()) + timedelta(minutes=requested.start)
    session_end = datetime.combine(day, time()) + timedelta(minutes=requested.end)

    for equipment_id in data.selected_equipment_ids:
        listing = db.get(DBEquipmentListing, equipment_id)
        if not listing or listing.kitchen_id != kitchen.id or not listing.is_active:
            raise NotFound(f"Equipment listing {equipment_id} not found")

        price = calculate_equipment_price(listing)
        if price is None:
            # included with the kitchen, nothing to book
            continue
        db.add(DBEquipmentBooking(
            kitchen_booking_id=booking.id,
            equipment_listing_id=listing.id,
            chef_id=booking.chef_id,
            start_date=session_start.isoformat(),
            end_date=session_end.isoformat(),
            status=booking.status,
            total_price=price,
            damage_deposit=listing.damage_deposit or 0,
            currency=booking.currency,
        ))
        total += price

    return total


# ── Public operations ────────────────────────────────────────────────────


def create_booking(
    db: Session,
    chef_id: int,
    data: BookingCreate,
    *,
    eligibility: EligibilityProvider | None = None,
    license_provider: LicenseProvider | None = None,
    notifier: BookingNotifier | None = None,
    config: BookingConfig | None = None,
    now: Optional[datetime] = None,
) -> DBBooking:
    """
    Admit a chef's booking request and persist it as pending.

    Raises:
        BookingError subclasses for every rejected request, Unavailable on
        storage failure (nothing is committed in either case).
    """
    config = config or get_booking_config()
    now = current_time(now)

    requested = parse_requested_range(data.start_time, data.end_time)
    kitchen = get_active_kitchen(db, data.kitchen_id)
    location = db.get(DBLocation, kitchen.location_id)

    eligibility = eligibility or SqlEligibilityProvider(db)
    application_status = eligibility.application_status(chef_id, kitchen.location_id)
    if application_status != APPROVED:
        logger.warning(f"Chef {chef_id} not eligible at location {kitchen.location_id}: {application_status}")
        raise NotEligible(application_status)

    license_provider = license_provider or SqlLicenseProvider(db)
    license_status = license_provider.get_license_status(kitchen.location_id)
    if license_status != APPROVED:
        raise LicenseNotApproved(license_status)

    check_booking_window(location, data.booking_date, requested, config, now)
    check_open_hours(db, kitchen.id, data.booking_date, requested)

    with atomic(db):
        lock_kitchen_day(db, kitchen.id, data.booking_date)
        check_daily_limit(db, kitchen.id, chef_id, data.booking_date, requested, config)
        check_conflicts(db, kitchen, data.booking_date, requested, config)

        booking, price = _new_booking(
            kitchen,
            data.booking_date,
            requested,
            config,
            now,
            chef_id=chef_id,
            created_by=chef_id,
            booking_type="chef",
            special_notes=data.special_notes,
        )
        db.add(booking)
        db.flush()

        addons_total = _attach_addons(db, booking, kitchen, data, requested)
        booking.total_price, booking.service_fee = calculate_booking_totals(price, addons_total, config)

    db.refresh(booking)
    logger.info(
        f"Booking {booking.id} created: kitchen {kitchen.id} {booking.booking_date} "
        f"{booking.start_time}-{booking.end_time} chef {chef_id}"
    )
    publish(db, notifier, "booking_created", booking)
    return booking


def create_external_booking(
    db: Session,
    actor: Actor,
    data: ExternalBookingCreate,
    *,
    notifier: BookingNotifier | None = None,
    config: BookingConfig | None = None,
    now: Optional[datetime] = None,
) -> DBBooking:
    """
    Manager-entered booking for a third party.

    No eligibility, license or daily-limit checks; the range must still be
    open and free.
    """
    config = config or get_booking_config()
    now = current_time(now)

    requested = parse_requested_range(data.start_time, data.end_time)
    kitchen = get_active_kitchen(db, data.kitchen_id)
    location = db.get(DBLocation, kitchen.location_id)
    if not actor.manages(location):
        raise Forbidden("Only the location's manager can add bookings for this kitchen")

    check_open_hours(db, kitchen.id, data.booking_date, requested)

    contact = data.external_contact
    with atomic(db):
        lock_kitchen_day(db, kitchen.id, data.booking_date)
        check_conflicts(db, kitchen, data.booking_date, requested, config)

        booking, _ = _new_booking(
            kitchen,
            data.booking_date,
            requested,
            config,
            now,
            booking_type="external",
            created_by=actor.user_id,
            external_contact_name=contact.name,
            external_contact_email=contact.email,
            external_contact_phone=contact.phone,
            external_contact_company=contact.company,
            special_notes=data.special_notes,
        )
        db.add(booking)

    db.refresh(booking)
    logger.info(f"External booking {booking.id} created by {actor.role} {actor.user_id}")
    publish(db, notifier, "booking_created", booking)
    return booking
