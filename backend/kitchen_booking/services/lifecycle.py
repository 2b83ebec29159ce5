# backend/kitchen_booking/services/lifecycle.py
"""
Booking status transitions after admission.

    pending ──confirm──► confirmed
       │                    │
       └──────cancel────────┴──► cancelled (terminal)

Confirming a confirmed booking and cancelling a cancelled one are no-ops that
return the booking unchanged.

Every transition takes the kitchen-day lock and re-reads the row before
writing, so a concurrent cancel cannot be overwritten by a confirm.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..database import atomic
from ..errors import CancellationNotAllowed, Forbidden, InvalidTransition, LicenseNotApproved, NotFound
from ..models.generated import KitchenBookings as DBBooking, Kitchens as DBKitchen, Locations as DBLocation
from ..principal import Actor
from .access import APPROVED, LicenseProvider, SqlLicenseProvider
from .admission import booking_start_at, current_time, lock_kitchen_day
from .events import BookingNotifier, publish
from .slots.config import BookingConfig, get_booking_config, time_str_to_minutes

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_MESSAGE = "Bookings cannot be cancelled within {hours} hours of the scheduled time."


def _load(db: Session, booking_id: int) -> tuple[DBBooking, DBLocation]:
    booking = db.get(DBBooking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    kitchen = db.get(DBKitchen, booking.kitchen_id)
    location = db.get(DBLocation, kitchen.location_id)
    return booking, location


def get_booking_for_actor(db: Session, booking_id: int, actor: Actor) -> DBBooking:
    """Booking visible to its chef, the location's manager and admins."""
    booking, location = _load(db, booking_id)
    if actor.manages(location):
        return booking
    if actor.is_chef and booking.chef_id == actor.user_id:
        return booking
    raise Forbidden("You do not have access to this booking")


def _lock_and_reload(db: Session, booking: DBBooking) -> None:
    """Serialize with other writers on the booking's kitchen day, then re-read the row."""
    lock_kitchen_day(db, booking.kitchen_id, date.fromisoformat(booking.booking_date))
    db.refresh(booking)


def confirm_booking(
    db: Session,
    booking_id: int,
    actor: Optional[Actor] = None,
    *,
    license_provider: LicenseProvider | None = None,
    notifier: BookingNotifier | None = None,
    now: Optional[datetime] = None,
) -> DBBooking:
    """Manager/admin approval of a pending booking. actor=None is a trusted internal call."""
    booking, location = _load(db, booking_id)
    if actor is not None and not actor.manages(location):
        raise Forbidden("Only the location's manager can confirm bookings")

    if booking.status == "confirmed":
        return booking
    if booking.status != "pending":
        raise InvalidTransition(booking.status, "confirmed")

    license_provider = license_provider or SqlLicenseProvider(db)
    license_status = license_provider.get_license_status(location.id)
    if license_status != APPROVED:
        raise LicenseNotApproved(license_status)

    stamp = current_time(now).isoformat()
    with atomic(db):
        _lock_and_reload(db, booking)
        # the status read above may be stale by now
        changed = booking.status == "pending"
        if changed:
            booking.status = "confirmed"
            booking.updated_at = stamp
            for addon in (*booking.storage_bookings, *booking.equipment_bookings):
                if addon.status == "pending":
                    addon.status = "confirmed"
        elif booking.status != "confirmed":
            raise InvalidTransition(booking.status, "confirmed")

    db.refresh(booking)
    if changed:
        logger.info(f"Booking {booking.id} confirmed")
        publish(db, notifier, "booking_confirmed", booking)
    return booking


def check_cancellation_policy(location, booking: DBBooking, config: BookingConfig, now: datetime) -> None:
    """Self-cancel must happen at least cancellation_policy_hours before the start."""
    hours = location.cancellation_policy_hours if location is not None else None
    if not hours or hours <= 0:
        return

    day = datetime.strptime(booking.booking_date, "%Y-%m-%d").date()
    start_at = booking_start_at(location, day, time_str_to_minutes(booking.start_time), config)
    if start_at - now < timedelta(hours=hours):
        template = location.cancellation_policy_message or DEFAULT_CANCELLATION_MESSAGE
        raise CancellationNotAllowed(template.replace("{hours}", str(hours)), hours)


def cancel_booking(
    db: Session,
    booking_id: int,
    actor: Actor,
    *,
    notifier: BookingNotifier | None = None,
    config: BookingConfig | None = None,
    now: Optional[datetime] = None,
) -> DBBooking:
    """
    Cancel a pending or confirmed booking and its add-ons.

    The chef who holds the booking is bound by the location cancellation
    policy; managers and admins are not.
    """
    config = config or get_booking_config()
    now = current_time(now)

    booking, location = _load(db, booking_id)
    is_manager = actor.manages(location)
    is_owner = actor.is_chef and booking.chef_id == actor.user_id
    if not (is_manager or is_owner):
        raise Forbidden("You do not have access to this booking")

    if booking.status == "cancelled":
        return booking

    if not is_manager:
        check_cancellation_policy(location, booking, config, now)

    stamp = now.isoformat()
    with atomic(db):
        _lock_and_reload(db, booking)
        changed = booking.status != "cancelled"
        if changed:
            booking.status = "cancelled"
            booking.cancelled_at = stamp
            booking.cancelled_by = actor.user_id
            booking.updated_at = stamp
            for addon in (*booking.storage_bookings, *booking.equipment_bookings):
                addon.status = "cancelled"

    db.refresh(booking)
    if changed:
        logger.info(f"Booking {booking.id} cancelled by {actor.role} {actor.user_id}")
        publish(db, notifier, "booking_cancelled", booking)
    return booking
