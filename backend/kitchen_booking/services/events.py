"""
backend/kitchen_booking/services/events.py

Notification sink: pushes booking events to a Redis queue consumed by the
notification worker (email/SMS delivery lives there, not here).

Queue:
- events:p2p: booking_created / booking_confirmed / booking_cancelled

Emitting is fire-and-forget: a failed push is logged and never undoes the
booking change that triggered it.
"""

import json
import time
import logging

from redis import Redis
from sqlalchemy.orm import Session

from ..models.generated import Kitchens as DBKitchen, Locations as DBLocation

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def booking_payload(booking) -> dict:
    """Flat, JSON-safe snapshot of a booking for consumers."""
    return {
        "booking_id": booking.id,
        "kitchen_id": booking.kitchen_id,
        "chef_id": booking.chef_id,
        "booking_type": booking.booking_type,
        "booking_date": booking.booking_date,
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": booking.status,
        "total_price": booking.total_price,
        "service_fee": booking.service_fee,
        "currency": booking.currency,
    }


def resolve_recipients(db: Session, booking) -> list[dict]:
    """
    Who hears about a booking change.

    - the chef who holds it (or the external contact for external bookings)
    - the location's notification address
    """
    recipients: list[dict] = []
    if booking.chef_id is not None:
        recipients.append({"role": "chef", "user_id": booking.chef_id})
    elif booking.external_contact_email:
        recipients.append({"role": "external", "email": booking.external_contact_email})

    kitchen = db.get(DBKitchen, booking.kitchen_id)
    location = db.get(DBLocation, kitchen.location_id) if kitchen else None
    if location is not None:
        if location.notification_email:
            recipients.append({"role": "location", "email": location.notification_email})
        elif location.manager_id is not None:
            recipients.append({"role": "manager", "user_id": location.manager_id})

    return recipients


class BookingNotifier:
    """Redis-backed notification sink. redis=None disables delivery."""

    def __init__(self, redis: Redis | None):
        self.redis = redis

    def booking_created(self, booking, recipients: list[dict]) -> None:
        self.emit("booking_created", booking, recipients)

    def booking_confirmed(self, booking, recipients: list[dict]) -> None:
        self.emit("booking_confirmed", booking, recipients)

    def booking_cancelled(self, booking, recipients: list[dict]) -> None:
        self.emit("booking_cancelled", booking, recipients)

    def emit(self, event_type: str, booking, recipients: list[dict]) -> None:
        """Push one event to events:p2p."""
        if self.redis is None:
            logger.debug(f"Notifications disabled, dropping {event_type}")
            return

        event = {
            "type": event_type,
            "booking": booking_payload(booking),
            "recipients": recipients,
            "ts": int(time.time()),
        }
        try:
            self.redis.rpush(P2P_QUEUE, json.dumps(event))
            logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
        except Exception as e:
            logger.error(f"Failed to emit event {event_type}: {e}")


def publish(db: Session, notifier: BookingNotifier | None, event_type: str, booking) -> None:
    """
    Notify about a committed booking change.

    Runs after commit; any failure here is logged and swallowed so the caller
    still gets its booking back.
    """
    if notifier is None:
        return
    try:
        recipients = resolve_recipients(db, booking)
        getattr(notifier, event_type)(booking, recipients)
    except Exception as e:
        logger.error(f"Notification {event_type} for booking {booking.id} failed: {e}")
