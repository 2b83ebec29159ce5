# backend/kitchen_booking/routers/bookings.py
# Kitchen bookings: admission, lookup and status transitions.
# No list/PATCH/DELETE: bookings are cancelled, never removed.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_actor, get_notifier
from ..errors import Forbidden
from ..principal import Actor
from ..schemas.bookings import BookingCreate, BookingRead, ExternalBookingCreate
from ..services.admission import create_booking, create_external_booking
from ..services.events import BookingNotifier
from ..services.lifecycle import cancel_booking, confirm_booking, get_booking_for_actor

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_kitchen_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BookingNotifier = Depends(get_notifier),
):
    if not actor.is_chef:
        raise Forbidden("Only chefs can book kitchens")
    return create_booking(db, actor.user_id, data, notifier=notifier)


@router.post("/external", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_third_party_booking(
    data: ExternalBookingCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BookingNotifier = Depends(get_notifier),
):
    return create_external_booking(db, actor, data, notifier=notifier)


@router.get("/{id}", response_model=BookingRead)
def get_booking(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return get_booking_for_actor(db, id, actor)


@router.put("/{id}/confirm", response_model=BookingRead)
def confirm(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BookingNotifier = Depends(get_notifier),
):
    return confirm_booking(db, id, actor, notifier=notifier)


@router.put("/{id}/cancel", response_model=BookingRead)
def cancel(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BookingNotifier = Depends(get_notifier),
):
    return cancel_booking(db, id, actor, notifier=notifier)
