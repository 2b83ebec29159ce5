# backend/kitchen_booking/routers/availability.py
# Manager-set schedule: weekly rows and per-date overrides.
# Every write drops the cached slot grids it affects.

from datetime import date

from fastapi import APIRouter, Depends, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import atomic, get_db
from ..dependencies import get_actor, get_redis
from ..errors import Forbidden, InvalidRange, NotFound
from ..models.generated import (
    KitchenAvailability as DBKitchenAvailability,
    KitchenDateOverrides as DBKitchenDateOverride,
    Kitchens as DBKitchen,
)
from ..principal import Actor
from ..schemas.availability import (
    DateOverrideCreate,
    DateOverrideRead,
    WeeklyAvailabilityCreate,
    WeeklyAvailabilityRead,
)
from ..services.slots import TimeRange, invalidate_kitchen_cache

router = APIRouter(prefix="/kitchens", tags=["availability"])


def _managed_kitchen(db: Session, kitchen_id: int, actor: Actor) -> DBKitchen:
    kitchen = db.get(DBKitchen, kitchen_id)
    if not kitchen:
        raise NotFound("Kitchen not found")
    if not actor.manages(kitchen.location):
        raise Forbidden("Only the location's manager can change kitchen availability")
    return kitchen


def _check_range(start_time, end_time) -> None:
    if TimeRange.parse(start_time, end_time) is None:
        raise InvalidRange("End time must be after start time")


@router.get("/{kitchen_id}/availability", response_model=list[WeeklyAvailabilityRead])
def list_weekly_availability(kitchen_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBKitchenAvailability)
        .filter(DBKitchenAvailability.kitchen_id == kitchen_id)
        .order_by(DBKitchenAvailability.day_of_week)
        .all()
    )


@router.post(
    "/{kitchen_id}/availability",
    response_model=WeeklyAvailabilityRead,
    status_code=status.HTTP_201_CREATED,
)
def set_weekly_availability(
    kitchen_id: int,
    data: WeeklyAvailabilityCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    redis: Redis | None = Depends(get_redis),
):
    """Create or replace the row for one weekday."""
    _managed_kitchen(db, kitchen_id, actor)
    if data.is_available:
        _check_range(data.start_time, data.end_time)

    obj = (
        db.query(DBKitchenAvailability)
        .filter(
            DBKitchenAvailability.kitchen_id == kitchen_id,
            DBKitchenAvailability.day_of_week == data.day_of_week,
        )
        .first()
    )
    with atomic(db):
        if obj is None:
            obj = DBKitchenAvailability(kitchen_id=kitchen_id, day_of_week=data.day_of_week)
            db.add(obj)
        obj.start_time = data.start_time
        obj.end_time = data.end_time
        obj.is_available = int(data.is_available)
        obj.max_slots_per_chef = data.max_slots_per_chef
    db.refresh(obj)

    invalidate_kitchen_cache(redis, kitchen_id)
    return obj


@router.get("/{kitchen_id}/overrides", response_model=list[DateOverrideRead])
def list_date_overrides(kitchen_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBKitchenDateOverride)
        .filter(DBKitchenDateOverride.kitchen_id == kitchen_id)
        .order_by(DBKitchenDateOverride.specific_date, DBKitchenDateOverride.id)
        .all()
    )


@router.post(
    "/{kitchen_id}/overrides",
    response_model=DateOverrideRead,
    status_code=status.HTTP_201_CREATED,
)
def create_date_override(
    kitchen_id: int,
    data: DateOverrideCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    redis: Redis | None = Depends(get_redis),
):
    _managed_kitchen(db, kitchen_id, actor)
    if data.start_time is not None or data.end_time is not None:
        _check_range(data.start_time, data.end_time)

    obj = DBKitchenDateOverride(
        kitchen_id=kitchen_id,
        specific_date=data.specific_date.isoformat(),
        is_available=int(data.is_available),
        start_time=data.start_time,
        end_time=data.end_time,
        reason=data.reason,
        max_slots_per_chef=data.max_slots_per_chef,
    )
    with atomic(db):
        db.add(obj)
    db.refresh(obj)

    invalidate_kitchen_cache(redis, kitchen_id, [data.specific_date])
    return obj


@router.delete("/{kitchen_id}/overrides/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_date_override(
    kitchen_id: int,
    override_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    redis: Redis | None = Depends(get_redis),
):
    _managed_kitchen(db, kitchen_id, actor)
    obj = db.get(DBKitchenDateOverride, override_id)
    if not obj or obj.kitchen_id != kitchen_id:
        raise NotFound("Override not found")

    specific_date = date.fromisoformat(obj.specific_date)
    with atomic(db):
        db.delete(obj)

    invalidate_kitchen_cache(redis, kitchen_id, [specific_date])
