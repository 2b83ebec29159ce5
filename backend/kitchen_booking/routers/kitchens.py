# backend/kitchen_booking/routers/kitchens.py
"""
Browsing endpoints for chefs.

GET /kitchens/{id}/slots  - hourly slots with remaining capacity
GET /kitchens/{id}/policy - daily slot cap per chef
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_redis
from ..schemas.slots import DailyPolicyRead, SlotRead
from ..services.policy import get_daily_policy
from ..services.slots import get_booking_config, get_open_slots

router = APIRouter(prefix="/kitchens", tags=["kitchens"])


@router.get("/{kitchen_id}/slots", response_model=list[SlotRead])
def list_kitchen_slots(
    kitchen_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Optional[Redis] = Depends(get_redis),
):
    return get_open_slots(db, kitchen_id, target_date, get_booking_config(), redis)


@router.get("/{kitchen_id}/policy", response_model=DailyPolicyRead)
def get_kitchen_policy(
    kitchen_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    return get_daily_policy(db, kitchen_id, target_date, get_booking_config())
