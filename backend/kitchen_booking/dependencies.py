# backend/kitchen_booking/dependencies.py
# Identity arrives from the gateway as X-User-Id / X-User-Role headers.

from typing import Optional

from fastapi import Header, HTTPException, status
from redis import Redis

from .config import settings
from .principal import ROLES, Actor
from .redis_client import redis_client
from .services.events import BookingNotifier


def get_redis() -> Optional[Redis]:
    if not settings.slots_cache_enabled:
        return None
    return redis_client


def get_notifier() -> BookingNotifier:
    return BookingNotifier(redis_client if settings.notifications_enabled else None)


def get_actor(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Actor:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing identity headers")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid X-User-Id") from None
    if x_user_role not in ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown role")
    return Actor(user_id=user_id, role=x_user_role)
