# backend/kitchen_booking/services/slots/invalidator.py
"""
Cache invalidation for kitchen slot grids.

Triggers:
✓ Weekly availability row changed → invalidate all dates of the kitchen
✓ Date override created/deleted → invalidate that date

Does NOT trigger:
✗ Booking created/confirmed/cancelled (capacity is counted live)
"""

import logging
from datetime import date
from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_kitchen_cache(
    redis: Redis | None,
    kitchen_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached grids for a kitchen.

    Args:
        redis: Redis client, or None when caching is disabled
        kitchen_id: Kitchen ID
        dates: List of specific dates to invalidate,
               or None to invalidate all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    store = SlotsRedisStore(redis)
    try:
        return store.delete_day_slots(kitchen_id, dates)
    except RedisError:
        # stale grids still expire with cache_ttl_seconds
        logger.exception("Failed to invalidate slot cache for kitchen %s", kitchen_id)
        return 0
