# backend/kitchen_booking/services/slots/redis_store.py
"""
Redis storage for resolved kitchen slot grids using Sorted Sets.

Key format: slots:kitchen:{kitchen_id}:{date}
Value: Sorted Set where member = "HH:MM", score = minutes since midnight,
       so ZRANGE returns slots already in time order.

Sentinel: "__empty__" with score=-1 marks "calculated, kitchen closed".
Only the schedule-derived grid is cached; bookings are always counted live.
"""

from datetime import date
from redis import Redis

from .config import BookingConfig, get_booking_config, time_str_to_minutes


EMPTY_SENTINEL = "__empty__"


def _decode(member) -> str:
    return member.decode() if isinstance(member, bytes) else member


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for slot data."""

    KEY_PREFIX = "slots:kitchen"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, kitchen_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{kitchen_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(
        self,
        kitchen_id: int,
        dt: date,
        slots: list[str],
    ) -> None:
        """
        Store calculated slots for a day.

        Args:
            kitchen_id: Kitchen ID
            dt: Target date
            slots: List of "HH:MM". Empty list → sentinel is stored.
        """
        key = self._key(kitchen_id, dt)
        pipe = self.redis.pipeline()

        # Remove old data
        pipe.delete(key)

        if slots:
            pipe.zadd(key, {time_str: time_str_to_minutes(time_str) for time_str in slots})
        else:
            # Closed day: sentinel so EXISTS returns True
            pipe.zadd(key, {EMPTY_SENTINEL: -1})

        pipe.expire(key, self.config.cache_ttl_seconds)
        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_day_slots(
        self,
        kitchen_id: int,
        dt: date,
    ) -> list[str] | None:
        """
        Get cached slots for a day.

        Returns:
            Sorted list of "HH:MM" strings, or None on cache miss.
        """
        key = self._key(kitchen_id, dt)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrange(key, 0, -1)
        return [
            _decode(m)
            for m in members
            if _decode(m) != EMPTY_SENTINEL
        ]

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_slots(
        self,
        kitchen_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached slots.

        Args:
            kitchen_id: Kitchen ID
            dates: Specific dates, or None to delete all for kitchen.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(kitchen_id, dt) for dt in dates]
        else:
            pattern = f"{self.KEY_PREFIX}:{kitchen_id}:*"
            keys = list(self.redis.scan_iter(match=pattern))

        if not keys:
            return 0

        return self.redis.delete(*keys)
