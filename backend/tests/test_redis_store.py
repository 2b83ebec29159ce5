from datetime import date
from unittest.mock import MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

from kitchen_booking.services.slots.invalidator import invalidate_kitchen_cache
from kitchen_booking.services.slots.redis_store import EMPTY_SENTINEL, SlotsRedisStore

DAY = date(2030, 6, 3)


class TestSlotsRedisStore:
    def test_store_day_slots(self, config):
        redis = MagicMock()
        pipe = redis.pipeline.return_value
        store = SlotsRedisStore(redis, config)

        store.store_day_slots(3, DAY, ["09:00", "10:00"])

        pipe.delete.assert_called_once_with("slots:kitchen:3:2030-06-03")
        pipe.zadd.assert_called_once_with("slots:kitchen:3:2030-06-03", {"09:00": 540, "10:00": 600})
        pipe.expire.assert_called_once_with("slots:kitchen:3:2030-06-03", config.cache_ttl_seconds)
        pipe.execute.assert_called_once()

    def test_closed_day_stores_sentinel(self, config):
        redis = MagicMock()
        pipe = redis.pipeline.return_value

        SlotsRedisStore(redis, config).store_day_slots(3, DAY, [])

        pipe.zadd.assert_called_once_with("slots:kitchen:3:2030-06-03", {EMPTY_SENTINEL: -1})

    def test_cache_miss(self, config):
        redis = MagicMock()
        redis.exists.return_value = 0

        assert SlotsRedisStore(redis, config).get_day_slots(3, DAY) is None
        redis.zrange.assert_not_called()

    def test_sentinel_reads_as_closed(self, config):
        redis = MagicMock()
        redis.exists.return_value = 1
        redis.zrange.return_value = [EMPTY_SENTINEL.encode()]

        assert SlotsRedisStore(redis, config).get_day_slots(3, DAY) == []

    def test_delete_all_dates_scans_kitchen_keys(self, config):
        redis = MagicMock()
        redis.scan_iter.return_value = iter([b"slots:kitchen:3:2030-06-03", b"slots:kitchen:3:2030-06-04"])
        redis.delete.return_value = 2

        assert SlotsRedisStore(redis, config).delete_day_slots(3) == 2
        redis.scan_iter.assert_called_once_with(match="slots:kitchen:3:*")


class TestInvalidateKitchenCache:
    def test_without_redis(self):
        assert invalidate_kitchen_cache(None, 3) == 0

    def test_specific_dates(self):
        redis = MagicMock()
        redis.delete.return_value = 1

        assert invalidate_kitchen_cache(redis, 3, [DAY]) == 1
        redis.delete.assert_called_once_with("slots:kitchen:3:2030-06-03")

    def test_redis_error_is_logged_not_raised(self):
        redis = MagicMock()
        redis.delete.side_effect = RedisConnectionError("down")

        assert invalidate_kitchen_cache(redis, 3, [DAY]) == 0
