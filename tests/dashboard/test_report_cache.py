import json
from unittest.mock import MagicMock

from storefront.dashboard.schemas.dashboard_statistics import CacheClearResult
from storefront.dashboard.services.report_cache import ReportCache


class TestRemember:
    async def test_miss_computes_and_stores(self, report_cache, fake_redis):
        compute = MagicMock(return_value=CacheClearResult(cleared_keys=3))

        payload, cached = await report_cache.remember("dashboard:test", compute)

        assert payload == {"cleared_keys": 3}
        assert cached is False
        compute.assert_called_once()
        assert json.loads(fake_redis.store["dashboard:test"]) == {"cleared_keys": 3}
        assert fake_redis.ttls["dashboard:test"] == 300

    async def test_hit_skips_compute(self, report_cache, fake_redis):
        await fake_redis.setex("dashboard:test", 300, json.dumps({"total": 1}))
        compute = MagicMock()

        payload, cached = await report_cache.remember("dashboard:test", compute)

        assert payload == {"total": 1}
        assert cached is True
        compute.assert_not_called()

    async def test_second_call_is_a_hit(self, report_cache):
        compute = MagicMock(return_value={"total": 7})

        first = await report_cache.remember("dashboard:k", compute)
        second = await report_cache.remember("dashboard:k", compute)

        assert first == ({"total": 7}, False)
        assert second == ({"total": 7}, True)
        assert compute.call_count == 1

    async def test_disabled_bypasses_read_and_write(self, report_cache, fake_redis):
        await fake_redis.setex("dashboard:test", 300, json.dumps({"stale": True}))
        compute = MagicMock(return_value={"fresh": True})

        payload, cached = await report_cache.remember("dashboard:test", compute, enabled=False)

        assert payload == {"fresh": True}
        assert cached is False
        assert json.loads(fake_redis.store["dashboard:test"]) == {"stale": True}

    async def test_without_redis_computes_directly(self):
        cache = ReportCache(None)
        compute = MagicMock(return_value=[CacheClearResult(cleared_keys=1)])

        payload, cached = await cache.remember("dashboard:test", compute)

        assert payload == [{"cleared_keys": 1}]
        assert cached is False


def test_key_layout(report_cache):
    assert report_cache.key("overview", "month", "compare") == "dashboard:overview:month:compare"


class TestClear:
    async def test_removes_only_dashboard_keys(self, report_cache, fake_redis):
        await fake_redis.setex("dashboard:overview:month:compare", 300, "{}")
        await fake_redis.setex("dashboard:orders:week:all:summary", 300, "{}")
        await fake_redis.setex("session:abc", 300, "{}")

        removed = await report_cache.clear()

        assert removed == 2
        assert list(fake_redis.store) == ["session:abc"]

    async def test_is_idempotent(self, report_cache, fake_redis):
        await fake_redis.setex("dashboard:overview:month:compare", 300, "{}")

        assert await report_cache.clear() == 1
        assert await report_cache.clear() == 0

    async def test_without_redis(self):
        assert await ReportCache(None).clear() == 0
