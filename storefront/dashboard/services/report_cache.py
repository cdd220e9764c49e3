"""Short-lived Redis cache for dashboard report payloads."""

import json
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import BaseModel
from redis.asyncio import Redis

from storefront.core.constants import DASHBOARD_CACHE_PREFIX, DEFAULT_CACHE_TTL_SECONDS

logger = structlog.get_logger(__name__)


def _to_payload(report: Any) -> Any:
    if isinstance(report, BaseModel):
        return report.model_dump(mode="json")
    if isinstance(report, list):
        return [_to_payload(item) for item in report]
    return report


class ReportCache:
    """Caches JSON report payloads under the ``dashboard:`` namespace.

    With no Redis client every call computes directly and reports a miss.
    """

    def __init__(
        self,
        redis: Redis | None,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        prefix: str = DASHBOARD_CACHE_PREFIX,
    ):
        self.redis = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def key(self, *parts: object) -> str:
        return ":".join([self.prefix, *(str(part) for part in parts)])

    async def remember(
        self, key: str, compute: Callable[[], Any], enabled: bool = True
    ) -> tuple[Any, bool]:
        """Return ``(payload, cached)`` for ``key``.

        On a miss the report is computed, stored for the TTL and returned
        with ``cached=False``. ``enabled=False`` skips both read and write.
        """
        if self.redis is None or not enabled:
            return _to_payload(compute()), False

        raw = await self.redis.get(key)
        if raw is not None:
            logger.debug("report_cache_hit", key=key)
            return json.loads(raw), True

        payload = _to_payload(compute())
        await self.redis.setex(key, self.ttl_seconds, json.dumps(payload))
        logger.debug("report_cache_miss", key=key, ttl=self.ttl_seconds)
        return payload, False

    async def clear(self) -> int:
        """Delete every cached report; returns the number of keys removed."""
        if self.redis is None:
            return 0

        keys = [key async for key in self.redis.scan_iter(match=f"{self.prefix}:*")]
        removed = await self.redis.delete(*keys) if keys else 0
        logger.info("report_cache_cleared", removed=removed)
        return int(removed)
