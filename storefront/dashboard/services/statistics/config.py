"""Explicit configuration for the statistics services."""

from dataclasses import dataclass
from datetime import UTC, tzinfo
from zoneinfo import ZoneInfo

from storefront.core.config import Settings
from storefront.core.constants import DEFAULT_CACHE_TTL_SECONDS, LOW_STOCK_THRESHOLD

PERIOD_TOKENS: tuple[str, ...] = ("today", "week", "month", "year")


@dataclass(frozen=True)
class StatisticsConfig:
    """Settings the statistics services need, passed in at construction.

    Attributes:
        cache_ttl_seconds: Lifetime of cached report payloads.
        default_period: Period used when a token is not recognised.
        timezone: Zone in which calendar boundaries and buckets are computed.
        week_start: First day of the week (0 = Monday ... 6 = Sunday).
        low_stock_threshold: Highest stock level still counted as "low".
        forecast_confidence: Confidence reported on the forecast placeholder.
    """

    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    default_period: str = "month"
    timezone: tzinfo = UTC
    week_start: int = 0
    low_stock_threshold: int = LOW_STOCK_THRESHOLD
    forecast_confidence: float = 0.85

    def __post_init__(self) -> None:
        if self.default_period not in PERIOD_TOKENS:
            raise ValueError(f"default_period must be one of {PERIOD_TOKENS}")
        if not 0 <= self.week_start <= 6:
            raise ValueError("week_start must be between 0 (Monday) and 6 (Sunday)")

    @classmethod
    def from_settings(cls, settings: Settings) -> "StatisticsConfig":
        tz: tzinfo = (
            UTC if settings.STATISTICS_TIMEZONE == "UTC" else ZoneInfo(settings.STATISTICS_TIMEZONE)
        )
        return cls(
            cache_ttl_seconds=settings.STATISTICS_CACHE_TTL_SECONDS,
            default_period=settings.STATISTICS_DEFAULT_PERIOD,
            timezone=tz,
            week_start=settings.STATISTICS_WEEK_START,
            low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
            forecast_confidence=settings.FORECAST_CONFIDENCE,
        )
