"""Time-series bucketing for charts.

Bucketing happens in Python after a range-scoped read so that bucket keys
and hours follow the configured time zone on every database backend.
"""

from collections import Counter
from datetime import UTC, datetime, tzinfo
from decimal import Decimal

from storefront.core.datetime_utils import as_utc
from storefront.dashboard.schemas.dashboard_statistics import (
    CountBucket,
    Granularity,
    HourCount,
    RevenueBucket,
)
from storefront.dashboard.services.statistics.aggregator import MetricAggregator
from storefront.dashboard.services.statistics.base import DateRange, round_metric
from storefront.orders.models.order import REVENUE_STATUSES

KEY_FORMATS: dict[Granularity, str] = {
    Granularity.DAY: "%Y-%m-%d",
    Granularity.MONTH: "%Y-%m",
}


class TimeSeriesBuilder:
    """Builds sparse, ascending series keyed by day or month."""

    def __init__(self, aggregator: MetricAggregator, tz: tzinfo = UTC):
        self.aggregator = aggregator
        self.tz = tz

    def _local(self, moment: datetime) -> datetime:
        return as_utc(moment).astimezone(self.tz)

    def bucket_key(self, moment: datetime, granularity: Granularity) -> str:
        return self._local(moment).strftime(KEY_FORMATS[granularity])

    def bucketize(self, date_range: DateRange, granularity: Granularity) -> list[RevenueBucket]:
        """Revenue and order count per bucket for revenue-eligible orders.

        Only buckets with at least one qualifying order are returned.
        """
        revenue: dict[str, Decimal] = {}
        counts: Counter[str] = Counter()
        for created_at, total in self.aggregator.order_rows(date_range, REVENUE_STATUSES):
            key = self.bucket_key(created_at, granularity)
            revenue[key] = revenue.get(key, Decimal("0")) + total
            counts[key] += 1

        return [
            RevenueBucket(key=key, revenue=round_metric(revenue[key]), order_count=counts[key])
            for key in sorted(revenue)
        ]

    def order_trends(self, date_range: DateRange, granularity: Granularity) -> list[CountBucket]:
        """Orders of any status per bucket."""
        counts = Counter(
            self.bucket_key(created_at, granularity)
            for created_at, _ in self.aggregator.order_rows(date_range)
        )
        return [CountBucket(key=key, count=counts[key]) for key in sorted(counts)]

    def peak_hours(self, date_range: DateRange) -> list[HourCount]:
        """Histogram of order hour-of-day; always 24 entries."""
        counts = Counter(
            self._local(created_at).hour for created_at, _ in self.aggregator.order_rows(date_range)
        )
        return [HourCount(hour=hour, count=counts[hour]) for hour in range(24)]

    def customer_activity(self, date_range: DateRange) -> list[CountBucket]:
        """New customer registrations per day."""
        counts = Counter(
            self.bucket_key(created_at, Granularity.DAY)
            for created_at in self.aggregator.customer_signups(date_range)
        )
        return [CountBucket(key=key, count=counts[key]) for key in sorted(counts)]
