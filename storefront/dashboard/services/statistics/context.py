"""Collaborators shared by the report services."""

from dataclasses import dataclass

from storefront.dashboard.services.statistics.aggregator import MetricAggregator
from storefront.dashboard.services.statistics.base import DateRange, PeriodResolver
from storefront.dashboard.services.statistics.config import StatisticsConfig
from storefront.dashboard.services.statistics.timeseries import TimeSeriesBuilder


@dataclass(frozen=True)
class StatisticsContext:
    aggregator: MetricAggregator
    resolver: PeriodResolver
    series: TimeSeriesBuilder
    config: StatisticsConfig

    def window(self, period: str | None) -> tuple[str, DateRange]:
        """Resolve a period token, returning the token actually used and its range."""
        token = self.resolver.normalize(period)
        return token, self.resolver.resolve(token)
