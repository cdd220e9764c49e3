"""Statistics module for the storefront dashboard.

This module is split into domain-specific services:
- config: StatisticsConfig passed in at construction
- base: Period resolver and derived-metric calculations
- aggregator: Range-scoped aggregate queries
- timeseries: Day/month buckets, peak hours, customer activity
- dashboard_service: Overview and growth
- revenue_service: Revenue analytics
- order_service: Order analytics and recent orders
- product_service: Products, inventory and categories
- customer_service: Customer analytics
"""

from storefront.dashboard.services.statistics.aggregator import MetricAggregator
from storefront.dashboard.services.statistics.base import (
    DateRange,
    PeriodComparison,
    PeriodResolver,
    average_order_value,
    growth_rate,
    rate,
    round_metric,
    trend_label,
)
from storefront.dashboard.services.statistics.config import StatisticsConfig
from storefront.dashboard.services.statistics.context import StatisticsContext
from storefront.dashboard.services.statistics.customer_service import CustomerStatisticsService
from storefront.dashboard.services.statistics.dashboard_service import DashboardService
from storefront.dashboard.services.statistics.order_service import OrderStatisticsService
from storefront.dashboard.services.statistics.product_service import ProductStatisticsService
from storefront.dashboard.services.statistics.revenue_service import RevenueService
from storefront.dashboard.services.statistics.timeseries import TimeSeriesBuilder

__all__ = [
    # Base utilities
    "DateRange",
    "PeriodComparison",
    "PeriodResolver",
    "StatisticsConfig",
    "growth_rate",
    "trend_label",
    "rate",
    "average_order_value",
    "round_metric",
    # Building blocks
    "MetricAggregator",
    "TimeSeriesBuilder",
    "StatisticsContext",
    # Services
    "DashboardService",
    "RevenueService",
    "OrderStatisticsService",
    "ProductStatisticsService",
    "CustomerStatisticsService",
]
