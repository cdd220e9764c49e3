"""Statistics facade: the single entry point the dashboard routes call.

Every report is computed fully or not at all; query errors from the
aggregator propagate to the caller unchanged.
"""

import uuid
from datetime import date

from sqlalchemy.orm import Session

from storefront.core.exceptions import ValidationError
from storefront.dashboard.schemas.dashboard_statistics import (
    CategoryPerformanceReport,
    CustomerReport,
    Granularity,
    GrowthReport,
    LowStockReport,
    OrderReport,
    OverviewReport,
    ProductReport,
    RecentOrder,
    RevenueReport,
    TopProductsReport,
)
from storefront.dashboard.services.statistics import (
    CustomerStatisticsService,
    DashboardService,
    DateRange,
    MetricAggregator,
    OrderStatisticsService,
    PeriodResolver,
    ProductStatisticsService,
    RevenueService,
    StatisticsConfig,
    StatisticsContext,
    TimeSeriesBuilder,
)
from storefront.dashboard.services.statistics.base import Clock, utc_now
from storefront.orders.models.order import OrderStatus


class StatisticsService:
    """Facade over the dashboard report services.

    Args:
        db: Session used for every read of one request.
        config: Explicit statistics configuration.
        clock: Source of "now"; defaults to the system clock in UTC.
    """

    def __init__(
        self,
        db: Session,
        config: StatisticsConfig | None = None,
        clock: Clock | None = None,
    ):
        self.config = config or StatisticsConfig()
        self.resolver = PeriodResolver(
            clock=clock or utc_now,
            tz=self.config.timezone,
            week_start=self.config.week_start,
            default_period=self.config.default_period,
        )
        aggregator = MetricAggregator(db)
        ctx = StatisticsContext(
            aggregator=aggregator,
            resolver=self.resolver,
            series=TimeSeriesBuilder(aggregator, self.config.timezone),
            config=self.config,
        )
        self.dashboard = DashboardService(ctx)
        self.revenue = RevenueService(ctx)
        self.orders = OrderStatisticsService(ctx)
        self.products = ProductStatisticsService(ctx)
        self.customers = CustomerStatisticsService(ctx)

    # ============ Helper Methods ============

    def date_range(self, start_date: date | None, end_date: date | None) -> DateRange:
        """Whole-day range between two calendar dates.

        A missing bound defaults to the matching bound of the current month.

        Raises:
            ValidationError: If end_date is before start_date.
        """
        month = self.resolver.resolve("month")
        start = start_date or month.start.date()
        end = end_date or month.end.date()
        if end < start:
            raise ValidationError("end_date must not be before start_date", field="end_date")
        return self.resolver.custom(start, end)

    # ============ Reports ============

    def get_overview(self, period: str | None, include_comparison: bool = True) -> OverviewReport:
        return self.dashboard.get_overview(period, include_comparison)

    def get_revenue_report(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        granularity: Granularity = Granularity.DAY,
        include_forecast: bool = False,
        date_range: DateRange | None = None,
    ) -> RevenueReport:
        """Revenue report for calendar dates, or for an already resolved ``date_range``."""
        if date_range is None:
            date_range = self.date_range(start_date, end_date)
        return self.revenue.get_report(date_range, granularity, include_forecast)

    def get_order_report(
        self,
        period: str | None,
        status: OrderStatus | None = None,
        include_details: bool = False,
    ) -> OrderReport:
        return self.orders.get_report(period, status, include_details)

    def get_recent_orders(self, limit: int, status: OrderStatus | None = None) -> list[RecentOrder]:
        return self.orders.get_recent_orders(limit, status)

    def get_product_report(
        self,
        period: str | None,
        category_id: uuid.UUID | None = None,
        sort: str = "revenue",
        limit: int = 20,
    ) -> ProductReport:
        return self.products.get_report(period, category_id, sort, limit)

    def get_top_products(
        self, period: str | None, limit: int = 10, metric: str = "revenue"
    ) -> TopProductsReport:
        return self.products.get_top_products(period, limit, metric)

    def get_low_stock(
        self, threshold: int | None = None, category_id: uuid.UUID | None = None
    ) -> LowStockReport:
        return self.products.get_low_stock(threshold, category_id)

    def get_category_performance(self, period: str | None) -> CategoryPerformanceReport:
        return self.products.get_category_performance(period)

    def get_customer_report(self, period: str | None) -> CustomerReport:
        return self.customers.get_report(period)

    def get_growth(self, period: str | None) -> GrowthReport:
        return self.dashboard.get_growth(period)
