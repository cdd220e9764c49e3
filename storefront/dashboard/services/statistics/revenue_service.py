"""Revenue statistics service."""

from storefront.core.constants import UNCATEGORIZED_LABEL
from storefront.dashboard.schemas.dashboard_statistics import (
    CategoryRevenue,
    ForecastPlaceholder,
    Granularity,
    Placeholder,
    RevenueReport,
)
from storefront.dashboard.services.statistics.base import (
    DateRange,
    average_order_value,
    growth_rate,
    round_metric,
    trend_label,
)
from storefront.dashboard.services.statistics.context import StatisticsContext

PAYMENT_METHOD_NOTE = "Orders do not record a payment method"


class RevenueService:
    """Service for revenue-related statistics."""

    def __init__(self, ctx: StatisticsContext):
        self.ctx = ctx

    def get_report(
        self,
        date_range: DateRange,
        granularity: Granularity = Granularity.DAY,
        include_forecast: bool = False,
    ) -> RevenueReport:
        """Get revenue analytics with chart data for a date range.

        Growth is measured against the equal-length range immediately before
        ``date_range``. Average daily revenue divides by the inclusive
        calendar-day count.

        Args:
            date_range: Range to report on.
            granularity: Bucket size of the series (day or month).
            include_forecast: Attach the forecast slot.

        Returns:
            RevenueReport with totals, growth, series and per-category split.
        """
        agg = self.ctx.aggregator
        total, order_count = agg.revenue_and_count(date_range)
        previous_total = agg.sum_revenue(self.ctx.resolver.previous_range(date_range))
        change = growth_rate(previous_total, total)

        forecast = None
        if include_forecast:
            forecast = ForecastPlaceholder(confidence=self.ctx.config.forecast_confidence)

        return RevenueReport(
            start_date=date_range.start,
            end_date=date_range.end,
            group_by=granularity,
            days=date_range.days,
            total_revenue=round_metric(total),
            previous_revenue=round_metric(previous_total),
            growth_rate=round_metric(change),
            trend=trend_label(change),
            order_count=order_count,
            average_order_value=round_metric(average_order_value(total, order_count)),
            average_daily_revenue=round_metric(total / date_range.days),
            series=self.ctx.series.bucketize(date_range, granularity),
            by_category=[
                CategoryRevenue(category=name or UNCATEGORIZED_LABEL, revenue=round_metric(amount))
                for name, amount in agg.revenue_by_category(date_range)
            ],
            by_payment_method=Placeholder(note=PAYMENT_METHOD_NOTE),
            forecast=forecast,
        )
