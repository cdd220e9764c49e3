"""Dashboard overview and growth statistics."""

from storefront.dashboard.schemas.dashboard_statistics import (
    CustomersOverview,
    GrowthReport,
    OrdersOverview,
    OrderStatusBreakdown,
    OverviewMetrics,
    OverviewReport,
    RevenueOverview,
    StockBands,
    TrendMetric,
)
from storefront.dashboard.services.statistics.base import (
    Number,
    average_order_value,
    growth_rate,
    rate,
    round_metric,
    trend_label,
)
from storefront.dashboard.services.statistics.context import StatisticsContext
from storefront.orders.models.order import OrderStatus


def build_trend(previous: Number, current: Number) -> TrendMetric:
    change = growth_rate(previous, current)
    return TrendMetric(
        rate=round_metric(change),
        current=round_metric(current),
        previous=round_metric(previous),
        trend=trend_label(change),
    )


class DashboardService:
    """Service for the dashboard overview and period-over-period growth."""

    def __init__(self, ctx: StatisticsContext):
        self.ctx = ctx

    def get_overview(self, period: str | None, include_comparison: bool = True) -> OverviewReport:
        """Get the dashboard overview for a period.

        Args:
            period: Period token; unknown tokens use the configured default.
            include_comparison: When False, the previous period is never
                queried and every change field is None.

        Returns:
            OverviewReport with revenue, orders, customers, products and
            derived metrics blocks.
        """
        agg = self.ctx.aggregator
        token, current = self.ctx.window(period)

        revenue = agg.sum_revenue(current)
        by_status = agg.count_orders_by_status(current)
        total_orders = sum(by_status.values())
        new_customers = agg.count_new_users(current)
        # Conversion is measured against every signup, whatever the role
        new_users = agg.count_new_users(current, role=None)

        revenue_block = RevenueOverview(total=round_metric(revenue))
        orders_block = OrdersOverview(
            total=total_orders, by_status=OrderStatusBreakdown(**by_status)
        )
        customers_block = CustomersOverview(
            total=agg.count_users(),
            new=new_customers,
            active=agg.count_active_users(current),
        )

        if include_comparison:
            previous = self.ctx.resolver.previous_range(current)
            previous_revenue = agg.sum_revenue(previous)
            previous_orders = agg.count_orders(previous)
            previous_new = agg.count_new_users(previous)

            revenue_change = growth_rate(previous_revenue, revenue)
            revenue_block.previous = round_metric(previous_revenue)
            revenue_block.change_percent = round_metric(revenue_change)
            revenue_block.trend = trend_label(revenue_change)

            orders_block.previous = previous_orders
            orders_block.change_percent = round_metric(growth_rate(previous_orders, total_orders))

            customers_block.previous_new = previous_new
            customers_block.change_percent = round_metric(
                growth_rate(previous_new, new_customers)
            )

        metrics = OverviewMetrics(
            average_order_value=round_metric(average_order_value(revenue, total_orders)),
            conversion_rate=round_metric(rate(total_orders, new_users)),
            fulfillment_rate=round_metric(
                rate(by_status[OrderStatus.COMPLETED.value], total_orders)
            ),
        )

        return OverviewReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            comparison=include_comparison,
            revenue=revenue_block,
            orders=orders_block,
            customers=customers_block,
            products=StockBands(
                **agg.count_products_by_stock_band(self.ctx.config.low_stock_threshold)
            ),
            metrics=metrics,
        )

    def get_growth(self, period: str | None) -> GrowthReport:
        """Revenue, order and new-customer growth against the previous period."""
        agg = self.ctx.aggregator
        token, current = self.ctx.window(period)
        previous = self.ctx.resolver.previous_range(current)

        return GrowthReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            previous_start_date=previous.start,
            previous_end_date=previous.end,
            revenue=build_trend(agg.sum_revenue(previous), agg.sum_revenue(current)),
            orders=build_trend(agg.count_orders(previous), agg.count_orders(current)),
            customers=build_trend(agg.count_new_users(previous), agg.count_new_users(current)),
        )
