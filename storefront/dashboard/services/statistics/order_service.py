"""Order statistics service."""

from storefront.core.constants import GUEST_CUSTOMER_NAME, MISSING_VALUE_LABEL
from storefront.dashboard.schemas.dashboard_statistics import (
    Granularity,
    OrderDetails,
    OrderReport,
    OrderStatusBreakdown,
    Placeholder,
    RecentOrder,
)
from storefront.dashboard.services.statistics.base import rate, repeat_rate, round_metric
from storefront.dashboard.services.statistics.context import StatisticsContext
from storefront.orders.models.order import OrderStatus

FULFILLMENT_TIME_NOTE = "Orders do not record a fulfillment timestamp"
VALUE_DISTRIBUTION_NOTE = "Order value bands are not defined"


class OrderStatisticsService:
    """Service for order-related statistics."""

    def __init__(self, ctx: StatisticsContext):
        self.ctx = ctx

    def get_report(
        self,
        period: str | None,
        status: OrderStatus | None = None,
        include_details: bool = False,
    ) -> OrderReport:
        """Get order analytics for a period.

        The status filter narrows ``total_orders`` only; the breakdown and
        the fulfillment and cancellation rates always cover every order in
        the period.
        """
        agg = self.ctx.aggregator
        token, current = self.ctx.window(period)

        by_status = agg.count_orders_by_status(current)
        all_orders = sum(by_status.values())
        total_orders = by_status[status.value] if status is not None else all_orders

        details = None
        if include_details:
            granularity = Granularity.MONTH if token == "year" else Granularity.DAY
            details = OrderDetails(
                trends=self.ctx.series.order_trends(current, granularity),
                peak_hours=self.ctx.series.peak_hours(current),
            )

        return OrderReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            status_filter=status.value if status is not None else None,
            total_orders=total_orders,
            status_breakdown=OrderStatusBreakdown(**by_status),
            fulfillment_rate=round_metric(
                rate(by_status[OrderStatus.COMPLETED.value], all_orders)
            ),
            cancellation_rate=round_metric(
                rate(by_status[OrderStatus.CANCELLED.value], all_orders)
            ),
            repeat_customer_rate=round_metric(
                repeat_rate(agg.customer_order_counts(current).values())
            ),
            average_fulfillment_time=Placeholder(note=FULFILLMENT_TIME_NOTE),
            value_distribution=Placeholder(note=VALUE_DISTRIBUTION_NOTE),
            details=details,
        )

    def get_recent_orders(self, limit: int, status: OrderStatus | None = None) -> list[RecentOrder]:
        """Newest orders first; guest orders show placeholder customer fields."""
        return [
            RecentOrder(
                id=str(order.id),
                customer_name=order.user.name if order.user else GUEST_CUSTOMER_NAME,
                customer_email=order.user.email if order.user else MISSING_VALUE_LABEL,
                total=round_metric(order.total_price),
                status=order.status.value,
                item_count=len(order.items),
                created_at=order.created_at,
            )
            for order in self.ctx.aggregator.recent_orders(limit, status)
        ]
