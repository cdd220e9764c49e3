"""Customer statistics service."""

from storefront.core.constants import TOP_CUSTOMERS_LIMIT
from storefront.dashboard.schemas.dashboard_statistics import (
    CustomerReport,
    Placeholder,
    TopCustomer,
)
from storefront.dashboard.services.statistics.base import rate, repeat_rate, round_metric
from storefront.dashboard.services.statistics.context import StatisticsContext

LIFETIME_VALUE_NOTE = "Customer lifetime value model is not defined"
ACQUISITION_COST_NOTE = "Marketing spend is not tracked"
SEGMENTS_NOTE = "Customer segmentation rules are not defined"


class CustomerStatisticsService:
    """Service for customer analytics."""

    def __init__(self, ctx: StatisticsContext):
        self.ctx = ctx

    def get_report(self, period: str | None) -> CustomerReport:
        """Get customer analytics for a period.

        Retention is the share of customers who ordered in the previous
        period and ordered again in this one. Repeat rate is the share of
        this period's buyers with two or more orders.
        """
        agg = self.ctx.aggregator
        token, current = self.ctx.window(period)

        current_buyers = agg.customer_order_counts(current)
        previous_buyers = agg.customer_order_counts(self.ctx.resolver.previous_range(current))
        retained = len(previous_buyers.keys() & current_buyers.keys())

        return CustomerReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            total_customers=agg.count_users(),
            new_customers=agg.count_new_users(current),
            active_customers=agg.count_active_users(current),
            retention_rate=round_metric(rate(retained, len(previous_buyers))),
            repeat_customer_rate=round_metric(repeat_rate(current_buyers.values())),
            top_customers=[
                TopCustomer(
                    id=str(row.user.id),
                    name=row.user.name,
                    email=row.user.email,
                    order_count=row.order_count,
                    total_spent=round_metric(row.revenue),
                )
                for row in agg.top_customers(current, TOP_CUSTOMERS_LIMIT)
            ],
            activity=self.ctx.series.customer_activity(current),
            lifetime_value=Placeholder(note=LIFETIME_VALUE_NOTE),
            acquisition_cost=Placeholder(note=ACQUISITION_COST_NOTE),
            segments=Placeholder(note=SEGMENTS_NOTE),
        )
