"""Report schemas for the storefront dashboard."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from storefront.core.datetime_utils import UTCDatetime


class Granularity(str, Enum):
    """Bucket size for time series."""

    DAY = "day"
    MONTH = "month"


# ============ Shared Models ============


class ReportWindow(BaseModel):
    """Resolved reporting window, in the configured statistics time zone."""

    period: str = Field(description="Period token actually used (after fallback)")
    start_date: datetime
    end_date: datetime


class Placeholder(BaseModel):
    """A metric the dashboard lists but does not compute yet."""

    implemented: bool = False
    value: None = None
    note: str


class ForecastPlaceholder(BaseModel):
    """Revenue forecast slot; no forecasting method is defined."""

    implemented: bool = False
    next_week: float | None = None
    next_month: float | None = None
    confidence: float


class TrendMetric(BaseModel):
    """A metric compared with the equal-length previous period."""

    rate: float = Field(description="Growth percentage vs. previous period")
    current: float
    previous: float
    trend: str = Field(description="up, down or stable")


class CountBucket(BaseModel):
    key: str = Field(description="YYYY-MM-DD or YYYY-MM")
    count: int


class StockBands(BaseModel):
    """Product counts per stock band; the three bands sum to total."""

    total: int
    in_stock: int
    low_stock: int
    out_of_stock: int


class OrderStatusBreakdown(BaseModel):
    """Order count for every known status (0 when absent)."""

    pending: int = 0
    processing: int = 0
    shipped: int = 0
    completed: int = 0
    cancelled: int = 0


# ============ Overview ============


class RevenueOverview(BaseModel):
    total: float
    previous: float | None = None
    change_percent: float | None = None
    trend: str | None = None


class OrdersOverview(BaseModel):
    total: int
    by_status: OrderStatusBreakdown
    previous: int | None = None
    change_percent: float | None = None


class CustomersOverview(BaseModel):
    total: int = Field(description="All registered customers")
    new: int = Field(description="Customers registered in the period")
    active: int = Field(description="Customers with at least one order in the period")
    previous_new: int | None = None
    change_percent: float | None = None


class OverviewMetrics(BaseModel):
    average_order_value: float
    conversion_rate: float = Field(description="Orders per new signup of any role, as a percentage")
    fulfillment_rate: float = Field(description="Completed orders as a percentage of all orders")


class OverviewReport(ReportWindow):
    """Dashboard overview for one period."""

    comparison: bool
    revenue: RevenueOverview
    orders: OrdersOverview
    customers: CustomersOverview
    products: StockBands
    metrics: OverviewMetrics


# ============ Revenue ============


class RevenueBucket(BaseModel):
    key: str = Field(description="YYYY-MM-DD or YYYY-MM")
    revenue: float
    order_count: int


class CategoryRevenue(BaseModel):
    category: str
    revenue: float


class RevenueReport(BaseModel):
    """Revenue analytics for an explicit date range."""

    start_date: datetime
    end_date: datetime
    group_by: Granularity
    days: int = Field(description="Calendar days in the range, both ends included")
    total_revenue: float
    previous_revenue: float
    growth_rate: float
    trend: str
    order_count: int
    average_order_value: float
    average_daily_revenue: float
    series: list[RevenueBucket] = Field(description="Sparse, ascending by key")
    by_category: list[CategoryRevenue]
    by_payment_method: Placeholder
    forecast: ForecastPlaceholder | None = None


# ============ Orders ============


class HourCount(BaseModel):
    hour: int = Field(ge=0, le=23)
    count: int


class OrderDetails(BaseModel):
    trends: list[CountBucket]
    peak_hours: list[HourCount] = Field(description="24 entries, hour 0 to 23")


class OrderReport(ReportWindow):
    """Order analytics for one period."""

    status_filter: str | None = None
    total_orders: int = Field(description="Orders in the period, narrowed by the status filter")
    status_breakdown: OrderStatusBreakdown
    fulfillment_rate: float
    cancellation_rate: float
    repeat_customer_rate: float
    average_fulfillment_time: Placeholder
    value_distribution: Placeholder
    details: OrderDetails | None = None


class RecentOrder(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    total: float
    status: str
    item_count: int
    created_at: UTCDatetime


# ============ Products ============


class ProductStatistic(BaseModel):
    id: str
    name: str
    category: str
    price: float
    final_price: float = Field(description="Price after discount")
    stock_quantity: int
    units_sold: int
    revenue: float
    view_count: int
    image_url: str | None = None


class ProductSummary(BaseModel):
    total_products: int
    total_views: int
    total_sales: int = Field(description="Units sold in the period, cancelled orders excluded")
    average_conversion_rate: float = Field(description="Units sold per product view, percent")


class CategoryCount(BaseModel):
    category: str
    product_count: int


class ProductReport(ReportWindow):
    summary: ProductSummary
    top_products: list[ProductStatistic]
    inventory: StockBands
    category_distribution: list[CategoryCount]


class TopProductsReport(ReportWindow):
    metric: str
    products: list[ProductStatistic]


class LowStockProduct(BaseModel):
    id: str
    name: str
    category: str
    stock_quantity: int
    price: float
    recommended_restock: int
    status: str = "low_stock"


class LowStockReport(BaseModel):
    threshold: int
    count: int
    products: list[LowStockProduct]


class CategoryPerformance(BaseModel):
    id: str
    name: str
    slug: str
    product_count: int
    units_sold: int
    revenue: float
    average_price: float


class CategoryPerformanceReport(ReportWindow):
    categories: list[CategoryPerformance]


# ============ Customers ============


class TopCustomer(BaseModel):
    id: str
    name: str
    email: str
    order_count: int
    total_spent: float


class CustomerReport(ReportWindow):
    total_customers: int
    new_customers: int
    active_customers: int
    retention_rate: float = Field(
        description="Previous-period buyers who bought again this period, percent"
    )
    repeat_customer_rate: float = Field(description="Buyers with 2+ orders this period, percent")
    top_customers: list[TopCustomer]
    activity: list[CountBucket] = Field(description="New customers per day, sparse")
    lifetime_value: Placeholder
    acquisition_cost: Placeholder
    segments: Placeholder


# ============ Growth ============


class GrowthReport(ReportWindow):
    previous_start_date: datetime
    previous_end_date: datetime
    revenue: TrendMetric
    orders: TrendMetric
    customers: TrendMetric


# ============ Maintenance ============


class CacheClearResult(BaseModel):
    cleared_keys: int
