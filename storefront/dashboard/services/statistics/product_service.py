"""Product, inventory and category statistics service."""

import uuid

from storefront.core.constants import (
    MIN_RECOMMENDED_RESTOCK,
    RESTOCK_MULTIPLIER,
    UNCATEGORIZED_LABEL,
)
from storefront.dashboard.schemas.dashboard_statistics import (
    CategoryCount,
    CategoryPerformance,
    CategoryPerformanceReport,
    LowStockProduct,
    LowStockReport,
    ProductReport,
    ProductStatistic,
    ProductSummary,
    StockBands,
    TopProductsReport,
)
from storefront.dashboard.services.statistics.aggregator import ProductSales
from storefront.dashboard.services.statistics.base import discounted_price, rate, round_metric
from storefront.dashboard.services.statistics.context import StatisticsContext

# Ranking metric -> aggregator sort key
TOP_PRODUCT_METRICS: dict[str, str] = {
    "revenue": "revenue",
    "quantity": "sales",
    "views": "views",
}
DEFAULT_TOP_PRODUCT_METRIC = "revenue"


def recommended_restock(stock_quantity: int) -> int:
    return max(MIN_RECOMMENDED_RESTOCK, stock_quantity * RESTOCK_MULTIPLIER)


def _product_statistic(row: ProductSales) -> ProductStatistic:
    product = row.product
    return ProductStatistic(
        id=str(product.id),
        name=product.name,
        category=row.category_name or UNCATEGORIZED_LABEL,
        price=round_metric(product.price),
        final_price=round_metric(discounted_price(product.price, product.discount_percent)),
        stock_quantity=product.stock_quantity,
        units_sold=row.units_sold,
        revenue=round_metric(row.revenue),
        view_count=product.view_count,
        image_url=product.image_url,
    )


class ProductStatisticsService:
    """Service for product performance, inventory and category statistics."""

    def __init__(self, ctx: StatisticsContext):
        self.ctx = ctx

    def get_report(
        self,
        period: str | None,
        category_id: uuid.UUID | None = None,
        sort: str = "revenue",
        limit: int = 20,
    ) -> ProductReport:
        """Get product analytics for a period.

        Summary, inventory and category distribution cover the whole catalog;
        ``category_id`` narrows the product list only.
        """
        agg = self.ctx.aggregator
        token, current = self.ctx.window(period)

        total_views = agg.total_product_views()
        units_sold = agg.units_sold(current)
        bands = agg.count_products_by_stock_band(self.ctx.config.low_stock_threshold)

        return ProductReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            summary=ProductSummary(
                total_products=bands["total"],
                total_views=total_views,
                total_sales=units_sold,
                average_conversion_rate=round_metric(rate(units_sold, total_views)),
            ),
            top_products=[
                _product_statistic(row)
                for row in agg.product_sales(current, sort=sort, limit=limit, category_id=category_id)
            ],
            inventory=StockBands(**bands),
            category_distribution=[
                CategoryCount(category=name or UNCATEGORIZED_LABEL, product_count=count)
                for name, count in agg.category_distribution()
            ],
        )

    def get_top_products(
        self, period: str | None, limit: int = 10, metric: str = DEFAULT_TOP_PRODUCT_METRIC
    ) -> TopProductsReport:
        """Best products by revenue, quantity sold or views.

        Unknown metrics rank by revenue.
        """
        if metric not in TOP_PRODUCT_METRICS:
            metric = DEFAULT_TOP_PRODUCT_METRIC
        token, current = self.ctx.window(period)
        rows = self.ctx.aggregator.product_sales(
            current, sort=TOP_PRODUCT_METRICS[metric], limit=limit
        )
        return TopProductsReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            metric=metric,
            products=[_product_statistic(row) for row in rows],
        )

    def get_low_stock(
        self, threshold: int | None = None, category_id: uuid.UUID | None = None
    ) -> LowStockReport:
        if threshold is None:
            threshold = self.ctx.config.low_stock_threshold
        products = [
            LowStockProduct(
                id=str(product.id),
                name=product.name,
                category=category_name or UNCATEGORIZED_LABEL,
                stock_quantity=product.stock_quantity,
                price=round_metric(product.price),
                recommended_restock=recommended_restock(product.stock_quantity),
            )
            for product, category_name in self.ctx.aggregator.low_stock_products(
                threshold, category_id
            )
        ]
        return LowStockReport(threshold=threshold, count=len(products), products=products)

    def get_category_performance(self, period: str | None) -> CategoryPerformanceReport:
        """Per-category catalog size, units sold, revenue and average price."""
        token, current = self.ctx.window(period)
        return CategoryPerformanceReport(
            period=token,
            start_date=current.start,
            end_date=current.end,
            categories=[
                CategoryPerformance(
                    id=str(row.category.id),
                    name=row.category.name,
                    slug=row.category.slug,
                    product_count=row.product_count,
                    units_sold=row.units_sold,
                    revenue=round_metric(row.revenue),
                    average_price=round_metric(row.average_price),
                )
                for row in self.ctx.aggregator.category_sales(current)
            ],
        )
