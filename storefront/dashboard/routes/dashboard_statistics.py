"""Dashboard statistics routes."""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.auth.dependencies import get_current_user, require_admin
from storefront.auth.models.user import User
from storefront.core import redis as redis_module
from storefront.core.config import settings
from storefront.core.constants import DEFAULT_RANKINGS_LIMIT, DEFAULT_STATS_LIST_LIMIT, MAX_PAGE_SIZE
from storefront.core.datetime_utils import utc_timestamp
from storefront.core.exceptions import StatisticsUnavailableError
from storefront.core.rate_limit import limiter
from storefront.core.schemas import ApiResponse, success_response
from storefront.dashboard.schemas.dashboard_statistics import (
    CacheClearResult,
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
from storefront.dashboard.services.report_cache import ReportCache
from storefront.dashboard.services.statistics import StatisticsConfig
from storefront.dashboard.services.statistics_service import StatisticsService
from storefront.db.session import get_db
from storefront.orders.models.order import OrderStatus

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RATE_LIMIT = settings.DASHBOARD_RATE_LIMIT


def get_statistics_service(db: Session = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db, StatisticsConfig.from_settings(settings))


def get_report_cache() -> ReportCache:
    return ReportCache(redis_module.redis_client, settings.STATISTICS_CACHE_TTL_SECONDS)


def window_key(service: StatisticsService, token: str) -> tuple[str, str]:
    """First and last calendar day of the period, so a cached report expires with it."""
    window = service.resolver.resolve(token)
    return window.start.date().isoformat(), window.end.date().isoformat()


@contextmanager
def report_errors(report: str, **params: Any) -> Iterator[None]:
    """Log a failed report with its request parameters and return a generic 500."""
    try:
        yield
    except (SQLAlchemyError, RedisError) as exc:
        logger.error(
            "report_failed",
            report=report,
            params={name: str(value) for name, value in params.items()},
            error=str(exc),
            exc_info=True,
        )
        raise StatisticsUnavailableError(report) from exc


@router.get("/overview", response_model=ApiResponse[OverviewReport])
@limiter.limit(RATE_LIMIT)
async def get_overview(
    request: Request,
    period: str | None = Query(None, description="today, week, month or year"),
    compare: bool = Query(True, description="Include comparison with the previous period"),
    cache: bool = Query(True, description="Serve from and store into the report cache"),
    service: StatisticsService = Depends(get_statistics_service),
    report_cache: ReportCache = Depends(get_report_cache),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    """
    Get the dashboard overview.

    Returns revenue, orders, customers, stock bands and derived metrics for
    the period. Unknown period tokens fall back to the default period.
    """
    token = service.resolver.normalize(period)
    key = report_cache.key(
        "overview", token, *window_key(service, token), "compare" if compare else "simple"
    )
    with report_errors("dashboard_overview", period=period, compare=compare):
        data, cached = await report_cache.remember(
            key, lambda: service.get_overview(token, compare), enabled=cache
        )
    return success_response(data, "Dashboard overview retrieved successfully", cached=cached)


@router.get("/revenue", response_model=ApiResponse[RevenueReport])
@limiter.limit(RATE_LIMIT)
async def get_revenue(
    request: Request,
    start_date: date | None = Query(None, description="First day (YYYY-MM-DD)"),
    end_date: date | None = Query(None, description="Last day (YYYY-MM-DD)"),
    group_by: Granularity = Query(Granularity.DAY, description="Bucket size of the series"),
    include_forecast: bool = Query(False),
    cache: bool = Query(True),
    service: StatisticsService = Depends(get_statistics_service),
    report_cache: ReportCache = Depends(get_report_cache),
    _admin: User = Depends(require_admin),
) -> ApiResponse[Any]:
    """
    Get revenue analytics for a date range (admin only).

    Defaults to the current month. Includes growth vs. the previous
    equal-length range, a sparse day or month series and revenue by category.
    """
    date_range = service.date_range(start_date, end_date)
    key = report_cache.key(
        "revenue",
        date_range.start.date().isoformat(),
        date_range.end.date().isoformat(),
        group_by.value,
        "forecast" if include_forecast else "plain",
    )
    with report_errors(
        "revenue_analytics",
        start_date=start_date,
        end_date=end_date,
        group_by=group_by.value,
        include_forecast=include_forecast,
    ):
        data, cached = await report_cache.remember(
            key,
            lambda: service.get_revenue_report(
                granularity=group_by,
                include_forecast=include_forecast,
                date_range=date_range,
            ),
            enabled=cache,
        )
    return success_response(data, "Revenue analytics retrieved successfully", cached=cached)


@router.get("/orders", response_model=ApiResponse[OrderReport])
@limiter.limit(RATE_LIMIT)
async def get_orders(
    request: Request,
    period: str | None = Query(None),
    status: OrderStatus | None = Query(None, description="Narrow total_orders to one status"),
    include_details: bool = Query(False, description="Add trends and peak hours"),
    cache: bool = Query(True),
    service: StatisticsService = Depends(get_statistics_service),
    report_cache: ReportCache = Depends(get_report_cache),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    """Get order analytics for a period."""
    token = service.resolver.normalize(period)
    key = report_cache.key(
        "orders",
        token,
        *window_key(service, token),
        status.value if status is not None else "all",
        "details" if include_details else "summary",
    )
    with report_errors(
        "order_analytics", period=period, status=status, include_details=include_details
    ):
        data, cached = await report_cache.remember(
            key, lambda: service.get_order_report(token, status, include_details), enabled=cache
        )
    return success_response(data, "Order analytics retrieved successfully", cached=cached)


@router.get("/products", response_model=ApiResponse[ProductReport])
@limiter.limit(RATE_LIMIT)
async def get_products(
    request: Request,
    period: str | None = Query(None),
    category_id: uuid.UUID | None = Query(None),
    sort: str = Query("revenue", description="sales, revenue, views or stock"),
    limit: int = Query(DEFAULT_STATS_LIST_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    service: StatisticsService = Depends(get_statistics_service),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    """Get product analytics: summary, top products, inventory and categories."""
    with report_errors(
        "product_analytics", period=period, category_id=category_id, sort=sort, limit=limit
    ):
        report = service.get_product_report(period, category_id, sort, limit)
    return success_response(report, "Product analytics retrieved successfully")


@router.get("/customers", response_model=ApiResponse[CustomerReport])
@limiter.limit(RATE_LIMIT)
async def get_customers(
    request: Request,
    period: str | None = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _admin: User = Depends(require_admin),
) -> ApiResponse[Any]:
    """Get customer analytics for a period (admin only)."""
    with report_errors("customer_analytics", period=period):
        report = service.get_customer_report(period)
    return success_response(report, "Customer analytics retrieved successfully")


@router.get("/top-products", response_model=ApiResponse[TopProductsReport])
@limiter.limit(RATE_LIMIT)
async def get_top_products(
    request: Request,
    period: str | None = Query(None),
    limit: int = Query(DEFAULT_RANKINGS_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    metric: str = Query("revenue", description="revenue, quantity or views"),
    service: StatisticsService = Depends(get_statistics_service),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    with report_errors("top_products", period=period, limit=limit, metric=metric):
        report = service.get_top_products(period, limit, metric)
    return success_response(report, "Top products retrieved successfully")


@router.get("/low-stock", response_model=ApiResponse[LowStockReport])
@limiter.limit(RATE_LIMIT)
async def get_low_stock(
    request: Request,
    threshold: int | None = Query(None, ge=0, description="Defaults to the configured threshold"),
    category_id: uuid.UUID | None = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    with report_errors("low_stock_alerts", threshold=threshold, category_id=category_id):
        report = service.get_low_stock(threshold, category_id)
    return success_response(report, "Low stock alerts retrieved successfully")


@router.get("/recent-orders", response_model=ApiResponse[list[RecentOrder]])
@limiter.limit(RATE_LIMIT)
async def get_recent_orders(
    request: Request,
    limit: int = Query(DEFAULT_RANKINGS_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    status: OrderStatus | None = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    with report_errors("recent_orders", limit=limit, status=status):
        orders = service.get_recent_orders(limit, status)
    return success_response(orders, "Recent orders retrieved successfully")


@router.get("/growth", response_model=ApiResponse[GrowthReport])
@limiter.limit(RATE_LIMIT)
async def get_growth(
    request: Request,
    period: str | None = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    with report_errors("growth_metrics", period=period):
        report = service.get_growth(period)
    return success_response(report, "Growth metrics retrieved successfully")


@router.get("/categories", response_model=ApiResponse[CategoryPerformanceReport])
@limiter.limit(RATE_LIMIT)
async def get_categories(
    request: Request,
    period: str | None = Query(None),
    service: StatisticsService = Depends(get_statistics_service),
    _user: User = Depends(get_current_user),
) -> ApiResponse[Any]:
    with report_errors("category_performance", period=period):
        report = service.get_category_performance(period)
    return success_response(report, "Category performance retrieved successfully")


@router.post("/clear-cache", response_model=ApiResponse[CacheClearResult])
@limiter.limit(RATE_LIMIT)
async def clear_cache(
    request: Request,
    report_cache: ReportCache = Depends(get_report_cache),
    admin: User = Depends(require_admin),
) -> ApiResponse[Any]:
    """Discard every cached dashboard report (admin only). Safe to repeat."""
    with report_errors("cache_clear"):
        removed = await report_cache.clear()
    logger.info("dashboard_cache_cleared_by_admin", admin_id=str(admin.id), removed=removed)
    return success_response(CacheClearResult(cleared_keys=removed), "Cache cleared successfully")


@router.get("/health")
async def health_check(db: Session = Depends(get_db)) -> dict[str, str]:
    """Liveness of the statistics backends; no authentication required."""
    redis_status = "not_configured"
    db_status = "unknown"

    if redis_module.redis_client is not None:
        try:
            await redis_module.redis_client.ping()
            redis_status = "healthy"
        except RedisError:
            redis_status = "unhealthy"

    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    overall = "healthy" if db_status == "healthy" and redis_status != "unhealthy" else "degraded"

    return {
        "status": overall,
        "database": db_status,
        "redis": redis_status,
        "timestamp": utc_timestamp(),
    }
