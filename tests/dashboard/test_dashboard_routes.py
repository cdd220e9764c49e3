"""API tests for the dashboard statistics endpoints."""

import json
from datetime import UTC, datetime
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from storefront.dashboard.routes.dashboard_statistics import get_statistics_service
from storefront.dashboard.services.statistics_service import StatisticsService
from storefront.orders.models import OrderStatus
from tests.utils.factories import create_order_factory, create_product_factory, create_user_factory
from tests.utils.helpers import (
    access_token_for,
    assert_envelope_error,
    assert_envelope_success,
    set_access_token_cookie,
)

BASE = "/api/v1/dashboard"
IN_OCTOBER = datetime(2026, 10, 5, 12, 0, tzinfo=UTC)


class TestAuthentication:
    async def test_requires_login(self, test_client):
        response = await test_client.get(f"{BASE}/overview")

        assert response.status_code == 401
        assert_envelope_error(response.json(), "UNAUTHORIZED")

    async def test_rejects_invalid_token(self, test_client):
        set_access_token_cookie(test_client, "not-a-jwt")

        response = await test_client.get(f"{BASE}/overview")

        assert response.status_code == 401

    async def test_rejects_inactive_user(self, db_session, test_client):
        inactive = create_user_factory(db_session, is_active=False)
        set_access_token_cookie(test_client, access_token_for(inactive))

        response = await test_client.get(f"{BASE}/overview")

        assert response.status_code == 403
        assert_envelope_error(response.json(), "FORBIDDEN")

    async def test_admin_only_endpoints(self, customer_client):
        for method, path in [
            ("GET", "/revenue"),
            ("GET", "/customers"),
            ("POST", "/clear-cache"),
        ]:
            response = await customer_client.request(method, f"{BASE}{path}")
            assert response.status_code == 403, path
            assert_envelope_error(response.json(), "FORBIDDEN")


class TestOverview:
    async def test_returns_report_in_envelope(self, db_session, customer_client):
        create_order_factory(db_session, "120.00", created_at=IN_OCTOBER)

        response = await customer_client.get(f"{BASE}/overview", params={"period": "month"})

        assert response.status_code == 200
        data = response.json()
        assert_envelope_success(data, cached=False)
        assert data["message"] == "Dashboard overview retrieved successfully"
        assert data["data"]["period"] == "month"
        assert data["data"]["revenue"]["total"] == 120.0
        assert set(data["data"]["orders"]["by_status"]) == {
            "pending",
            "processing",
            "shipped",
            "completed",
            "cancelled",
        }

    async def test_second_request_is_served_from_cache(self, customer_client, fake_redis):
        first = await customer_client.get(f"{BASE}/overview")
        second = await customer_client.get(f"{BASE}/overview")

        assert first.json()["meta"]["cached"] is False
        assert second.json()["meta"]["cached"] is True
        assert second.json()["data"] == first.json()["data"]
        assert "dashboard:overview:month:2026-10-01:2026-10-31:compare" in fake_redis.store

    async def test_cached_report_expires_with_its_period(
        self, db_session, test_app, customer_client, stats_config
    ):
        now = {"value": datetime(2026, 10, 31, 23, 59, tzinfo=UTC)}
        service = StatisticsService(db_session, stats_config, clock=lambda: now["value"])
        test_app.dependency_overrides[get_statistics_service] = lambda: service
        create_order_factory(db_session, "120.00", created_at=IN_OCTOBER)

        october = await customer_client.get(f"{BASE}/overview", params={"period": "month"})
        now["value"] = datetime(2026, 11, 1, 0, 1, tzinfo=UTC)
        november = await customer_client.get(f"{BASE}/overview", params={"period": "month"})

        assert october.json()["data"]["revenue"]["total"] == 120.0
        assert november.json()["meta"]["cached"] is False
        assert november.json()["data"]["start_date"].startswith("2026-11-01")
        assert november.json()["data"]["revenue"]["total"] == 0.0

    async def test_cache_can_be_bypassed(self, customer_client, fake_redis):
        await customer_client.get(f"{BASE}/overview")

        response = await customer_client.get(f"{BASE}/overview", params={"cache": "false"})

        assert response.json()["meta"]["cached"] is False

    async def test_unknown_period_falls_back(self, customer_client, fake_redis):
        response = await customer_client.get(
            f"{BASE}/overview", params={"period": "decade", "compare": "false"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["period"] == "month"
        assert response.json()["data"]["revenue"]["change_percent"] is None
        assert "dashboard:overview:month:2026-10-01:2026-10-31:simple" in fake_redis.store

    async def test_failure_returns_generic_error(self, customer_client, stats_service):
        failure = OperationalError("SELECT 1", {}, Exception("connection refused on 10.0.0.7"))
        with patch.object(stats_service, "get_overview", side_effect=failure):
            response = await customer_client.get(f"{BASE}/overview")

        assert response.status_code == 500
        data = response.json()
        assert_envelope_error(data, "STATISTICS_UNAVAILABLE")
        assert data["message"] == "Failed to retrieve dashboard overview"
        assert "10.0.0.7" not in json.dumps(data)


class TestRevenue:
    async def test_admin_gets_report(self, db_session, admin_client, fake_redis):
        create_order_factory(db_session, "80.00", created_at=datetime(2026, 10, 3, tzinfo=UTC))

        response = await admin_client.get(
            f"{BASE}/revenue",
            params={"start_date": "2026-10-01", "end_date": "2026-10-10", "group_by": "day"},
        )

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["days"] == 10
        assert report["total_revenue"] == 80.0
        assert report["series"] == [{"key": "2026-10-03", "revenue": 80.0, "order_count": 1}]
        assert report["forecast"] is None
        assert "dashboard:revenue:2026-10-01:2026-10-10:day:plain" in fake_redis.store

    async def test_report_goes_through_facade(self, admin_client, stats_service):
        with patch.object(
            stats_service, "get_revenue_report", wraps=stats_service.get_revenue_report
        ) as get_revenue_report:
            response = await admin_client.get(
                f"{BASE}/revenue", params={"start_date": "2026-10-01", "end_date": "2026-10-10"}
            )

        assert response.status_code == 200
        get_revenue_report.assert_called_once()
        date_range = get_revenue_report.call_args.kwargs["date_range"]
        assert date_range.start == datetime(2026, 10, 1, tzinfo=UTC)
        assert date_range.days == 10

    async def test_forecast_placeholder(self, admin_client):
        response = await admin_client.get(f"{BASE}/revenue", params={"include_forecast": "true"})

        forecast = response.json()["data"]["forecast"]
        assert forecast == {
            "implemented": False,
            "next_week": None,
            "next_month": None,
            "confidence": 0.85,
        }

    async def test_invalid_group_by(self, admin_client):
        response = await admin_client.get(f"{BASE}/revenue", params={"group_by": "week"})

        assert response.status_code == 422
        data = response.json()
        assert_envelope_error(data, "VALIDATION_ERROR")
        assert "group_by" in data["errors"]["fields"]

    async def test_malformed_date(self, admin_client):
        response = await admin_client.get(f"{BASE}/revenue", params={"start_date": "yesterday"})

        assert response.status_code == 422
        assert "start_date" in response.json()["errors"]["fields"]

    async def test_end_before_start(self, admin_client):
        response = await admin_client.get(
            f"{BASE}/revenue", params={"start_date": "2026-10-10", "end_date": "2026-10-01"}
        )

        assert response.status_code == 400
        data = response.json()
        assert_envelope_error(data, "VALIDATION_ERROR")
        assert data["errors"]["field"] == "end_date"


class TestOrders:
    async def test_status_filter_and_cache_key(self, db_session, customer_client, fake_redis):
        create_order_factory(db_session, status=OrderStatus.COMPLETED, created_at=IN_OCTOBER)
        create_order_factory(db_session, status=OrderStatus.CANCELLED, created_at=IN_OCTOBER)

        response = await customer_client.get(
            f"{BASE}/orders", params={"status": "cancelled", "include_details": "true"}
        )

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["total_orders"] == 1
        assert report["cancellation_rate"] == 50.0
        assert len(report["details"]["peak_hours"]) == 24
        assert "dashboard:orders:month:2026-10-01:2026-10-31:cancelled:details" in fake_redis.store

    async def test_unknown_status_is_rejected(self, customer_client):
        response = await customer_client.get(f"{BASE}/orders", params={"status": "lost"})

        assert response.status_code == 422

    async def test_recent_orders(self, db_session, customer_client):
        create_order_factory(db_session, "15.00", created_at=IN_OCTOBER)

        response = await customer_client.get(f"{BASE}/recent-orders", params={"limit": 5})

        assert response.status_code == 200
        [order] = response.json()["data"]
        assert order["customer_name"] == "Guest"
        assert order["customer_email"] == "N/A"
        assert order["total"] == 15.0


class TestProducts:
    async def test_product_report(self, db_session, customer_client):
        create_product_factory(db_session, "Lamp", stock_quantity=3, view_count=20)

        response = await customer_client.get(f"{BASE}/products", params={"sort": "stock"})

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["summary"]["total_products"] == 1
        assert report["top_products"][0]["category"] == "Uncategorized"
        assert response.json()["meta"]["cached"] is False

    async def test_limit_bounds(self, customer_client):
        too_small = await customer_client.get(f"{BASE}/products", params={"limit": 0})
        too_large = await customer_client.get(f"{BASE}/top-products", params={"limit": 101})

        assert too_small.status_code == 422
        assert too_large.status_code == 422

    async def test_top_products(self, db_session, customer_client):
        create_product_factory(db_session, "Lamp", view_count=20)

        response = await customer_client.get(
            f"{BASE}/top-products", params={"metric": "views", "limit": 3}
        )

        assert response.status_code == 200
        assert response.json()["data"]["metric"] == "views"
        assert response.json()["data"]["products"][0]["name"] == "Lamp"

    async def test_low_stock(self, db_session, customer_client):
        create_product_factory(db_session, "Lamp", stock_quantity=2)
        create_product_factory(db_session, "Desk", stock_quantity=0)

        response = await customer_client.get(f"{BASE}/low-stock", params={"threshold": 5})

        report = response.json()["data"]
        assert report["threshold"] == 5
        assert [item["name"] for item in report["products"]] == ["Lamp"]
        assert report["products"][0]["recommended_restock"] == 50

    async def test_categories(self, customer_client):
        response = await customer_client.get(f"{BASE}/categories")

        assert response.status_code == 200
        assert response.json()["data"]["categories"] == []


class TestCustomersAndGrowth:
    async def test_customer_report(self, admin_client):
        response = await admin_client.get(f"{BASE}/customers", params={"period": "year"})

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["period"] == "year"
        assert report["lifetime_value"] == {
            "implemented": False,
            "value": None,
            "note": "Customer lifetime value model is not defined",
        }

    async def test_growth(self, db_session, customer_client):
        create_order_factory(db_session, "1200.00", created_at=IN_OCTOBER)
        create_order_factory(db_session, "1000.00", created_at=datetime(2026, 9, 20, tzinfo=UTC))

        response = await customer_client.get(f"{BASE}/growth")

        assert response.status_code == 200
        revenue = response.json()["data"]["revenue"]
        assert revenue == {"rate": 20.0, "current": 1200.0, "previous": 1000.0, "trend": "up"}


class TestClearCache:
    async def test_admin_clears_cached_reports(self, admin_client, fake_redis):
        await admin_client.get(f"{BASE}/overview")
        await admin_client.get(f"{BASE}/orders")
        await fake_redis.setex("session:keep", 60, "x")

        response = await admin_client.post(f"{BASE}/clear-cache")

        assert response.status_code == 200
        assert_envelope_success(response.json(), cached=False)
        assert response.json()["data"] == {"cleared_keys": 2}
        assert list(fake_redis.store) == ["session:keep"]

        again = await admin_client.post(f"{BASE}/clear-cache")
        assert again.json()["data"] == {"cleared_keys": 0}


async def test_health_needs_no_login(test_client):
    response = await test_client.get(f"{BASE}/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "healthy"
    assert data["redis"] == "not_configured"


async def test_request_id_is_echoed(test_client):
    response = await test_client.get(f"{BASE}/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


async def test_request_id_is_generated(test_client):
    response = await test_client.get(f"{BASE}/health")

    assert len(response.headers["X-Request-ID"]) == 32
