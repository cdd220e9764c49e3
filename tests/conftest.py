from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.auth.models.user import ROLE_ADMIN, ROLE_CUSTOMER  # noqa: E402
from storefront.dashboard.routes.dashboard_statistics import (  # noqa: E402
    get_report_cache,
    get_statistics_service,
)
from storefront.dashboard.services.report_cache import ReportCache  # noqa: E402
from storefront.dashboard.services.statistics import MetricAggregator, StatisticsConfig  # noqa: E402
from storefront.dashboard.services.statistics_service import StatisticsService  # noqa: E402
from storefront.db.base import Base  # noqa: E402
from storefront.db.session import get_db  # noqa: E402
from storefront.main import app  # noqa: E402
from tests.utils.factories import create_user_factory  # noqa: E402
from tests.utils.fake_redis import FakeRedis  # noqa: E402
from tests.utils.helpers import access_token_for, fixed_clock  # noqa: E402

# Long before any reporting window used in the tests
REGISTERED_AT = datetime(2024, 1, 10, 9, 0, tzinfo=UTC)


@pytest.fixture
def memory_engine():
    """In-memory SQLite shared by every thread of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(memory_engine):
    session_factory = sessionmaker(bind=memory_engine, autocommit=False, autoflush=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def aggregator(db_session):
    return MetricAggregator(db_session)


@pytest.fixture
def stats_config():
    return StatisticsConfig()


@pytest.fixture
def stats_service(db_session, stats_config):
    return StatisticsService(db_session, stats_config, clock=fixed_clock)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def report_cache(fake_redis, stats_config):
    return ReportCache(fake_redis, ttl_seconds=stats_config.cache_ttl_seconds)


@pytest.fixture
async def test_app(db_session, stats_service, report_cache):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_statistics_service] = lambda: stats_service
    app.dependency_overrides[get_report_cache] = lambda: report_cache

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_customer(db_session):
    return create_user_factory(
        db_session, email="customer@example.com", role=ROLE_CUSTOMER, created_at=REGISTERED_AT
    )


@pytest.fixture
def test_admin(db_session):
    return create_user_factory(
        db_session, email="admin@example.com", role=ROLE_ADMIN, created_at=REGISTERED_AT
    )


@pytest.fixture
async def customer_client(test_app, test_customer):
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        cookies={"access_token": access_token_for(test_customer)},
    ) as client:
        yield client


@pytest.fixture
async def admin_client(test_app, test_admin):
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        cookies={"access_token": access_token_for(test_admin)},
    ) as client:
        yield client
