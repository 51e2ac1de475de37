"""Shared fixtures: in-memory database, fixed clock and wired application services."""

import random

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from core.application.dtos import CreateStoreRequest
from core.application.services import (
    KitchenApplicationService,
    LockRegistry,
    OrderApplicationService,
    PaymentApplicationService,
    ReportingApplicationService,
)
from core.data.models import Base
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.settlement.mock_settlement_gateway import MockSettlementGateway
from core.infrastructure.clock import FixedClock
from core.infrastructure.event_bus import InMemoryEventBus
from core.settings import FulfillmentSettings

from factories import NOW, make_order_request


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create test database engine.

    File-backed so concurrent sessions each get their own connection.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orderflow.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Create test session factory."""
    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def published_events(event_bus) -> list:
    """Events delivered by the test event bus, in publication order."""
    received = []
    event_bus.subscribe(received.append)
    return received


@pytest.fixture
def notifications() -> MockNotificationService:
    return MockNotificationService()


@pytest.fixture
def gateway() -> MockSettlementGateway:
    """Always approves unless a test declines specific payments."""
    return MockSettlementGateway(success_rate=1.0, rng=random.Random(7))


@pytest.fixture
def locks() -> LockRegistry:
    return LockRegistry()


@pytest.fixture
def fulfillment_settings() -> FulfillmentSettings:
    return FulfillmentSettings(
        delivery_buffer_minutes=15,
        estimate_on_create=False,
        stale_pending_minutes=30,
    )


@pytest.fixture
def order_service(test_session_factory, clock, locks, event_bus, fulfillment_settings):
    return OrderApplicationService(
        session_factory=test_session_factory,
        clock=clock,
        locks=locks,
        event_bus=event_bus,
        settings=fulfillment_settings,
    )


@pytest.fixture
def kitchen_service(test_session_factory, clock, order_service):
    return KitchenApplicationService(
        test_session_factory, clock, sla_tracker=order_service.sla_tracker
    )


@pytest.fixture
def payment_service(test_session_factory, gateway, notifications, clock, locks, event_bus, order_service):
    return PaymentApplicationService(
        test_session_factory,
        gateway,
        notifications,
        clock,
        state_machine=order_service.state_machine,
        locks=locks,
        event_bus=event_bus,
        settlement_timeout=0.5,
        rng=random.Random(11),
    )


@pytest.fixture
def reporting_service(test_session_factory, clock):
    return ReportingApplicationService(test_session_factory, clock)


@pytest_asyncio.fixture
async def store(order_service):
    return await order_service.create_store(
        CreateStoreRequest(name="Downtown Kitchen", operating_hours=10)
    )


@pytest.fixture
def place_order(order_service, store):
    """Factory placing an order in the default store."""

    async def _place(customer_id: str = "cust-1", **overrides):
        return await order_service.create_order(
            make_order_request(store.store_id, customer_id, **overrides)
        )

    return _place
