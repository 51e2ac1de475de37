"""Tests for InMemoryEventBus."""

import pytest

from core.domain.events import OrderCreatedEvent, OrderStatusChangedEvent
from core.infrastructure.event_bus import InMemoryEventBus


@pytest.mark.asyncio
async def test_event_bus_subscribe_and_publish():
    """Test subscribing and publishing events."""
    bus = InMemoryEventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(handler)
    event = OrderCreatedEvent(order_id="o-1", store_id="s-1", order_number="#1001")
    await bus.publish(event)

    assert received == [event]
    assert event.aggregate_id == "o-1"
    assert event.aggregate_type == "Order"


@pytest.mark.asyncio
async def test_event_bus_filters_by_type():
    bus = InMemoryEventBus()
    status_changes = []

    def handler(event):
        status_changes.append(event)

    bus.subscribe(handler, event_type="OrderStatusChangedEvent")
    await bus.publish_all([
        OrderCreatedEvent(order_id="o-1"),
        OrderStatusChangedEvent(order_id="o-1", previous_status="PENDING", new_status="ACCEPTED"),
    ])

    assert [e.event_type for e in status_changes] == ["OrderStatusChangedEvent"]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_stop_others():
    bus = InMemoryEventBus()
    received = []

    async def broken(event):
        raise RuntimeError("boom")

    async def healthy(event):
        received.append(event)

    bus.subscribe(broken)
    bus.subscribe(healthy)
    await bus.publish(OrderCreatedEvent(order_id="o-1"))

    assert len(received) == 1


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = InMemoryEventBus()
    received = []

    def handler(event):
        received.append(event)

    bus.subscribe(handler)
    bus.unsubscribe(handler)
    await bus.publish(OrderCreatedEvent(order_id="o-1"))

    assert received == []
