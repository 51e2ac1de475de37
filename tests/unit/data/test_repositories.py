"""Tests for the SQLAlchemy repositories, event store and unit of work."""
from decimal import Decimal

import pytest

from core.data.uow import create_uow
from core.domain.entities.order import DeliveryAssignment
from core.domain.entities.store import Store
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.payment_status import PaymentStatus
from core.domain.events import OrderStatusChangedEvent
from core.domain.exceptions import StaleState
from core.domain.value_objects import Money

from factories import NOW, build_order, build_payment


@pytest.mark.asyncio
async def test_order_round_trip_keeps_money_and_delivery(test_session_factory):
    order = build_order(quantity=2, unit_price="4.25")
    order.status = OrderStatus.OUT_FOR_DELIVERY
    order.assign_courier(
        DeliveryAssignment(
            courier_id="courier-1",
            assigned_at=NOW,
            distance_km=Decimal("3.5"),
            earnings=Money(Decimal("4.25")),
        )
    )

    async with create_uow(test_session_factory) as uow:
        await uow.orders.add(order)
        await uow.commit()

    async with create_uow(test_session_factory) as uow:
        loaded = await uow.orders.get(order.order_id)

    assert loaded.total == Money(Decimal("8.50"))
    assert loaded.items[0].quantity == 2
    assert loaded.created_at == NOW
    assert loaded.courier_id == "courier-1"
    assert loaded.delivery.earnings == Money(Decimal("4.25"))


@pytest.mark.asyncio
async def test_order_update_with_old_version_is_stale(test_session_factory):
    order = build_order()
    async with create_uow(test_session_factory) as uow:
        await uow.orders.add(order)
        await uow.commit()

    async with create_uow(test_session_factory) as uow:
        first = await uow.orders.get(order.order_id)
    async with create_uow(test_session_factory) as uow:
        second = await uow.orders.get(order.order_id)

    first.change_status(OrderStatus.ACCEPTED, NOW)
    async with create_uow(test_session_factory) as uow:
        await uow.orders.update(first)
        await uow.commit()

    second.change_status(OrderStatus.CANCELLED, NOW)
    with pytest.raises(StaleState):
        async with create_uow(test_session_factory) as uow:
            await uow.orders.update(second)
            await uow.commit()

    async with create_uow(test_session_factory) as uow:
        stored = await uow.orders.get(order.order_id)
    assert stored.status == OrderStatus.ACCEPTED
    assert stored.version == 1


@pytest.mark.asyncio
async def test_payment_compare_and_set(test_session_factory):
    order = build_order()
    payment = build_payment(order)
    async with create_uow(test_session_factory) as uow:
        await uow.orders.add(order)
        await uow.payments.add(payment)
        await uow.commit()

    payment.complete("txn_1_abcdefghi", NOW)
    async with create_uow(test_session_factory) as uow:
        assert await uow.payments.update(payment, PaymentStatus.PENDING) is True
        await uow.commit()

    # A second writer still believing the payment is PENDING loses
    async with create_uow(test_session_factory) as uow:
        stale = await uow.payments.get(payment.payment_id)
    stale.version = 0
    stale.status = PaymentStatus.FAILED
    async with create_uow(test_session_factory) as uow:
        assert await uow.payments.update(stale, PaymentStatus.PENDING) is False

    async with create_uow(test_session_factory) as uow:
        stored = await uow.payments.get_by_order(order.order_id)
    assert stored.status == PaymentStatus.COMPLETED
    assert stored.transaction_id == "txn_1_abcdefghi"


@pytest.mark.asyncio
async def test_list_payments_by_status(test_session_factory):
    pending = build_payment()
    failed = build_payment(status=PaymentStatus.FAILED)
    async with create_uow(test_session_factory) as uow:
        await uow.payments.add(pending)
        await uow.payments.add(failed)
        await uow.commit()

    async with create_uow(test_session_factory) as uow:
        only_failed = await uow.payments.list_by_store("store-1", statuses=[PaymentStatus.FAILED])

    assert [p.payment_id for p in only_failed] == [failed.payment_id]


@pytest.mark.asyncio
async def test_store_counter_persists(test_session_factory):
    store = Store.create("Corner Deli", created_at=NOW)
    async with create_uow(test_session_factory) as uow:
        await uow.stores.add(store)
        await uow.commit()

    async with create_uow(test_session_factory) as uow:
        loaded = await uow.stores.get(store.store_id)
        loaded.allocate_order_number()
        await uow.stores.update(loaded)
        await uow.commit()

    async with create_uow(test_session_factory) as uow:
        again = await uow.stores.get(store.store_id)
    assert str(again.allocate_order_number()) == "#1002"


@pytest.mark.asyncio
async def test_commit_appends_and_publishes_tracked_events(
    test_session_factory, event_bus, published_events
):
    order = build_order()
    async with create_uow(test_session_factory) as uow:
        await uow.orders.add(order)
        await uow.commit()

    async with create_uow(test_session_factory, event_bus) as uow:
        order.change_status(OrderStatus.ACCEPTED, NOW, role="KITCHEN")
        await uow.orders.update(order)
        uow.track(order)
        await uow.commit()
        execution_id = str(uow.execution_id)

    assert order.get_domain_events() == []
    (published,) = published_events
    assert published.execution_id == execution_id

    async with create_uow(test_session_factory) as uow:
        history = await uow.events.get_events(
            order.order_id, event_type=OrderStatusChangedEvent.__name__
        )
    assert [(e.previous_status, e.new_status) for e in history] == [("PENDING", "ACCEPTED")]


@pytest.mark.asyncio
async def test_rollback_on_error_discards_writes(test_session_factory):
    order = build_order()

    with pytest.raises(RuntimeError):
        async with create_uow(test_session_factory) as uow:
            await uow.orders.add(order)
            raise RuntimeError("boom")

    async with create_uow(test_session_factory) as uow:
        assert await uow.orders.get(order.order_id) is None
