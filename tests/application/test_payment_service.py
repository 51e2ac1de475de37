"""
Tests for PaymentApplicationService batch operations.
"""
import asyncio
import random
import re
from datetime import timedelta
from decimal import Decimal

import pytest

from core.application.dtos import TransitionRequest
from core.application.interfaces import ISettlementGateway
from core.application.services import PaymentApplicationService
from core.data.repositories import SqlAlchemyOrderRepository, SqlAlchemyPaymentRepository
from core.data.uow import create_uow
from core.domain.entities.payment import REFUND_SUFFIX
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.payment_status import PaymentStatus
from core.domain.enums.role import Role
from core.domain.exceptions import StaleState, UnknownStore
from core.domain.services.state_machine import Actor
from core.infrastructure.adapters.settlement.mock_settlement_gateway import MockSettlementGateway

from factories import NOW

TRANSACTION_ID = re.compile(r"^txn_\d+_[0-9a-z]{9}$")


class ExplodingGateway(ISettlementGateway):
    async def settle(self, payment):
        raise RuntimeError("provider unavailable")


class CancelWhileCapturingGateway(ISettlementGateway):
    """Approves, but another process cancels the order while the capture is in flight."""

    def __init__(self, session_factory, state_machine):
        self.session_factory = session_factory
        self.state_machine = state_machine

    async def settle(self, payment):
        async with create_uow(self.session_factory) as uow:
            order = await uow.orders.get(payment.order_id)
            self.state_machine.transition(
                order, OrderStatus.CANCELLED, Actor(role=Role.ADMIN), NOW
            )
            await uow.orders.update(order)
            await uow.commit()
        return True


async def _payment_for(session_factory, order_id):
    async with create_uow(session_factory) as uow:
        return await uow.payments.get_by_order(order_id)


async def _deliver(order_service, order_id):
    steps = [
        (OrderStatus.ACCEPTED, Role.KITCHEN),
        (OrderStatus.PREPARING, Role.KITCHEN),
        (OrderStatus.READY_FOR_PICKUP, Role.KITCHEN),
        (OrderStatus.OUT_FOR_DELIVERY, Role.ADMIN),
        (OrderStatus.DELIVERED, Role.ADMIN),
    ]
    for target, role in steps:
        await order_service.transition_order(
            order_id, TransitionRequest(target_status=target, role=role)
        )


def _service_with(gateway, test_session_factory, notifications, clock, order_service, timeout=0.5):
    return PaymentApplicationService(
        test_session_factory,
        gateway,
        notifications,
        clock,
        state_machine=order_service.state_machine,
        locks=order_service.locks,
        settlement_timeout=timeout,
        rng=random.Random(3),
    )


# =============================================================================
# SETTLEMENT
# =============================================================================


@pytest.mark.asyncio
async def test_process_pending_settles_and_declines(
    payment_service, order_service, gateway, notifications, store, place_order, test_session_factory
):
    approved = await place_order()
    declined = await place_order("cust-2")
    declined_payment = await _payment_for(test_session_factory, declined.order_id)
    gateway.declined_payment_ids.add(declined_payment.payment_id)

    result = await payment_service.process_pending(store.store_id)

    assert result.total == 2
    assert result.processed == 1
    assert result.failed == 1
    assert result.failed_ids == [declined_payment.payment_id]

    settled = await _payment_for(test_session_factory, approved.order_id)
    assert settled.status == PaymentStatus.COMPLETED
    assert TRANSACTION_ID.match(settled.transaction_id)
    assert settled.updated_at == NOW
    assert (await _payment_for(test_session_factory, declined.order_id)).status == PaymentStatus.FAILED

    assert (await order_service.get_order(approved.order_id)).payment_status == PaymentStatus.COMPLETED
    assert (await order_service.get_order(declined.order_id)).payment_status == PaymentStatus.FAILED

    (summary,) = notifications.get_notifications("batch_summary")
    assert summary["operation"] == "process_pending"
    assert summary["successful"] == 1


@pytest.mark.asyncio
async def test_process_pending_is_idempotent(payment_service, gateway, store, place_order):
    await place_order()

    first = await payment_service.process_pending(store.store_id)
    second = await payment_service.process_pending(store.store_id)

    assert first.processed == 1
    assert second.total == 0
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_concurrent_runs_settle_each_payment_once(payment_service, gateway, store, place_order):
    await place_order()
    await place_order("cust-2")

    first, second = await asyncio.gather(
        payment_service.process_pending(store.store_id),
        payment_service.process_pending(store.store_id),
    )

    assert first.processed + second.processed == 2
    assert first.skipped + second.skipped == 2
    assert sorted(gateway.calls) == sorted(set(gateway.calls))


@pytest.mark.asyncio
async def test_settlement_timeout_counts_as_failure(
    test_session_factory, notifications, clock, order_service, store, place_order
):
    order = await place_order()
    slow = MockSettlementGateway(success_rate=1.0, delay_seconds=0.5)
    service = _service_with(slow, test_session_factory, notifications, clock, order_service, timeout=0.05)

    result = await service.process_pending(store.store_id)

    assert result.failed == 1
    assert (await _payment_for(test_session_factory, order.order_id)).status == PaymentStatus.FAILED


@pytest.mark.asyncio
async def test_gateway_error_counts_as_failure(
    test_session_factory, notifications, clock, order_service, store, place_order
):
    await place_order()
    service = _service_with(ExplodingGateway(), test_session_factory, notifications, clock, order_service)

    result = await service.process_pending(store.store_id)

    assert result.processed == 0
    assert result.failed == 1


@pytest.mark.asyncio
async def test_payment_of_cancelled_order_is_never_captured(
    payment_service, order_service, gateway, clock, store, place_order, test_session_factory
):
    order = await place_order()
    clock.advance(minutes=31)
    await order_service.auto_cancel_stale_orders(store.store_id)

    result = await payment_service.process_pending(store.store_id)

    assert result.processed == 0
    assert result.failed == 1
    assert gateway.calls == []
    payment = await _payment_for(test_session_factory, order.order_id)
    assert payment.status == PaymentStatus.FAILED
    assert payment.transaction_id is None
    stored = await order_service.get_order(order.order_id)
    assert stored.status == OrderStatus.CANCELLED
    assert stored.payment_status == PaymentStatus.FAILED

    refunds = await payment_service.auto_refund_stale(store.store_id)
    assert refunds.refunded == 1
    assert (await order_service.get_order(order.order_id)).status == OrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_capture_racing_a_cancellation_is_flagged_for_refund(
    test_session_factory, notifications, clock, order_service, store, place_order
):
    order = await place_order()
    gateway = CancelWhileCapturingGateway(test_session_factory, order_service.state_machine)
    service = _service_with(gateway, test_session_factory, notifications, clock, order_service)

    result = await service.process_pending(store.store_id)

    assert result.processed == 1
    payment = await _payment_for(test_session_factory, order.order_id)
    assert payment.status == PaymentStatus.COMPLETED
    assert payment.refund_eligible is True

    refunds = await service.process_refund_eligible(store.store_id)
    assert refunds.refunded == 1
    stored = await order_service.get_order(order.order_id)
    assert stored.status == OrderStatus.CANCELLED
    assert stored.payment_status == PaymentStatus.REFUNDED


@pytest.mark.asyncio
async def test_order_write_error_keeps_settlement_and_batch_going(
    payment_service, order_service, gateway, store, place_order, test_session_factory, monkeypatch
):
    first = await place_order()
    second = await place_order("cust-2")
    original_update = SqlAlchemyOrderRepository.update
    failed_orders = []

    async def update_failing_once(self, order):
        if not failed_orders:
            failed_orders.append(order.order_id)
            raise StaleState(order.order_id, "version 0", "version 1")
        return await original_update(self, order)

    monkeypatch.setattr(SqlAlchemyOrderRepository, "update", update_failing_once)
    result = await payment_service.process_pending(store.store_id)

    assert result.processed == 2
    assert result.failed_ids == []
    for order in (first, second):
        payment = await _payment_for(test_session_factory, order.order_id)
        assert payment.status == PaymentStatus.COMPLETED
    (lagging,) = failed_orders
    assert (await order_service.get_order(lagging)).payment_status == PaymentStatus.PENDING

    # The captured payments are not sent to the gateway again
    again = await payment_service.process_pending(store.store_id)
    assert again.total == 0
    assert len(gateway.calls) == 2


@pytest.mark.asyncio
async def test_payment_write_error_is_reported_and_batch_continues(
    payment_service, store, place_order, test_session_factory, monkeypatch
):
    await place_order()
    await place_order("cust-2")
    original_update = SqlAlchemyPaymentRepository.update
    broken = []

    async def update_failing_once(self, payment, expected_status):
        if not broken:
            broken.append(payment.payment_id)
            raise RuntimeError("database unavailable")
        return await original_update(self, payment, expected_status)

    monkeypatch.setattr(SqlAlchemyPaymentRepository, "update", update_failing_once)
    result = await payment_service.process_pending(store.store_id)

    assert result.total == 2
    assert result.processed == 1
    assert result.failed_ids == broken
    async with create_uow(test_session_factory) as uow:
        untouched = await uow.payments.get(broken[0])
    assert untouched.status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_process_pending_unknown_store(payment_service):
    with pytest.raises(UnknownStore):
        await payment_service.process_pending("missing-store")


# =============================================================================
# REFUNDS
# =============================================================================


@pytest.mark.asyncio
async def test_auto_refund_respects_window(
    payment_service, order_service, gateway, clock, store, place_order, test_session_factory
):
    clock.set(NOW - timedelta(hours=25))
    old = await place_order()
    clock.set(NOW)
    recent = await place_order("cust-2")

    old_payment = await _payment_for(test_session_factory, old.order_id)
    recent_payment = await _payment_for(test_session_factory, recent.order_id)
    gateway.declined_payment_ids.update({old_payment.payment_id, recent_payment.payment_id})
    await payment_service.process_pending(store.store_id)

    result = await payment_service.auto_refund_stale(store.store_id)

    assert result.total == 2
    assert result.refunded == 1
    assert result.manual_review_ids == [old_payment.payment_id]

    refunded = await _payment_for(test_session_factory, recent.order_id)
    assert refunded.status == PaymentStatus.REFUNDED
    assert refunded.transaction_id == f"txn_{refunded.payment_id}{REFUND_SUFFIX}"

    order = await order_service.get_order(recent.order_id)
    assert order.status == OrderStatus.REFUNDED
    assert order.payment_status == PaymentStatus.REFUNDED

    history = await order_service.get_order_history(recent.order_id)
    assert history.transitions[-1].role == Role.SYSTEM
    assert (await _payment_for(test_session_factory, old.order_id)).status == PaymentStatus.FAILED


@pytest.mark.asyncio
async def test_auto_refund_leaves_terminal_orders_in_place(
    payment_service, order_service, gateway, store, place_order, test_session_factory
):
    order = await place_order()
    payment = await _payment_for(test_session_factory, order.order_id)
    gateway.declined_payment_ids.add(payment.payment_id)
    await payment_service.process_pending(store.store_id)
    await order_service.transition_order(
        order.order_id, TransitionRequest(target_status=OrderStatus.CANCELLED, role=Role.ADMIN)
    )

    result = await payment_service.auto_refund_stale(store.store_id)

    assert result.refunded == 1
    stored = await order_service.get_order(order.order_id)
    assert stored.status == OrderStatus.CANCELLED
    assert stored.payment_status == PaymentStatus.REFUNDED


@pytest.mark.asyncio
async def test_refund_eligible_after_cancellation(
    payment_service, order_service, store, place_order, test_session_factory
):
    order = await place_order()
    await place_order("cust-2")
    await payment_service.process_pending(store.store_id)
    await order_service.transition_order(
        order.order_id, TransitionRequest(target_status=OrderStatus.CANCELLED, role=Role.ADMIN)
    )

    result = await payment_service.process_refund_eligible(store.store_id)

    assert result.total == 1
    assert result.refunded == 1
    payment = await _payment_for(test_session_factory, order.order_id)
    assert payment.status == PaymentStatus.REFUNDED
    assert payment.refund_eligible is False
    assert payment.transaction_id.endswith(REFUND_SUFFIX)

    again = await payment_service.process_refund_eligible(store.store_id)
    assert again.total == 0


@pytest.mark.asyncio
async def test_refund_error_rolls_back_one_payment_only(
    payment_service, order_service, store, place_order, test_session_factory, monkeypatch
):
    orders = [await place_order(), await place_order("cust-2")]
    await payment_service.process_pending(store.store_id)
    for order in orders:
        await order_service.transition_order(
            order.order_id, TransitionRequest(target_status=OrderStatus.CANCELLED, role=Role.ADMIN)
        )
    original_update = SqlAlchemyOrderRepository.update
    failed_orders = []

    async def update_failing_once(self, order):
        if not failed_orders:
            failed_orders.append(order.order_id)
            raise RuntimeError("connection reset")
        return await original_update(self, order)

    monkeypatch.setattr(SqlAlchemyOrderRepository, "update", update_failing_once)
    result = await payment_service.process_refund_eligible(store.store_id)

    assert result.total == 2
    assert result.refunded == 1
    assert len(result.failed_ids) == 1
    (order_id,) = failed_orders
    kept = await _payment_for(test_session_factory, order_id)
    assert kept.status == PaymentStatus.COMPLETED
    assert kept.refund_eligible is True
    assert result.failed_ids == [kept.payment_id]

    retry = await payment_service.process_refund_eligible(store.store_id)
    assert retry.refunded == 1


# =============================================================================
# RECONCILIATION
# =============================================================================


@pytest.mark.asyncio
async def test_reconcile_partitions_payments(
    payment_service, notifications, published_events, store, place_order, test_session_factory
):
    matching = await place_order()
    short = await place_order("cust-2", payment_amount=Decimal("18.00"))

    result = await payment_service.reconcile(store.store_id)

    assert result.total == 2
    assert result.reconciled == 1
    (discrepancy,) = result.discrepancies
    assert discrepancy.order_id == short.order_id
    assert discrepancy.delta == Decimal("2.25")
    assert result.reconciled + len(result.discrepancies) == result.total

    assert (await _payment_for(test_session_factory, matching.order_id)).reconciled_at == NOW
    short_payment = await _payment_for(test_session_factory, short.order_id)
    assert short_payment.reconciled_at is None
    assert short_payment.amount.amount == Decimal("18.00")

    (alert,) = notifications.get_notifications("discrepancy")
    assert alert["payment_id"] == short_payment.payment_id
    assert "PaymentDiscrepancyDetectedEvent" in [e.event_type for e in published_events]


@pytest.mark.asyncio
@pytest.mark.parametrize("paid", ["20.24", "20.25", "20.26"])
async def test_reconcile_within_tolerance(payment_service, store, place_order, paid):
    await place_order(payment_amount=Decimal(paid))

    result = await payment_service.reconcile(store.store_id)

    assert result.reconciled == 1
    assert result.discrepancies == []


@pytest.mark.asyncio
async def test_reconcile_overpayment_is_a_discrepancy(payment_service, store, place_order):
    await place_order(payment_amount=Decimal("20.30"))

    result = await payment_service.reconcile(store.store_id)

    assert result.reconciled == 0
    (discrepancy,) = result.discrepancies
    assert discrepancy.order_total == Decimal("20.25")
    assert discrepancy.payment_amount == Decimal("20.30")
    assert discrepancy.delta == Decimal("0.05")


@pytest.mark.asyncio
async def test_reconcile_reports_undelivered_alerts(
    payment_service, notifications, store, place_order, monkeypatch
):
    await place_order(payment_amount=Decimal("20.30"))
    await place_order("cust-2")

    async def slack_down(*args, **kwargs):
        raise ConnectionError("webhook unreachable")

    monkeypatch.setattr(notifications, "send_discrepancy_alert", slack_down)
    result = await payment_service.reconcile(store.store_id)

    assert result.total == 2
    assert result.reconciled == 1
    (discrepancy,) = result.discrepancies
    assert result.failed_ids == [discrepancy.payment_id]


# =============================================================================
# REMINDERS AND INVOICES
# =============================================================================


@pytest.mark.asyncio
async def test_reminders_after_an_hour(payment_service, notifications, clock, store, place_order):
    order = await place_order()

    assert (await payment_service.send_pending_reminders(store.store_id)).sent == 0

    clock.advance(minutes=61)
    result = await payment_service.send_pending_reminders(store.store_id)

    assert result.sent == 1
    (reminder,) = result.reminders
    assert reminder.order_number == order.order_number
    assert reminder.pending_since == NOW
    assert reminder.amount == Decimal("20.25")
    assert len(notifications.get_notifications("reminder")) == 1


@pytest.mark.asyncio
async def test_monthly_invoices_group_paid_deliveries(
    payment_service, order_service, gateway, store, place_order, test_session_factory
):
    first = await place_order()
    second = await place_order()
    unpaid = await place_order("cust-2")
    unpaid_payment = await _payment_for(test_session_factory, unpaid.order_id)
    gateway.declined_payment_ids.add(unpaid_payment.payment_id)
    await payment_service.process_pending(store.store_id)
    for order in (first, second, unpaid):
        await _deliver(order_service, order.order_id)

    result = await payment_service.generate_monthly_invoices(store.store_id)

    assert result.generated == 1
    (invoice,) = result.invoices
    assert invoice.customer_id == "cust-1"
    assert invoice.total_amount == Decimal("40.50")
    assert invoice.order_count == 2
    assert set(invoice.order_ids) == {first.order_id, second.order_id}
    assert invoice.period == "2025-06-01 to 2025-06-15"
    assert re.match(r"^INV_202506_[0-9A-Z]{6}$", invoice.invoice_number)
