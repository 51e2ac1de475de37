"""
Unit tests for notification services and the mock settlement gateway.
"""
import random
from decimal import Decimal

import pytest

from core.domain.services.reconciliation import Discrepancy
from core.domain.value_objects import ExecutionID, Money
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.notifications.slack_notification_service import SlackNotificationService
from core.infrastructure.adapters.settlement.mock_settlement_gateway import MockSettlementGateway
from core.settings import SlackSettings

from factories import build_payment


@pytest.fixture
def discrepancy():
    return Discrepancy(
        payment_id="pay-1",
        order_id="ord-1",
        order_total=Money(Decimal("20.25")),
        payment_amount=Money(Decimal("18.00")),
        delta=Money(Decimal("2.25")),
    )


@pytest.mark.asyncio
async def test_mock_records_discrepancy_alert(discrepancy):
    service = MockNotificationService()
    execution_id = ExecutionID.generate()

    await service.send_discrepancy_alert(execution_id, "store-1", discrepancy)

    (sent,) = service.get_notifications("discrepancy")
    assert sent["execution_id"] == str(execution_id)
    assert sent["payment_id"] == "pay-1"
    assert sent["delta"] == "2.25"


@pytest.mark.asyncio
async def test_mock_batch_summary_and_generic_notify():
    service = MockNotificationService()

    delivered = await service.send_batch_summary("process_pending", "store-1", 3, 2, ["pay-9"])
    await service.notify("kitchen is overloaded", severity=80)

    assert delivered is True
    (summary,) = service.get_notifications("batch_summary")
    assert summary["failed"] == 1
    assert service.get_notifications("generic")[0]["severity"] == 80

    service.clear()
    assert service.get_notifications() == []


@pytest.mark.asyncio
async def test_slack_without_webhook_skips_delivery(discrepancy):
    service = SlackNotificationService(SlackSettings(enabled=True, webhook_url=""))

    assert await service.send_batch_summary("reconcile", "store-1", 1, 1, []) is False
    # Alerts never raise into the caller
    await service.send_discrepancy_alert(ExecutionID.generate(), "store-1", discrepancy)


@pytest.mark.asyncio
async def test_mock_gateway_honours_declines_and_success_rate():
    approve_all = MockSettlementGateway(success_rate=1.0, declined_payment_ids={"pay-x"})
    decline_all = MockSettlementGateway(success_rate=0.0, rng=random.Random(1))
    payment = build_payment()
    payment.payment_id = "pay-x"

    assert await approve_all.settle(build_payment()) is True
    assert await approve_all.settle(payment) is False
    assert await decline_all.settle(build_payment()) is False
    assert approve_all.calls[-1] == "pay-x"


def test_mock_gateway_rejects_invalid_rate():
    with pytest.raises(ValueError):
        MockSettlementGateway(success_rate=1.5)
