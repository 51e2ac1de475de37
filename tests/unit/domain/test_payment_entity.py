"""Tests for the Payment entity state machine."""
from datetime import timedelta

import pytest

from core.domain.entities.payment import REFUND_SUFFIX
from core.domain.enums.payment_status import PaymentStatus
from core.domain.events import PaymentStatusChangedEvent
from core.domain.exceptions import InvalidPaymentTransition

from factories import NOW, build_order, build_payment


def test_complete_sets_transaction_and_records_event():
    payment = build_payment()
    payment.complete("txn_1_abc", NOW)

    assert payment.status == PaymentStatus.COMPLETED
    assert payment.transaction_id == "txn_1_abc"
    assert payment.updated_at == NOW
    (event,) = payment.get_domain_events()
    assert isinstance(event, PaymentStatusChangedEvent)
    assert (event.previous_status, event.new_status) == ("PENDING", "COMPLETED")


def test_refund_suffixes_transaction_id():
    payment = build_payment()
    payment.complete("txn_1_abc", NOW)
    payment.mark_refund_eligible()
    payment.refund(NOW + timedelta(minutes=5))

    assert payment.status == PaymentStatus.REFUNDED
    assert payment.transaction_id == f"txn_1_abc{REFUND_SUFFIX}"
    assert payment.refund_eligible is False


def test_refund_of_failed_payment_derives_transaction_id():
    payment = build_payment()
    payment.fail(NOW)
    payment.refund(NOW)
    assert payment.transaction_id == f"txn_{payment.payment_id}_refund"


@pytest.mark.parametrize(
    "status, action",
    [
        (PaymentStatus.COMPLETED, lambda p: p.complete("txn", NOW)),
        (PaymentStatus.FAILED, lambda p: p.fail(NOW)),
        (PaymentStatus.PENDING, lambda p: p.refund(NOW)),
        (PaymentStatus.REFUNDED, lambda p: p.refund(NOW)),
    ],
)
def test_illegal_transitions_raise_and_change_nothing(status, action):
    payment = build_payment(build_order(), status=status)
    with pytest.raises(InvalidPaymentTransition):
        action(payment)
    assert payment.status == status
    assert payment.get_domain_events() == []
