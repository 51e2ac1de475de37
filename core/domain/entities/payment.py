"""
Payment entity.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import uuid

from ..enums.payment_status import PaymentMethod, PaymentStatus
from ..events.base import DomainEvent
from ..events.order_events import PaymentStatusChangedEvent
from ..exceptions import InvalidPaymentTransition
from ..value_objects import ExecutionID, Money

REFUND_SUFFIX = "_refund"

PAYMENT_TRANSITIONS = frozenset({
    (PaymentStatus.PENDING, PaymentStatus.COMPLETED),
    (PaymentStatus.PENDING, PaymentStatus.FAILED),
    (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED),
    (PaymentStatus.FAILED, PaymentStatus.REFUNDED),
})


@dataclass
class Payment:
    """
    Payment captured for exactly one order.

    amount is expected to equal the order total but is never corrected;
    a mismatch is a reconciliation discrepancy.
    """
    payment_id: str
    order_id: str
    store_id: str
    amount: Money
    method: PaymentMethod
    created_at: datetime
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    refund_eligible: bool = False
    reconciled_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0
    execution_id: Optional[ExecutionID] = None

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def create(
        cls,
        order_id: str,
        store_id: str,
        amount: Money,
        method: PaymentMethod,
        created_at: datetime,
        payment_id: Optional[str] = None,
    ) -> "Payment":
        return cls(
            payment_id=payment_id or str(uuid.uuid4()),
            order_id=order_id,
            store_id=store_id,
            amount=amount,
            method=method,
            created_at=created_at,
        )

    @staticmethod
    def can_transition(current: PaymentStatus, requested: PaymentStatus) -> bool:
        return (current, requested) in PAYMENT_TRANSITIONS

    def complete(self, transaction_id: str, now: datetime) -> None:
        """Settlement succeeded."""
        self._transition(PaymentStatus.COMPLETED, now)
        self.transaction_id = transaction_id
        self._record_status_change(PaymentStatus.PENDING, now)

    def fail(self, now: datetime) -> None:
        """Settlement failed or timed out."""
        self._transition(PaymentStatus.FAILED, now)
        self._record_status_change(PaymentStatus.PENDING, now)

    def refund(self, now: datetime) -> None:
        """Refund a completed or failed payment; tags the transaction id."""
        previous = self.status
        self._transition(PaymentStatus.REFUNDED, now)
        base = self.transaction_id or f"txn_{self.payment_id}"
        self.transaction_id = f"{base}{REFUND_SUFFIX}"
        self.refund_eligible = False
        self._record_status_change(previous, now)

    def mark_refund_eligible(self) -> None:
        self.refund_eligible = True

    def mark_reconciled(self, now: datetime) -> None:
        self.reconciled_at = now

    def _transition(self, requested: PaymentStatus, now: datetime) -> None:
        if not self.can_transition(self.status, requested):
            raise InvalidPaymentTransition(
                self.payment_id, self.status.value, requested.value
            )
        self.status = requested
        self.updated_at = now

    def _record_status_change(self, previous: PaymentStatus, now: datetime) -> None:
        self._domain_events.append(
            PaymentStatusChangedEvent(
                payment_id=self.payment_id,
                order_id=self.order_id,
                previous_status=previous.value,
                new_status=self.status.value,
                transaction_id=self.transaction_id,
                execution_id=str(self.execution_id) if self.execution_id else None,
                occurred_at=now,
            )
        )

    def get_domain_events(self) -> List[DomainEvent]:
        return list(self._domain_events)

    def clear_domain_events(self) -> None:
        self._domain_events.clear()
