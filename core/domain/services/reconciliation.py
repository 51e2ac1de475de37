"""
Payment Reconciler.

Pure rules around payments: amount reconciliation against order totals,
auto-refund and reminder eligibility, monthly invoice grouping. The
payment state machine itself lives on the Payment entity
(``PAYMENT_TRANSITIONS``); batch orchestration lives in the application
layer.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
import random
import string
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..entities.order import Order
from ..entities.payment import Payment
from ..enums.order_status import OrderStatus
from ..enums.payment_status import PaymentStatus
from ..value_objects import CENT, Money

INVOICE_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
INVOICE_SUFFIX_LENGTH = 6


@dataclass(frozen=True)
class Discrepancy:
    """Payment whose amount differs from its order total beyond tolerance."""
    payment_id: str
    order_id: str
    order_total: Money
    payment_amount: Money
    delta: Money


@dataclass(frozen=True)
class ReconciliationResult:
    reconciled: List[str] = field(default_factory=list)
    discrepancies: List[Discrepancy] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.reconciled) + len(self.discrepancies)


@dataclass(frozen=True)
class PaymentReminder:
    payment_id: str
    order_id: str
    order_number: str
    customer_id: str
    amount: Money
    pending_since: datetime
    reminder_sent_at: datetime


@dataclass(frozen=True)
class Invoice:
    invoice_number: str
    customer_id: str
    period_start: datetime
    period_end: datetime
    total: Money
    order_count: int
    order_ids: Tuple[str, ...]


def month_start(now: datetime) -> datetime:
    """Midnight on the first day of ``now``'s calendar month."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class PaymentReconciler:
    """Payment reconciliation, refund, reminder and invoicing rules."""

    def __init__(
        self,
        tolerance: Decimal = CENT,
        auto_refund_window: timedelta = timedelta(hours=24),
        reminder_after: timedelta = timedelta(hours=1),
        rng: Optional[random.Random] = None,
    ):
        self.tolerance = tolerance
        self.auto_refund_window = auto_refund_window
        self.reminder_after = reminder_after
        self._rng = rng or random.Random()

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def compare(self, payment: Payment, order: Order) -> Optional[Discrepancy]:
        """Discrepancy if |order.total - payment.amount| exceeds tolerance, else None."""
        if not payment.amount.differs_from(order.total, self.tolerance):
            return None
        return Discrepancy(
            payment_id=payment.payment_id,
            order_id=order.order_id,
            order_total=order.total,
            payment_amount=payment.amount,
            delta=(order.total - payment.amount).abs(),
        )

    def reconcile(self, pairs: Iterable[Tuple[Payment, Order]]) -> ReconciliationResult:
        """
        Partition payments into reconciled and discrepant.

        Every input pair lands in exactly one side, so
        ``len(reconciled) + len(discrepancies) == total``.
        """
        reconciled: List[str] = []
        discrepancies: List[Discrepancy] = []
        for payment, order in pairs:
            discrepancy = self.compare(payment, order)
            if discrepancy is None:
                reconciled.append(payment.payment_id)
            else:
                discrepancies.append(discrepancy)
        return ReconciliationResult(reconciled=reconciled, discrepancies=discrepancies)

    # -------------------------------------------------------------------------
    # Refunds and reminders
    # -------------------------------------------------------------------------

    def is_auto_refundable(self, payment: Payment, now: datetime) -> bool:
        """FAILED payments no older than the refund window (boundary inclusive)."""
        return (
            payment.status == PaymentStatus.FAILED
            and now - payment.created_at <= self.auto_refund_window
        )

    def needs_reminder(self, payment: Payment, now: datetime) -> bool:
        """PENDING payments older than the reminder threshold."""
        return (
            payment.status == PaymentStatus.PENDING
            and now - payment.created_at > self.reminder_after
        )

    @staticmethod
    def build_reminder(payment: Payment, order: Order, now: datetime) -> PaymentReminder:
        return PaymentReminder(
            payment_id=payment.payment_id,
            order_id=order.order_id,
            order_number=str(order.order_number),
            customer_id=order.customer_id,
            amount=payment.amount,
            pending_since=payment.created_at,
            reminder_sent_at=now,
        )

    # -------------------------------------------------------------------------
    # Invoicing
    # -------------------------------------------------------------------------

    def invoice_number(self, now: datetime) -> str:
        """``INV_<YYYY><MM>_<6 random base36 chars, upper case>``."""
        suffix = "".join(
            self._rng.choice(INVOICE_SUFFIX_ALPHABET)
            for _ in range(INVOICE_SUFFIX_LENGTH)
        )
        return f"INV_{now.year:04d}{now.month:02d}_{suffix}"

    @staticmethod
    def is_invoiceable(order: Order, now: datetime) -> bool:
        return (
            order.status == OrderStatus.DELIVERED
            and order.payment_status == PaymentStatus.COMPLETED
            and order.created_at >= month_start(now)
        )

    def build_invoices(self, orders: Sequence[Order], now: datetime) -> List[Invoice]:
        """One invoice per customer over this month's delivered, paid orders."""
        by_customer: Dict[str, List[Order]] = {}
        for order in orders:
            if not self.is_invoiceable(order, now):
                continue
            by_customer.setdefault(order.customer_id, []).append(order)

        invoices = []
        for customer_id, customer_orders in by_customer.items():
            total = Money.zero(customer_orders[0].total.currency)
            for order in customer_orders:
                total = total + order.total
            invoices.append(
                Invoice(
                    invoice_number=self.invoice_number(now),
                    customer_id=customer_id,
                    period_start=month_start(now),
                    period_end=now,
                    total=total,
                    order_count=len(customer_orders),
                    order_ids=tuple(order.order_id for order in customer_orders),
                )
            )
        return invoices
