"""
Payment Application Service.

Batch operations over a store's payments: settlement, automatic refunds,
reconciliation, reminders and monthly invoices. Each payment is written
in its own transaction, so one failure never rolls back the others.
"""
import asyncio
import logging
import random
import string
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.payment_dto import (
    AutoRefundResultDTO,
    DiscrepancyDTO,
    InvoiceDTO,
    InvoicesResultDTO,
    PaymentReminderDTO,
    ProcessPendingResultDTO,
    ReconciliationResultDTO,
    RefundEligibleResultDTO,
    RemindersResultDTO,
)
from core.application.interfaces import (
    Clock,
    INotificationService,
    ISettlementGateway,
)
from core.data.uow import create_uow
from core.domain.entities.payment import Payment
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.payment_status import PaymentStatus
from core.domain.enums.role import Role
from core.domain.event_bus import EventBus
from core.domain.events import PaymentDiscrepancyDetectedEvent
from core.domain.exceptions import UnknownStore
from core.domain.services.reconciliation import (
    Discrepancy,
    PaymentReconciler,
    month_start,
)
from core.domain.services.state_machine import Actor, OrderStateMachine
from core.domain.value_objects import ExecutionID
from core.settings.modules.payment_settings import PaymentSettings

from .locks import LockRegistry

logger = logging.getLogger(__name__)

TRANSACTION_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
TRANSACTION_SUFFIX_LENGTH = 9

# Orders whose payment must not be captured
CLOSED_ORDER_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})


class PaymentApplicationService:
    """
    Orchestrates payment batches for one store at a time.

    Usage:
        service = PaymentApplicationService(session_factory, gateway, notifications, clock)
        result = await service.process_pending(store_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settlement_gateway: ISettlementGateway,
        notification_service: INotificationService,
        clock: Clock,
        reconciler: Optional[PaymentReconciler] = None,
        state_machine: Optional[OrderStateMachine] = None,
        locks: Optional[LockRegistry] = None,
        event_bus: Optional[EventBus] = None,
        settlement_timeout: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize service.

        Args:
            session_factory: SQLAlchemy async session factory
            settlement_gateway: External settlement provider
            notification_service: Receives discrepancies, reminders and batch summaries
            clock: Source of "now"
            reconciler: Reconciliation and eligibility rules
            state_machine: Used to move orders to REFUNDED on auto-refund
            locks: Shared with OrderApplicationService
            event_bus: Receives domain events after commit
            settlement_timeout: Seconds before a settlement attempt counts as failed
            rng: Random source for transaction ids
        """
        self._session_factory = session_factory
        self.gateway = settlement_gateway
        self.notifications = notification_service
        self.clock = clock
        self.reconciler = reconciler or PaymentReconciler()
        self.state_machine = state_machine or OrderStateMachine()
        self.locks = locks or LockRegistry()
        self._event_bus = event_bus
        self.settlement_timeout = settlement_timeout
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker,
        settlement_gateway: ISettlementGateway,
        notification_service: INotificationService,
        clock: Clock,
        settings: PaymentSettings,
        **kwargs,
    ) -> "PaymentApplicationService":
        reconciler = PaymentReconciler(
            tolerance=settings.reconciliation_tolerance,
            auto_refund_window=timedelta(hours=settings.auto_refund_window_hours),
            reminder_after=timedelta(minutes=settings.reminder_after_minutes),
        )
        return cls(
            session_factory,
            settlement_gateway,
            notification_service,
            clock,
            reconciler=reconciler,
            settlement_timeout=settings.settlement_timeout_seconds,
            **kwargs,
        )

    def _uow(self):
        return create_uow(self._session_factory, self._event_bus)

    async def _require_store(self, store_id: str) -> None:
        async with self._uow() as uow:
            if await uow.stores.get(store_id) is None:
                raise UnknownStore(store_id)

    def _transaction_id(self, now: datetime) -> str:
        """``txn_<epoch ms>_<9 random base36 chars>``."""
        suffix = "".join(
            self._rng.choice(TRANSACTION_SUFFIX_ALPHABET)
            for _ in range(TRANSACTION_SUFFIX_LENGTH)
        )
        return f"txn_{int(now.timestamp() * 1000)}_{suffix}"

    async def _summarize(
        self,
        operation: str,
        store_id: str,
        total: int,
        successful: int,
        failed_ids: List[str],
    ) -> None:
        if not total:
            return
        await self.notifications.send_batch_summary(
            operation=operation,
            store_id=store_id,
            total=total,
            successful=successful,
            failed_ids=failed_ids,
        )

    # =========================================================================
    # SETTLEMENT
    # =========================================================================

    async def process_pending(self, store_id: str) -> ProcessPendingResultDTO:
        """
        Settle every PENDING payment of a store.

        Each payment ends COMPLETED (with a fresh transaction id) or FAILED;
        a settlement that errors or exceeds the timeout counts as FAILED.
        A payment another invocation already moved is skipped, so running
        this twice concurrently never settles a payment twice.
        """
        await self._require_store(store_id)
        async with self._uow() as uow:
            pending = await uow.payments.list_by_store(
                store_id, statuses=[PaymentStatus.PENDING]
            )

        logger.info(f"Processing {len(pending)} pending payments for store {store_id}")

        processed = 0
        skipped = 0
        failed_ids: List[str] = []
        for payment in pending:
            try:
                outcome = await self._settle_one(payment.payment_id)
            except Exception as e:
                logger.error(
                    f"❌ Settlement of payment {payment.payment_id} aborted: {e}", exc_info=True
                )
                failed_ids.append(payment.payment_id)
                continue
            if outcome is None:
                skipped += 1
            elif outcome:
                processed += 1
            else:
                failed_ids.append(payment.payment_id)

        logger.info(
            f"✅ Settlement complete for store {store_id}: "
            f"{processed} settled, {len(failed_ids)} failed, {skipped} skipped"
        )
        await self._summarize(
            "process_pending", store_id, len(pending) - skipped, processed, failed_ids
        )
        return ProcessPendingResultDTO(
            processed=processed,
            failed=len(failed_ids),
            total=len(pending),
            failed_ids=failed_ids,
            skipped=skipped,
        )

    async def _settle_one(self, payment_id: str) -> Optional[bool]:
        """
        True settled, False failed, None skipped (no longer PENDING).

        Payments of cancelled or refunded orders are failed without
        contacting the gateway. Once the gateway answers, the outcome is
        committed on the payment alone; the order's payment_status mirror
        is written afterwards and may lag if that write fails.
        """
        async with self.locks.payment(payment_id):
            async with self._uow() as uow:
                payment = await uow.payments.get(payment_id)
                order = await uow.orders.get(payment.order_id) if payment else None
            if payment is None or payment.status != PaymentStatus.PENDING:
                return None

            if order is not None and order.status in CLOSED_ORDER_STATUSES:
                logger.warning(
                    f"Order {order.order_id} is {order.status.value}; "
                    f"payment {payment_id} not sent for settlement"
                )
                approved = False
            else:
                approved = await self._request_settlement(payment)

            now = self.clock.now()
            if approved:
                payment.complete(self._transaction_id(now), now)
            else:
                payment.fail(now)

            async with self._uow() as uow:
                payment.execution_id = uow.execution_id
                order = await uow.orders.get(payment.order_id)
                if approved and order is not None and order.status in CLOSED_ORDER_STATUSES:
                    logger.warning(
                        f"Order {order.order_id} was {order.status.value} when payment "
                        f"{payment_id} settled; flagged for refund"
                    )
                    payment.mark_refund_eligible()
                if not await uow.payments.update(payment, PaymentStatus.PENDING):
                    logger.warning(f"Payment {payment_id} changed during settlement, skipped")
                    return None
                uow.track(payment)
                await uow.commit()

            await self._mirror_on_order(payment)

        if not approved:
            logger.warning(f"❌ Payment {payment_id} failed settlement")
        return approved

    async def _request_settlement(self, payment: Payment) -> bool:
        try:
            return bool(
                await asyncio.wait_for(
                    self.gateway.settle(payment), timeout=self.settlement_timeout
                )
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Settlement of payment {payment.payment_id} timed out after "
                f"{self.settlement_timeout}s"
            )
        except Exception as e:
            logger.error(
                f"❌ Settlement of payment {payment.payment_id} raised: {e}", exc_info=True
            )
        return False

    async def _mirror_on_order(self, payment: Payment) -> None:
        """Copy a committed payment status onto its order."""
        try:
            async with self.locks.order(payment.order_id):
                async with self._uow() as uow:
                    order = await uow.orders.get(payment.order_id)
                    if order is None:
                        return
                    order.mirror_payment_status(payment.status)
                    await uow.orders.update(order)
                    await uow.commit()
        except Exception as e:
            logger.error(
                f"Payment {payment.payment_id} is {payment.status.value} but order "
                f"{payment.order_id} was not updated: {e}",
                exc_info=True,
            )

    # =========================================================================
    # REFUNDS
    # =========================================================================

    async def auto_refund_stale(self, store_id: str) -> AutoRefundResultDTO:
        """
        Refund FAILED payments no older than the auto-refund window.

        Older FAILED payments are left for manual review. The linked order
        moves to REFUNDED unless it is already terminal.
        """
        await self._require_store(store_id)
        now = self.clock.now()
        async with self._uow() as uow:
            failed = await uow.payments.list_by_store(
                store_id, statuses=[PaymentStatus.FAILED]
            )

        refunded = 0
        manual_review_ids: List[str] = []
        failed_ids: List[str] = []
        for payment in failed:
            if not self.reconciler.is_auto_refundable(payment, now):
                manual_review_ids.append(payment.payment_id)
                continue
            try:
                outcome = await self._refund_one(
                    payment.payment_id,
                    lambda p, at: self.reconciler.is_auto_refundable(p, at),
                )
            except Exception as e:
                logger.error(
                    f"❌ Auto-refund of payment {payment.payment_id} failed: {e}", exc_info=True
                )
                failed_ids.append(payment.payment_id)
                continue
            if outcome:
                refunded += 1

        if manual_review_ids:
            logger.warning(
                f"🔔 {len(manual_review_ids)} failed payments in store {store_id} "
                f"are past the auto-refund window and need manual review"
            )
        await self._summarize(
            "auto_refund", store_id, len(failed) - len(manual_review_ids), refunded, failed_ids
        )
        return AutoRefundResultDTO(
            refunded=refunded,
            total=len(failed),
            manual_review_ids=manual_review_ids,
            failed_ids=failed_ids,
        )

    async def process_refund_eligible(self, store_id: str) -> RefundEligibleResultDTO:
        """Refund COMPLETED payments flagged by an order cancellation or refund."""
        await self._require_store(store_id)
        async with self._uow() as uow:
            completed = await uow.payments.list_by_store(
                store_id, statuses=[PaymentStatus.COMPLETED]
            )
        eligible = [p for p in completed if p.refund_eligible]

        refunded = 0
        failed_ids: List[str] = []
        for payment in eligible:
            try:
                outcome = await self._refund_one(
                    payment.payment_id,
                    lambda p, at: p.status == PaymentStatus.COMPLETED and p.refund_eligible,
                )
            except Exception as e:
                logger.error(
                    f"❌ Refund of payment {payment.payment_id} failed: {e}", exc_info=True
                )
                failed_ids.append(payment.payment_id)
                continue
            if outcome:
                refunded += 1

        await self._summarize("refund_eligible", store_id, len(eligible), refunded, failed_ids)
        return RefundEligibleResultDTO(
            refunded=refunded,
            total=len(eligible),
            failed_ids=failed_ids,
        )

    async def _refund_one(
        self,
        payment_id: str,
        eligible: Callable[[Payment, datetime], bool],
    ) -> bool:
        """Refund one payment if it is still eligible; cascade to its order."""
        async with self.locks.payment(payment_id):
            async with self._uow() as uow:
                payment = await uow.payments.get(payment_id)
            if payment is None:
                return False
            async with self.locks.order(payment.order_id):
                async with self._uow() as uow:
                    payment = await uow.payments.get(payment_id)
                    now = self.clock.now()
                    if payment is None or not eligible(payment, now):
                        return False

                    previous = payment.status
                    payment.execution_id = uow.execution_id
                    payment.refund(now)
                    if not await uow.payments.update(payment, previous):
                        logger.warning(f"Payment {payment_id} changed during refund, skipped")
                        return False

                    order = await uow.orders.get(payment.order_id)
                    if order is not None:
                        if not order.is_terminal:
                            order.execution_id = uow.execution_id
                            self.state_machine.transition(
                                order,
                                OrderStatus.REFUNDED,
                                Actor(role=Role.SYSTEM),
                                now,
                                reason=f"Payment {payment_id} refunded",
                            )
                        order.mirror_payment_status(payment.status)
                        await uow.orders.update(order)
                    uow.track(payment, order)
                    await uow.commit()

        logger.info(f"✅ Payment {payment_id} refunded ({payment.transaction_id})")
        return True

    # =========================================================================
    # RECONCILIATION
    # =========================================================================

    async def reconcile(self, store_id: str) -> ReconciliationResultDTO:
        """
        Compare every payment of a store against its order total.

        Matching payments get ``reconciled_at`` stamped. Mismatches are
        recorded as PaymentDiscrepancyDetectedEvent and alerted, never
        corrected.
        """
        await self._require_store(store_id)
        execution_id = ExecutionID.generate()
        async with self._uow() as uow:
            payments = await uow.payments.list_by_store(store_id)
            pairs = []
            for payment in payments:
                order = await uow.orders.get(payment.order_id)
                if order is None:
                    logger.warning(
                        f"Payment {payment.payment_id} references missing order {payment.order_id}"
                    )
                    continue
                pairs.append((payment, order))

        result = self.reconciler.reconcile(pairs)
        now = self.clock.now()

        failed_ids: List[str] = []
        for payment_id in result.reconciled:
            try:
                await self._stamp_reconciled(payment_id, now)
            except Exception as e:
                logger.error(
                    f"Could not stamp payment {payment_id} as reconciled: {e}", exc_info=True
                )
                failed_ids.append(payment_id)

        for discrepancy in result.discrepancies:
            try:
                await self._record_discrepancy(execution_id, discrepancy, now)
                await self.notifications.send_discrepancy_alert(
                    execution_id, store_id, discrepancy
                )
            except Exception as e:
                logger.error(
                    f"Could not report discrepancy on payment {discrepancy.payment_id}: {e}",
                    exc_info=True,
                )
                failed_ids.append(discrepancy.payment_id)

        logger.info(
            f"Reconciliation for store {store_id} ({execution_id}): "
            f"{len(result.reconciled)} reconciled, {len(result.discrepancies)} discrepancies"
        )
        return ReconciliationResultDTO(
            reconciled=len(result.reconciled),
            discrepancies=[
                DiscrepancyDTO(
                    payment_id=d.payment_id,
                    order_id=d.order_id,
                    order_total=d.order_total.amount,
                    payment_amount=d.payment_amount.amount,
                    delta=d.delta.amount,
                )
                for d in result.discrepancies
            ],
            total=result.total,
            failed_ids=failed_ids,
        )

    async def _stamp_reconciled(self, payment_id: str, now: datetime) -> None:
        async with self.locks.payment(payment_id):
            async with self._uow() as uow:
                payment = await uow.payments.get(payment_id)
                if payment is None:
                    return
                payment.mark_reconciled(now)
                if not await uow.payments.update(payment, payment.status):
                    logger.warning(f"Payment {payment_id} changed during reconciliation")
                    return
                await uow.commit()

    async def _record_discrepancy(
        self,
        execution_id: ExecutionID,
        discrepancy: Discrepancy,
        now: datetime,
    ) -> None:
        async with self._uow() as uow:
            uow.record(
                PaymentDiscrepancyDetectedEvent(
                    payment_id=discrepancy.payment_id,
                    order_id=discrepancy.order_id,
                    order_total=str(discrepancy.order_total.amount),
                    payment_amount=str(discrepancy.payment_amount.amount),
                    delta=str(discrepancy.delta.amount),
                    execution_id=str(execution_id),
                    occurred_at=now,
                )
            )
            await uow.commit()

    # =========================================================================
    # REMINDERS AND INVOICES
    # =========================================================================

    async def send_pending_reminders(self, store_id: str) -> RemindersResultDTO:
        """Remind customers about payments PENDING longer than the reminder threshold."""
        await self._require_store(store_id)
        now = self.clock.now()
        reminders = []
        async with self._uow() as uow:
            pending = await uow.payments.list_by_store(
                store_id, statuses=[PaymentStatus.PENDING]
            )
            for payment in pending:
                if not self.reconciler.needs_reminder(payment, now):
                    continue
                order = await uow.orders.get(payment.order_id)
                if order is not None:
                    reminders.append(self.reconciler.build_reminder(payment, order, now))

        sent = []
        for reminder in reminders:
            try:
                await self.notifications.send_payment_reminder(reminder)
            except Exception as e:
                logger.error(
                    f"Reminder for payment {reminder.payment_id} not delivered: {e}", exc_info=True
                )
                continue
            sent.append(reminder)

        logger.info(f"🔔 Sent {len(sent)} payment reminders for store {store_id}")
        return RemindersResultDTO(
            sent=len(sent),
            reminders=[
                PaymentReminderDTO(
                    payment_id=r.payment_id,
                    order_id=r.order_id,
                    order_number=r.order_number,
                    customer_id=r.customer_id,
                    amount=r.amount.amount,
                    pending_since=r.pending_since,
                    reminder_sent_at=r.reminder_sent_at,
                )
                for r in sent
            ],
        )

    async def generate_monthly_invoices(self, store_id: str) -> InvoicesResultDTO:
        """One invoice per customer for this month's delivered, paid orders."""
        await self._require_store(store_id)
        now = self.clock.now()
        async with self._uow() as uow:
            delivered = await uow.orders.list_by_store(
                store_id,
                statuses=[OrderStatus.DELIVERED],
                created_after=month_start(now),
            )

        invoices = self.reconciler.build_invoices(delivered, now)
        logger.info(f"Generated {len(invoices)} invoices for store {store_id}")
        return InvoicesResultDTO(
            generated=len(invoices),
            invoices=[
                InvoiceDTO(
                    invoice_number=invoice.invoice_number,
                    customer_id=invoice.customer_id,
                    period=(
                        f"{invoice.period_start.date().isoformat()} to "
                        f"{invoice.period_end.date().isoformat()}"
                    ),
                    total_amount=invoice.total.amount,
                    order_count=invoice.order_count,
                    order_ids=list(invoice.order_ids),
                    generated_at=now,
                )
                for invoice in invoices
            ],
        )
