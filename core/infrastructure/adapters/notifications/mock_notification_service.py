"""
Mock Notification Service Implementation.

Records notifications in memory and logs them. Used in tests and
local runs without Slack.
"""
from typing import List
import logging

from core.application.interfaces import INotificationService
from core.domain.services.reconciliation import Discrepancy, PaymentReminder
from core.domain.value_objects import ExecutionID


logger = logging.getLogger(__name__)


class MockNotificationService(INotificationService):
    """
    Mock implementation of notification service.

    Logs notifications instead of actually sending them.
    """

    def __init__(self):
        self.notifications_sent = []
        logger.info("MockNotificationService initialized (console logging)")

    async def send_discrepancy_alert(
        self,
        execution_id: ExecutionID,
        store_id: str,
        discrepancy: Discrepancy,
    ) -> None:
        self.notifications_sent.append({
            "type": "discrepancy",
            "execution_id": str(execution_id),
            "store_id": store_id,
            "payment_id": discrepancy.payment_id,
            "order_id": discrepancy.order_id,
            "delta": str(discrepancy.delta.amount),
        })
        logger.warning(
            f"❌ 🔔 PAYMENT DISCREPANCY:\n"
            f"   Execution: {execution_id}\n"
            f"   Payment: {discrepancy.payment_id}\n"
            f"   Order: {discrepancy.order_id}\n"
            f"   Order total: {discrepancy.order_total}\n"
            f"   Paid: {discrepancy.payment_amount}\n"
            f"   Delta: {discrepancy.delta}"
        )

    async def send_payment_reminder(self, reminder: PaymentReminder) -> None:
        self.notifications_sent.append({
            "type": "reminder",
            "payment_id": reminder.payment_id,
            "order_number": reminder.order_number,
            "customer_id": reminder.customer_id,
            "amount": str(reminder.amount.amount),
        })
        logger.info(
            f"🔔 PAYMENT REMINDER: order {reminder.order_number} "
            f"(customer {reminder.customer_id}) pending since "
            f"{reminder.pending_since.isoformat()}, amount {reminder.amount}"
        )

    async def send_batch_summary(
        self,
        operation: str,
        store_id: str,
        total: int,
        successful: int,
        failed_ids: List[str],
    ) -> bool:
        self.notifications_sent.append({
            "type": "batch_summary",
            "operation": operation,
            "store_id": store_id,
            "total": total,
            "successful": successful,
            "failed": len(failed_ids),
        })
        rate = (successful / total * 100) if total else 0.0
        logger.info(
            f"📊 🔔 BATCH SUMMARY ({operation}, store {store_id}):\n"
            f"   Total: {total}\n"
            f"   Successful: {successful}\n"
            f"   Failed: {len(failed_ids)}\n"
            f"   Success Rate: {rate:.1f}%"
        )
        return True

    async def notify(self, message: str, severity: int = 50) -> None:
        self.notifications_sent.append({
            "type": "generic",
            "message": message,
            "severity": severity,
        })
        severity_emoji = "🔴" if severity >= 80 else "🟡" if severity >= 50 else "🟢"
        logger.info(f"{severity_emoji} 🔔 NOTIFICATION (severity={severity}): {message}")

    def get_notifications(self, kind: str = None) -> list:
        """Get sent notifications, optionally of one type (for testing)."""
        if kind is None:
            return list(self.notifications_sent)
        return [n for n in self.notifications_sent if n["type"] == kind]

    def clear(self) -> None:
        """Clear notifications (for testing)."""
        self.notifications_sent.clear()
