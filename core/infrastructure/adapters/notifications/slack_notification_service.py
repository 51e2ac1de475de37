"""
Slack Notification Service Implementation.

Sends notifications via Slack Webhook API.
"""
from typing import List
import logging
import aiohttp

from core.application.interfaces import INotificationService
from core.domain.services.reconciliation import Discrepancy, PaymentReminder
from core.domain.value_objects import ExecutionID
from core.settings.modules.integrations_settings import SlackSettings


logger = logging.getLogger(__name__)


class SlackNotificationService(INotificationService):
    """
    Slack implementation of notification service.

    Delivery failures are logged and never propagate into the
    fulfillment or payment flow that triggered them.
    """

    def __init__(self, settings: SlackSettings):
        self.settings = settings
        self.webhook_url = settings.webhook_url
        self.prefix = settings.prefix
        logger.info("SlackNotificationService initialized")

    async def send_discrepancy_alert(
        self,
        execution_id: ExecutionID,
        store_id: str,
        discrepancy: Discrepancy,
    ) -> None:
        text = (
            f"{self.prefix} ❌ *Payment discrepancy*\n"
            f"Store: `{store_id}`\n"
            f"Payment: `{discrepancy.payment_id}`\n"
            f"Order: `{discrepancy.order_id}`\n"
            f"Order total: {discrepancy.order_total} / Paid: {discrepancy.payment_amount}\n"
            f"Delta: *{discrepancy.delta}*\n"
            f"Execution: `{execution_id}`"
        )
        await self._send_message(text, color="danger")

    async def send_payment_reminder(self, reminder: PaymentReminder) -> None:
        text = (
            f"{self.prefix} 🔔 *Payment pending* for order {reminder.order_number}\n"
            f"Customer: `{reminder.customer_id}`\n"
            f"Amount: {reminder.amount}\n"
            f"Pending since: {reminder.pending_since.isoformat()}"
        )
        await self._send_message(text, color="warning")

    async def send_batch_summary(
        self,
        operation: str,
        store_id: str,
        total: int,
        successful: int,
        failed_ids: List[str],
    ) -> bool:
        text = (
            f"{self.prefix} 📊 *{operation}* (store `{store_id}`)\n"
            f"Total: {total} | Successful: {successful} | Failed: {len(failed_ids)}"
        )
        color = "good" if not failed_ids else "warning"
        return await self._send_message(text, color=color)

    async def notify(self, message: str, severity: int = 50) -> None:
        """
        Send a generic notification message.

        Args:
            message: Notification message
            severity: Severity level (0-100, higher = more critical)
        """
        color = "danger" if severity >= 80 else "warning" if severity >= 50 else "good"
        await self._send_message(f"{self.prefix} {message}", color=color)

    async def _send_message(self, text: str, color: str = "good") -> bool:
        """
        Send message to Slack.

        Args:
            text: Message text
            color: Attachment color (good, warning, danger)

        Returns:
            True if Slack accepted the message
        """
        if not self.webhook_url:
            logger.warning("Slack webhook_url not configured, skipping notification")
            return False

        payload = {
            "attachments": [
                {
                    "color": color,
                    "text": text,
                    "mrkdwn_in": ["text"],
                }
            ]
        }
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(f"Slack API error: {response.status} - {error_text}")
                        return False
                    logger.info("Slack notification sent successfully")
                    return True
        except aiohttp.ClientError as e:
            logger.error(f"Failed to send Slack notification: {e}", exc_info=True)
            return False
