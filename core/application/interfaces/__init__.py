"""Application layer interfaces."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from core.domain.entities.payment import Payment
from core.domain.services.reconciliation import Discrepancy, PaymentReminder
from core.domain.value_objects import ExecutionID


class Clock(ABC):
    """Source of the current time (timezone-aware UTC)."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class ISettlementGateway(ABC):
    """
    Interface for the external payment settlement provider.

    Only the boolean outcome matters to the core; protocol details stay
    in the adapter. Callers bound each call with a timeout.
    """

    @abstractmethod
    async def settle(self, payment: Payment) -> bool:
        """
        Attempt to settle a pending payment.

        Args:
            payment: Payment in PENDING status

        Returns:
            True if the provider captured the funds
        """
        pass


class INotificationService(ABC):
    """
    Interface for notification service operations.

    This interface defines the contract for sending notifications,
    allowing different implementations (log, Slack webhook, etc.)
    """

    @abstractmethod
    async def send_discrepancy_alert(
        self,
        execution_id: ExecutionID,
        store_id: str,
        discrepancy: Discrepancy,
    ) -> None:
        """
        Alert that a payment does not match its order total.

        Args:
            execution_id: Execution tracking ID
            store_id: Store the payment belongs to
            discrepancy: Reported mismatch (never auto-corrected)
        """
        pass

    @abstractmethod
    async def send_payment_reminder(self, reminder: PaymentReminder) -> None:
        """
        Remind a customer about a payment still pending.

        Args:
            reminder: Reminder record
        """
        pass

    async def send_batch_summary(
        self,
        operation: str,
        store_id: str,
        total: int,
        successful: int,
        failed_ids: List[str],
    ) -> bool:
        """
        Send batch operation summary.

        Returns:
            True if the summary was delivered
        """
        return False

    async def notify(self, message: str, severity: int = 50) -> None:
        """
        Send a generic notification message.

        Args:
            message: Notification message
            severity: Severity level (0-100, higher = more critical)
        """
        # Default implementation - can be overridden
        pass


__all__ = ["Clock", "ISettlementGateway", "INotificationService"]
