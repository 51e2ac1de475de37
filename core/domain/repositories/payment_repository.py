"""Repository interface for Payment entity."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from ..entities.payment import Payment
from ..enums.payment_status import PaymentStatus


class PaymentRepository(ABC):
    """Abstract repository for Payment persistence."""

    @abstractmethod
    async def add(self, payment: Payment) -> None:
        pass

    @abstractmethod
    async def update(self, payment: Payment, expected_status: PaymentStatus) -> bool:
        """Compare-and-set write.

        Applies only when the stored row still has ``expected_status`` and
        ``payment.version``. Returns False when another writer got there
        first; the caller skips the payment.
        """
        pass

    @abstractmethod
    async def get(self, payment_id: str) -> Optional[Payment]:
        pass

    @abstractmethod
    async def get_by_order(self, order_id: str) -> Optional[Payment]:
        pass

    @abstractmethod
    async def list_by_store(
        self,
        store_id: str,
        statuses: Optional[Iterable[PaymentStatus]] = None,
        created_after: Optional[datetime] = None,
    ) -> List[Payment]:
        """List a store's payments, oldest first, optionally filtered."""
        pass
