"""Repository interfaces for Order aggregate."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from ..entities.order import Order
from ..enums.order_status import OrderStatus


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def add(self, order: Order) -> None:
        """Persist a newly placed order.

        Args:
            order: Order aggregate to insert
        """
        pass

    @abstractmethod
    async def update(self, order: Order) -> None:
        """Write order state guarded by its version.

        The write only applies when the stored version still equals
        ``order.version``; on success the version is incremented.

        Raises:
            StaleState: the order was changed by someone else since it was read
        """
        pass

    @abstractmethod
    async def get(self, order_id: str) -> Optional[Order]:
        """Retrieve order by unique identifier.

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_store(
        self,
        store_id: str,
        statuses: Optional[Iterable[OrderStatus]] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> List[Order]:
        """List a store's orders, oldest first, optionally filtered."""
        pass

    @abstractmethod
    async def list_by_courier(self, courier_id: str) -> List[Order]:
        """Orders currently or previously assigned to a courier."""
        pass
