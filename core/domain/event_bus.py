"""
Event bus port.

Units of Work hand over the events collected from orders and payments
once their transaction has committed.
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .events.base import DomainEvent


class EventBus(ABC):
    """Fan-out of committed domain events to in-process subscribers."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        pass

    @abstractmethod
    async def publish_all(self, events: List[DomainEvent]) -> None:
        """Publish events in the order they were recorded."""
        pass

    @abstractmethod
    def subscribe(
        self,
        handler: Callable[[DomainEvent], None],
        event_type: Optional[str] = None,
    ) -> None:
        """Register a handler, optionally only for one event class name."""
        pass
