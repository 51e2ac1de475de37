"""
Event Bus Implementation (Infrastructure Layer).

Notifies in-process subscribers. Persistence is not its job: events are
already in the event store, written by the Unit of Work in the same
transaction as the state change.
"""
import logging
from typing import Callable, List, Optional
import asyncio

from core.domain.event_bus import EventBus
from core.domain.events.base import DomainEvent


logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-Memory Event Bus Implementation.

    Subscribers may be sync or async callables and may filter by event
    type. A failing subscriber is logged and does not stop the others.
    """

    def __init__(self):
        self._subscribers: List[tuple] = []

    async def publish(self, event: DomainEvent) -> None:
        logger.info(f"Publishing event: {event.event_type} (aggregate: {event.aggregate_id})")
        await self._notify_subscribers(event)

    async def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    def subscribe(
        self,
        handler: Callable[[DomainEvent], None],
        event_type: Optional[str] = None,
    ) -> None:
        """
        Subscribe to domain events.

        Args:
            handler: Callback that receives events
            event_type: Only deliver events of this class name (all if None)
        """
        self._subscribers.append((handler, event_type))
        logger.info(f"Registered event subscriber: {handler.__name__}")

    def unsubscribe(self, handler: Callable[[DomainEvent], None]) -> None:
        self._subscribers = [(h, t) for h, t in self._subscribers if h is not handler]
        logger.info(f"Unregistered event subscriber: {handler.__name__}")

    async def _notify_subscribers(self, event: DomainEvent) -> None:
        for handler, event_type in list(self._subscribers):
            if event_type and event.event_type != event_type:
                continue
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(f"Subscriber {handler.__name__} failed: {e}", exc_info=True)


# Global event bus instance
_event_bus_instance: Optional[InMemoryEventBus] = None


def get_event_bus() -> InMemoryEventBus:
    """
    Get or create global event bus instance.

    Returns:
        Global event bus instance
    """
    global _event_bus_instance

    if _event_bus_instance is None:
        _event_bus_instance = InMemoryEventBus()

    return _event_bus_instance
