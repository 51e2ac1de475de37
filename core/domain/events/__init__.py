"""Domain events for the event store and event bus."""
from .base import DomainEvent
from .order_events import (
    OrderCreatedEvent,
    OrderStatusChangedEvent,
    OrderDeliveredEvent,
    PaymentStatusChangedEvent,
    PaymentDiscrepancyDetectedEvent,
)

__all__ = [
    "DomainEvent",
    "OrderCreatedEvent",
    "OrderStatusChangedEvent",
    "OrderDeliveredEvent",
    "PaymentStatusChangedEvent",
    "PaymentDiscrepancyDetectedEvent",
]
