"""
Order and Payment Domain Events.

Recorded by the Order and Payment aggregates (and by the reconciler for
discrepancies), stored in the event store and published on the event bus.
"""
from dataclasses import dataclass
from typing import Optional

from .base import DomainEvent


@dataclass
class OrderCreatedEvent(DomainEvent):
    """
    Order was placed.

    Trigger: create_order
    Consumers: kitchen board, notification service
    """

    order_id: str = ""
    store_id: str = ""
    customer_id: str = ""
    order_number: str = ""
    total: str = "0"
    currency: str = "USD"

    def __post_init__(self):
        """Set aggregate_id to order_id."""
        if not self.aggregate_id and self.order_id:
            self.aggregate_id = self.order_id
        super().__post_init__()


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """
    Order moved along one edge of the fulfillment state machine.

    The sequence of these events for one order is its observable status
    history and always forms a valid walk of the transition table.
    """

    order_id: str = ""
    previous_status: str = ""
    new_status: str = ""
    role: Optional[str] = None
    reason: Optional[str] = None

    def __post_init__(self):
        """Set aggregate_id to order_id."""
        if not self.aggregate_id and self.order_id:
            self.aggregate_id = self.order_id
        super().__post_init__()


@dataclass
class OrderDeliveredEvent(DomainEvent):
    """Order reached DELIVERED; carries courier and earnings."""

    order_id: str = ""
    courier_id: Optional[str] = None
    actual_delivery: str = ""
    earnings: Optional[str] = None

    def __post_init__(self):
        if not self.aggregate_id and self.order_id:
            self.aggregate_id = self.order_id
        super().__post_init__()


@dataclass
class PaymentStatusChangedEvent(DomainEvent):
    """Payment moved along one edge of the payment state machine."""

    payment_id: str = ""
    order_id: str = ""
    previous_status: str = ""
    new_status: str = ""
    transaction_id: Optional[str] = None

    def __post_init__(self):
        if not self.aggregate_id and self.payment_id:
            self.aggregate_id = self.payment_id
        super().__post_init__()


@dataclass
class PaymentDiscrepancyDetectedEvent(DomainEvent):
    """
    Payment amount differs from its order total beyond tolerance.

    Raised by reconciliation. Discrepancies are reported, never corrected.
    """

    payment_id: str = ""
    order_id: str = ""
    order_total: str = "0"
    payment_amount: str = "0"
    delta: str = "0"

    def __post_init__(self):
        if not self.aggregate_id and self.payment_id:
            self.aggregate_id = self.payment_id
        super().__post_init__()
