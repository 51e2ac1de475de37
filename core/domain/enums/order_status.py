"""
Order Status Enum.

Lifecycle values for a delivery order. An order holds exactly one of
these at a time.
"""
from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle status values."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    PREPARING = "PREPARING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    @property
    def is_terminal(self) -> bool:
        """Terminal orders accept no further transitions."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

# Orders currently occupying the kitchen queue
KITCHEN_ACTIVE_STATUSES = frozenset({
    OrderStatus.ACCEPTED,
    OrderStatus.PREPARING,
})

# Statuses shown on the dispatch board
DISPATCH_BOARD_STATUSES = (
    OrderStatus.ACCEPTED,
    OrderStatus.PREPARING,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.OUT_FOR_DELIVERY,
)
