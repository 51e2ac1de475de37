"""
Domain exceptions.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from typing import Optional


class DomainError(Exception):
    """Base class for all fulfillment domain errors."""


class InvalidTransition(DomainError):
    """
    Requested order edge is not allowed.

    Raised when the edge is not in the adjacency table, the acting role
    is not authorized for it, or the courier does not own the delivery.
    Always raised before any write.
    """

    def __init__(
        self,
        order_id: str,
        current: str,
        requested: str,
        role: Optional[str] = None,
        reason: str = "edge not allowed",
    ):
        self.order_id = order_id
        self.current = current
        self.requested = requested
        self.role = role
        self.reason = reason
        role_part = f" for role {role}" if role else ""
        super().__init__(
            f"Invalid transition {self.edge}{role_part} on order {order_id}: {reason}"
        )

    @property
    def edge(self) -> str:
        return f"{self.current} -> {self.requested}"


class StaleState(DomainError):
    """Order changed between read and write (lost update)."""

    def __init__(self, order_id: str, expected: str, actual: str):
        self.order_id = order_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Order {order_id} is stale: expected {expected}, found {actual}"
        )


class InvalidPaymentTransition(DomainError):
    """Requested payment status edge is not allowed."""

    def __init__(self, payment_id: str, current: str, requested: str):
        self.payment_id = payment_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid payment transition {current} -> {requested} on payment {payment_id}"
        )


class OrderNotFound(DomainError):
    """No order with the given id."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class UnknownStore(DomainError):
    """No store with the given id."""

    def __init__(self, store_id: str):
        self.store_id = store_id
        super().__init__(f"Unknown store: {store_id}")
