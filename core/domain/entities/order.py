"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional
import uuid

from ..enums.order_status import OrderStatus
from ..enums.payment_status import PaymentStatus
from ..events.base import DomainEvent
from ..events.order_events import (
    OrderCreatedEvent,
    OrderDeliveredEvent,
    OrderStatusChangedEvent,
)
from ..value_objects import CENT, ExecutionID, Money, OrderNumber


@dataclass
class OrderItem:
    """Line item: a menu item reference with quantity and per-unit prep time."""
    menu_item_id: str
    name: str
    quantity: int
    unit_price: Money
    prep_time_minutes: int = 0

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got: {self.quantity}")
        if self.prep_time_minutes < 0:
            raise ValueError(
                f"Preparation time cannot be negative, got: {self.prep_time_minutes}"
            )

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def prep_minutes(self) -> int:
        """Preparation minutes for the whole line (per-unit time x quantity)."""
        return self.prep_time_minutes * self.quantity


@dataclass
class DeliveryAssignment:
    """Courier assignment owned by an order."""
    courier_id: str
    assigned_at: datetime
    distance_km: Decimal
    earnings: Money
    delivered_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.delivered_at is None


@dataclass
class Order:
    """
    Order aggregate root.

    Status only changes through OrderStateMachine, which calls the
    mutators below after all checks have passed. Each mutator records the
    matching domain event; the Unit of Work collects them on commit.
    """
    order_id: str
    order_number: OrderNumber
    store_id: str
    customer_id: str
    items: List[OrderItem]
    subtotal: Money
    tax: Money
    delivery_fee: Money
    total: Money
    created_at: datetime
    status: OrderStatus = OrderStatus.PENDING
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    payment_status: Optional[PaymentStatus] = None
    delivery: Optional[DeliveryAssignment] = None
    version: int = 0
    execution_id: Optional[ExecutionID] = None

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.check_total()

    @classmethod
    def create(
        cls,
        order_number: OrderNumber,
        store_id: str,
        customer_id: str,
        items: List[OrderItem],
        tax: Money,
        delivery_fee: Money,
        created_at: datetime,
        total: Optional[Money] = None,
        order_id: Optional[str] = None,
        execution_id: Optional[ExecutionID] = None,
    ) -> "Order":
        """
        Factory method to place a new order.

        subtotal is derived from the items. When total is supplied by the
        caller it must agree with subtotal + tax + delivery_fee within one
        cent, otherwise ValueError.

        Returns:
            New PENDING order with OrderCreatedEvent collected
        """
        if not items:
            raise ValueError("Order must contain at least one item")

        currency = tax.currency
        subtotal = Money.zero(currency)
        for item in items:
            subtotal = subtotal + item.line_total

        order = cls(
            order_id=order_id or str(uuid.uuid4()),
            order_number=order_number,
            store_id=store_id,
            customer_id=customer_id,
            items=list(items),
            subtotal=subtotal,
            tax=tax,
            delivery_fee=delivery_fee,
            total=total if total is not None else subtotal + tax + delivery_fee,
            created_at=created_at,
            payment_status=PaymentStatus.PENDING,
            execution_id=execution_id,
        )
        order._record_event(
            OrderCreatedEvent(
                order_id=order.order_id,
                store_id=store_id,
                customer_id=customer_id,
                order_number=str(order_number),
                total=str(order.total.amount),
                currency=order.total.currency,
                execution_id=str(execution_id) if execution_id else None,
                occurred_at=created_at,
            )
        )
        return order

    # =========================================================================
    # INVARIANTS
    # =========================================================================

    def check_total(self) -> None:
        """Raise ValueError unless total == subtotal + tax + delivery_fee (within 0.01)."""
        expected = self.subtotal + self.tax + self.delivery_fee
        if self.total.differs_from(expected, CENT):
            raise ValueError(
                f"Order total {self.total} does not match "
                f"subtotal {self.subtotal} + tax {self.tax} "
                f"+ delivery fee {self.delivery_fee}"
            )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def aggregate_prep_time(self) -> timedelta:
        """Serial kitchen time: sum of per-unit prep minutes x quantity."""
        return timedelta(minutes=sum(item.prep_minutes for item in self.items))

    @property
    def courier_id(self) -> Optional[str]:
        return self.delivery.courier_id if self.delivery else None

    # =========================================================================
    # MUTATORS (called by OrderStateMachine / SLATracker)
    # =========================================================================

    def change_status(
        self,
        new_status: OrderStatus,
        now: datetime,
        role: Optional[str] = None,
        actor_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        previous = self.status
        self.status = new_status
        self._record_event(
            OrderStatusChangedEvent(
                order_id=self.order_id,
                previous_status=previous.value,
                new_status=new_status.value,
                role=role,
                reason=reason,
                actor_id=actor_id,
                execution_id=str(self.execution_id) if self.execution_id else None,
                occurred_at=now,
            )
        )

    def set_estimate(self, estimated_delivery: datetime) -> None:
        self.estimated_delivery = estimated_delivery

    def assign_courier(self, assignment: DeliveryAssignment) -> None:
        self.delivery = assignment

    def release_courier(self) -> None:
        self.delivery = None

    def mark_delivered(self, now: datetime) -> None:
        """Stamp actual delivery; the only place that sets it."""
        self.actual_delivery = now
        if self.delivery:
            self.delivery.delivered_at = now
        self._record_event(
            OrderDeliveredEvent(
                order_id=self.order_id,
                courier_id=self.courier_id,
                actual_delivery=now.isoformat(),
                earnings=str(self.delivery.earnings.amount) if self.delivery else None,
                execution_id=str(self.execution_id) if self.execution_id else None,
                occurred_at=now,
            )
        )

    def mirror_payment_status(self, status: PaymentStatus) -> None:
        self.payment_status = status

    # =========================================================================
    # EVENT COLLECTION
    # =========================================================================

    def get_domain_events(self) -> List[DomainEvent]:
        """
        Get all domain events collected by this aggregate.

        Returns:
            List of domain events (appended to the event store on commit)
        """
        return list(self._domain_events)

    def clear_domain_events(self) -> None:
        """Clear all collected domain events (after publishing)."""
        self._domain_events.clear()

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)
