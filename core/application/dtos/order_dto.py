"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from core.domain.enums.order_status import OrderStatus
from core.domain.enums.payment_status import PaymentMethod, PaymentStatus
from core.domain.enums.role import Role


class OrderItemDTO(BaseModel):
    """DTO for order item."""

    menu_item_id: str = Field(..., min_length=1, description="Menu item reference")
    name: str = Field(..., min_length=1, description="Menu item name")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    unit_price: Decimal = Field(..., ge=0, description="Unit price")
    prep_time_minutes: int = Field(default=0, ge=0, description="Preparation minutes per unit")

    model_config = {"frozen": True}


class CreateOrderRequest(BaseModel):
    """Request DTO for placing an order (from the checkout collaborator)."""

    store_id: str = Field(..., description="Store receiving the order")
    customer_id: str = Field(..., description="Customer placing the order")
    items: List[OrderItemDTO] = Field(..., min_length=1, description="Order items")
    tax: Decimal = Field(default=Decimal("0"), ge=0, description="Tax amount")
    delivery_fee: Decimal = Field(default=Decimal("0"), ge=0, description="Delivery fee")
    total: Optional[Decimal] = Field(
        None, ge=0, description="Total as priced by checkout; must equal subtotal + tax + delivery fee"
    )
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO currency code")
    payment_method: PaymentMethod = Field(default=PaymentMethod.CARD, description="Payment method")
    payment_amount: Optional[Decimal] = Field(
        None, ge=0, description="Captured amount if it differs from the total"
    )

    model_config = {"frozen": True}


class DeliveryAssignmentDTO(BaseModel):
    """Courier assignment on an order."""

    courier_id: str
    assigned_at: datetime
    delivered_at: Optional[datetime] = None
    distance_km: Decimal
    earnings: Decimal

    model_config = {"frozen": True}


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    order_id: str = Field(..., description="Order ID")
    order_number: str = Field(..., description="Human-readable order number, e.g. #1001")
    store_id: str
    customer_id: str
    status: OrderStatus
    items: List[OrderItemDTO] = Field(default_factory=list)
    currency: str = Field(default="USD", description="Currency code")
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    total: Decimal
    payment_status: Optional[PaymentStatus] = None
    created_at: datetime
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    delivery: Optional[DeliveryAssignmentDTO] = None
    version: int = Field(..., ge=0, description="Optimistic concurrency version")

    model_config = {"frozen": True}


class OrderListDTO(BaseModel):
    """DTO for listing orders."""

    orders: List[OrderDTO] = Field(default_factory=list, description="List of orders")
    total: int = Field(..., ge=0, description="Total count")

    model_config = {"frozen": True}


class TransitionRequest(BaseModel):
    """Request DTO for moving an order along the state machine."""

    target_status: OrderStatus = Field(..., description="Requested status")
    role: Role = Field(..., description="Role of the acting user (resolved upstream)")
    actor_id: Optional[str] = Field(None, description="Acting user id, e.g. courier id")
    expected_status: Optional[OrderStatus] = Field(
        None, description="Status the caller last observed; mismatch fails with 409"
    )
    courier_id: Optional[str] = Field(None, description="Courier to assign on OUT_FOR_DELIVERY")
    distance_km: Optional[Decimal] = Field(None, ge=0, description="Delivery distance in km")
    reason: Optional[str] = Field(None, max_length=500)

    model_config = {"frozen": True}


class AllowedTransitionsDTO(BaseModel):
    order_id: str
    status: OrderStatus
    role: Role
    allowed: List[OrderStatus]

    model_config = {"frozen": True}


class OrderSlaDTO(BaseModel):
    """Deadline view of an order."""

    order_id: str
    status: OrderStatus
    estimated_delivery: Optional[datetime] = None
    time_remaining_seconds: Optional[float] = Field(
        None, description="Seconds until the deadline; <= 0 means overdue"
    )
    overdue: bool

    model_config = {"frozen": True}


class StatusChangeDTO(BaseModel):
    previous_status: OrderStatus
    new_status: OrderStatus
    role: Optional[Role] = None
    actor_id: Optional[str] = None
    reason: Optional[str] = None
    occurred_at: datetime

    model_config = {"frozen": True}


class OrderHistoryDTO(BaseModel):
    """Observed status history of one order, oldest first."""

    order_id: str
    created_at: datetime
    transitions: List[StatusChangeDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class AutoCancelResultDTO(BaseModel):
    cancelled: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    order_ids: List[str] = Field(default_factory=list)
    failed_ids: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class CourierSummaryDTO(BaseModel):
    """Courier dashboard: today's work and current deliveries."""

    courier_id: str
    today_deliveries: int = Field(..., ge=0)
    today_earnings: Decimal
    active_deliveries: List[str] = Field(default_factory=list, description="Order ids out for delivery")
    currency: str = "USD"

    model_config = {"frozen": True}


class DeliveryStatusDTO(BaseModel):
    """Dispatch board: orders per active status."""

    store_id: str
    counts: Dict[OrderStatus, int]
    total_active: int

    model_config = {"frozen": True}


def order_to_dto(order) -> OrderDTO:
    """Transform Order domain aggregate to OrderDTO."""
    delivery = None
    if order.delivery:
        delivery = DeliveryAssignmentDTO(
            courier_id=order.delivery.courier_id,
            assigned_at=order.delivery.assigned_at,
            delivered_at=order.delivery.delivered_at,
            distance_km=order.delivery.distance_km,
            earnings=order.delivery.earnings.amount,
        )
    return OrderDTO(
        order_id=order.order_id,
        order_number=str(order.order_number),
        store_id=order.store_id,
        customer_id=order.customer_id,
        status=order.status,
        items=[
            OrderItemDTO(
                menu_item_id=item.menu_item_id,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price.amount,
                prep_time_minutes=item.prep_time_minutes,
            )
            for item in order.items
        ],
        currency=order.total.currency,
        subtotal=order.subtotal.amount,
        tax=order.tax.amount,
        delivery_fee=order.delivery_fee.amount,
        total=order.total.amount,
        payment_status=order.payment_status,
        created_at=order.created_at,
        estimated_delivery=order.estimated_delivery,
        actual_delivery=order.actual_delivery,
        delivery=delivery,
        version=order.version,
    )
