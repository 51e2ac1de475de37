"""Builders for domain objects and requests used across tests."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from core.application.dtos import CreateOrderRequest, OrderItemDTO
from core.domain.entities.order import Order, OrderItem
from core.domain.entities.payment import Payment
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.payment_status import PaymentMethod, PaymentStatus
from core.domain.value_objects import Money, OrderNumber

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def build_order(
    status: OrderStatus = OrderStatus.PENDING,
    created_at: datetime = NOW,
    number: int = 1001,
    customer_id: str = "cust-1",
    prep_minutes: int = 10,
    quantity: int = 1,
    unit_price: str = "10.00",
    payment_status: Optional[PaymentStatus] = PaymentStatus.PENDING,
) -> Order:
    order = Order.create(
        order_number=OrderNumber(number),
        store_id="store-1",
        customer_id=customer_id,
        items=[
            OrderItem(
                menu_item_id="item-1",
                name="Bowl",
                quantity=quantity,
                unit_price=Money(Decimal(unit_price)),
                prep_time_minutes=prep_minutes,
            )
        ],
        tax=Money(Decimal("0")),
        delivery_fee=Money(Decimal("0")),
        created_at=created_at,
    )
    order.status = status
    order.payment_status = payment_status
    order.clear_domain_events()
    return order


def build_payment(
    order: Optional[Order] = None,
    amount: Optional[str] = None,
    status: PaymentStatus = PaymentStatus.PENDING,
    created_at: datetime = NOW,
    method: PaymentMethod = PaymentMethod.CARD,
) -> Payment:
    order = order or build_order()
    payment = Payment.create(
        order_id=order.order_id,
        store_id=order.store_id,
        amount=Money(Decimal(amount)) if amount is not None else order.total,
        method=method,
        created_at=created_at,
    )
    payment.status = status
    return payment


def make_order_request(store_id: str, customer_id: str = "cust-1", **overrides) -> CreateOrderRequest:
    """Two burgers (10 min each) and fries (5 min): subtotal 18.00, total 20.25."""
    data = {
        "store_id": store_id,
        "customer_id": customer_id,
        "items": [
            OrderItemDTO(
                menu_item_id="burger", name="Burger", quantity=2,
                unit_price=Decimal("7.00"), prep_time_minutes=10,
            ),
            OrderItemDTO(
                menu_item_id="fries", name="Fries", quantity=1,
                unit_price=Decimal("4.00"), prep_time_minutes=5,
            ),
        ],
        "tax": Decimal("1.25"),
        "delivery_fee": Decimal("1.00"),
    }
    data.update(overrides)
    return CreateOrderRequest(**data)
