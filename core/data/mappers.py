"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from uuid import UUID

from core.domain.entities.order import DeliveryAssignment, Order, OrderItem
from core.domain.entities.payment import Payment
from core.domain.entities.store import Store
from core.domain.enums.order_status import OrderStatus
from core.domain.enums.payment_status import PaymentMethod, PaymentStatus
from core.domain.value_objects import ExecutionID, Money, OrderNumber

from .models.order_model import OrderItemModel, OrderModel
from .models.payment_model import PaymentModel
from .models.store_model import StoreModel


def _money(value, currency: str) -> Money:
    return Money(amount=Decimal(str(value)), currency=currency)


def _execution_id(value):
    return ExecutionID(UUID(value)) if value else None


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel, currency: str) -> OrderItem:
        return OrderItem(
            menu_item_id=model.menu_item_id,
            name=model.name,
            quantity=model.quantity,
            unit_price=_money(model.unit_price, currency),
            prep_time_minutes=model.prep_time_minutes,
        )

    @staticmethod
    def to_persistence(entity: OrderItem, order_id: str, position: int) -> OrderItemModel:
        return OrderItemModel(
            order_id=order_id,
            position=position,
            menu_item_id=entity.menu_item_id,
            name=entity.name,
            quantity=entity.quantity,
            unit_price=entity.unit_price.amount,
            prep_time_minutes=entity.prep_time_minutes,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        """Convert ORM model to domain aggregate (with nested items).

        Args:
            model: OrderModel instance

        Returns:
            Order domain aggregate (no pending events)
        """
        currency = model.currency
        items = [OrderItemMapper.to_domain(item, currency) for item in model.items]

        delivery = None
        if model.courier_id:
            delivery = DeliveryAssignment(
                courier_id=model.courier_id,
                assigned_at=model.courier_assigned_at,
                distance_km=Decimal(str(model.delivery_distance_km or 0)),
                earnings=_money(model.courier_earnings or 0, currency),
                delivered_at=model.delivered_at,
            )

        return Order(
            order_id=model.order_id,
            order_number=OrderNumber(model.order_number),
            store_id=model.store_id,
            customer_id=model.customer_id,
            items=items,
            subtotal=_money(model.subtotal, currency),
            tax=_money(model.tax, currency),
            delivery_fee=_money(model.delivery_fee, currency),
            total=_money(model.total, currency),
            created_at=model.created_at,
            status=OrderStatus(model.status),
            estimated_delivery=model.estimated_delivery,
            actual_delivery=model.actual_delivery,
            payment_status=PaymentStatus(model.payment_status) if model.payment_status else None,
            delivery=delivery,
            version=model.version,
            execution_id=_execution_id(model.execution_id),
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert domain aggregate to a new ORM model (insert path)."""
        model = OrderModel(
            order_id=entity.order_id,
            order_number=entity.order_number.value,
            store_id=entity.store_id,
            customer_id=entity.customer_id,
            currency=entity.total.currency,
            subtotal=entity.subtotal.amount,
            tax=entity.tax.amount,
            delivery_fee=entity.delivery_fee.amount,
            total=entity.total.amount,
            created_at=entity.created_at,
            version=entity.version,
            execution_id=str(entity.execution_id) if entity.execution_id else None,
            items=[
                OrderItemMapper.to_persistence(item, entity.order_id, position)
                for position, item in enumerate(entity.items)
            ],
        )
        for key, value in OrderMapper.mutable_values(entity).items():
            setattr(model, key, value)
        return model

    @staticmethod
    def mutable_values(entity: Order) -> dict:
        """Columns a transition may change (update path)."""
        delivery = entity.delivery
        return {
            "status": entity.status.value,
            "payment_status": entity.payment_status.value if entity.payment_status else None,
            "estimated_delivery": entity.estimated_delivery,
            "actual_delivery": entity.actual_delivery,
            "courier_id": delivery.courier_id if delivery else None,
            "courier_assigned_at": delivery.assigned_at if delivery else None,
            "delivery_distance_km": delivery.distance_km if delivery else None,
            "courier_earnings": delivery.earnings.amount if delivery else None,
            "delivered_at": delivery.delivered_at if delivery else None,
        }


class PaymentMapper:
    """Static mapper for Payment ↔ PaymentModel transformation."""

    @staticmethod
    def to_domain(model: PaymentModel) -> Payment:
        return Payment(
            payment_id=model.payment_id,
            order_id=model.order_id,
            store_id=model.store_id,
            amount=_money(model.amount, model.currency),
            method=PaymentMethod(model.method),
            created_at=model.created_at,
            status=PaymentStatus(model.status),
            transaction_id=model.transaction_id,
            refund_eligible=bool(model.refund_eligible),
            reconciled_at=model.reconciled_at,
            updated_at=model.updated_at,
            version=model.version,
            execution_id=_execution_id(model.execution_id),
        )

    @staticmethod
    def to_persistence(entity: Payment) -> PaymentModel:
        model = PaymentModel(
            payment_id=entity.payment_id,
            order_id=entity.order_id,
            store_id=entity.store_id,
            amount=entity.amount.amount,
            currency=entity.amount.currency,
            method=entity.method.value,
            created_at=entity.created_at,
            version=entity.version,
            execution_id=str(entity.execution_id) if entity.execution_id else None,
        )
        for key, value in PaymentMapper.mutable_values(entity).items():
            setattr(model, key, value)
        return model

    @staticmethod
    def mutable_values(entity: Payment) -> dict:
        return {
            "status": entity.status.value,
            "transaction_id": entity.transaction_id,
            "refund_eligible": entity.refund_eligible,
            "reconciled_at": entity.reconciled_at,
            "updated_at": entity.updated_at,
        }


class StoreMapper:
    """Static mapper for Store ↔ StoreModel transformation."""

    @staticmethod
    def to_domain(model: StoreModel) -> Store:
        return Store(
            store_id=model.store_id,
            name=model.name,
            operating_hours=model.operating_hours,
            kitchen_capacity=model.kitchen_capacity,
            last_order_number=model.last_order_number,
            created_at=model.created_at,
        )

    @staticmethod
    def to_persistence(entity: Store) -> StoreModel:
        return StoreModel(
            store_id=entity.store_id,
            name=entity.name,
            operating_hours=entity.operating_hours,
            kitchen_capacity=entity.kitchen_capacity,
            last_order_number=entity.last_order_number,
            created_at=entity.created_at,
        )

    @staticmethod
    def update_persistence(entity: Store, model: StoreModel) -> None:
        model.name = entity.name
        model.operating_hours = entity.operating_hours
        model.kitchen_capacity = entity.kitchen_capacity
        model.last_order_number = entity.last_order_number
