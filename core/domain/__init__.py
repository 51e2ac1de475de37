"""Domain layer - pure domain models and interfaces."""

from .entities import DeliveryAssignment, Order, OrderItem, Payment, Store
from .repositories import OrderRepository, PaymentRepository, StoreRepository
from .value_objects import ExecutionID, Money, OrderNumber

__all__ = [
    "DeliveryAssignment",
    "ExecutionID",
    "Money",
    "Order",
    "OrderItem",
    "OrderNumber",
    "OrderRepository",
    "Payment",
    "PaymentRepository",
    "Store",
    "StoreRepository",
]
