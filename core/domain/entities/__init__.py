"""Domain entities."""
from .order import DeliveryAssignment, Order, OrderItem
from .payment import Payment
from .store import Store

__all__ = ["DeliveryAssignment", "Order", "OrderItem", "Payment", "Store"]
