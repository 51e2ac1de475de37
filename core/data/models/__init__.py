"""Database models."""

from .base import Base, UTCDateTime
from .event_model import EventModel
from .order_model import OrderItemModel, OrderModel
from .payment_model import PaymentModel
from .store_model import StoreModel

__all__ = [
    "Base",
    "EventModel",
    "OrderItemModel",
    "OrderModel",
    "PaymentModel",
    "StoreModel",
    "UTCDateTime",
]
