"""Data layer - infrastructure persistence and mapping."""

from .event_store import ConcurrencyError, EventStore
from .mappers import OrderItemMapper, OrderMapper, PaymentMapper, StoreMapper
from .models import Base, EventModel, OrderItemModel, OrderModel, PaymentModel, StoreModel
from .repositories import (
    SqlAlchemyOrderRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyStoreRepository,
)
from .uow import UnitOfWork, create_uow

__all__ = [
    "Base",
    "ConcurrencyError",
    "create_uow",
    "EventModel",
    "EventStore",
    "OrderItemMapper",
    "OrderItemModel",
    "OrderMapper",
    "OrderModel",
    "PaymentMapper",
    "PaymentModel",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyStoreRepository",
    "StoreMapper",
    "StoreModel",
    "UnitOfWork",
]
