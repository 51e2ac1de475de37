"""SQLAlchemy repository implementations."""
from .order_repository_impl import SqlAlchemyOrderRepository
from .payment_repository_impl import SqlAlchemyPaymentRepository
from .store_repository_impl import SqlAlchemyStoreRepository

__all__ = [
    "SqlAlchemyOrderRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyStoreRepository",
]
