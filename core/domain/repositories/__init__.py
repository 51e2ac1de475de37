"""Repository interfaces."""
from .order_repository import OrderRepository
from .payment_repository import PaymentRepository
from .store_repository import StoreRepository

__all__ = ["OrderRepository", "PaymentRepository", "StoreRepository"]
