"""Application services."""
from .kitchen_service import KitchenApplicationService
from .locks import LockRegistry
from .order_service import OrderApplicationService
from .payment_service import PaymentApplicationService
from .reporting_service import ReportingApplicationService

__all__ = [
    "KitchenApplicationService",
    "LockRegistry",
    "OrderApplicationService",
    "PaymentApplicationService",
    "ReportingApplicationService",
]
