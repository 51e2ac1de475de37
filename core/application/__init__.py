"""Application layer - services, interfaces, and DTOs."""

from .dtos import (
    CreateOrderRequest,
    CreateStoreRequest,
    OrderDTO,
    OrderItemDTO,
    OrderListDTO,
    TransitionRequest,
)
from .interfaces import Clock, INotificationService, ISettlementGateway
from .services import (
    KitchenApplicationService,
    LockRegistry,
    OrderApplicationService,
    PaymentApplicationService,
    ReportingApplicationService,
)

__all__ = [
    # DTOs
    "CreateOrderRequest",
    "CreateStoreRequest",
    "OrderDTO",
    "OrderItemDTO",
    "OrderListDTO",
    "TransitionRequest",
    # Services
    "KitchenApplicationService",
    "LockRegistry",
    "OrderApplicationService",
    "PaymentApplicationService",
    "ReportingApplicationService",
    # Interfaces
    "Clock",
    "INotificationService",
    "ISettlementGateway",
]
