"""Application DTOs."""

from .order_dto import (
    AllowedTransitionsDTO,
    AutoCancelResultDTO,
    CourierSummaryDTO,
    CreateOrderRequest,
    DeliveryAssignmentDTO,
    DeliveryStatusDTO,
    OrderDTO,
    OrderHistoryDTO,
    OrderItemDTO,
    OrderListDTO,
    OrderSlaDTO,
    StatusChangeDTO,
    TransitionRequest,
    order_to_dto,
)
from .payment_dto import (
    AutoRefundResultDTO,
    BillingSummaryDTO,
    DiscrepancyDTO,
    InvoiceDTO,
    InvoicesResultDTO,
    MethodStatsDTO,
    OrderAnalyticsDTO,
    OrderPeriodStatsDTO,
    PaymentAnalyticsDTO,
    PaymentMethodStatsDTO,
    PaymentReminderDTO,
    PeriodStatsDTO,
    ProcessPendingResultDTO,
    ReconciliationResultDTO,
    RefundEligibleResultDTO,
    RemindersResultDTO,
    RevenueForecastDTO,
)
from .store_dto import (
    CreateStoreRequest,
    KitchenQueueDTO,
    KitchenWorkloadDTO,
    OverdueOrderDTO,
    OverdueOrdersDTO,
    QueueEntryDTO,
    StoreDTO,
)

__all__ = [
    "AllowedTransitionsDTO",
    "AutoCancelResultDTO",
    "AutoRefundResultDTO",
    "BillingSummaryDTO",
    "CourierSummaryDTO",
    "CreateOrderRequest",
    "CreateStoreRequest",
    "DeliveryAssignmentDTO",
    "DeliveryStatusDTO",
    "DiscrepancyDTO",
    "InvoiceDTO",
    "InvoicesResultDTO",
    "KitchenQueueDTO",
    "KitchenWorkloadDTO",
    "MethodStatsDTO",
    "OrderAnalyticsDTO",
    "OrderDTO",
    "OrderHistoryDTO",
    "OrderItemDTO",
    "OrderListDTO",
    "OrderPeriodStatsDTO",
    "OrderSlaDTO",
    "OverdueOrderDTO",
    "OverdueOrdersDTO",
    "PaymentAnalyticsDTO",
    "PaymentMethodStatsDTO",
    "PaymentReminderDTO",
    "PeriodStatsDTO",
    "ProcessPendingResultDTO",
    "QueueEntryDTO",
    "ReconciliationResultDTO",
    "RefundEligibleResultDTO",
    "RemindersResultDTO",
    "RevenueForecastDTO",
    "StatusChangeDTO",
    "StoreDTO",
    "TransitionRequest",
    "order_to_dto",
]
