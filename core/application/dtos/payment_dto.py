"""Application DTOs for payment batch operations and reports."""

from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from core.domain.enums.payment_status import PaymentMethod
from core.domain.enums.revenue_trend import RevenueTrend


class ProcessPendingResultDTO(BaseModel):
    """Outcome of settling a store's PENDING payments."""

    processed: int = Field(..., ge=0, description="Settled (COMPLETED)")
    failed: int = Field(..., ge=0, description="Declined, timed out or errored (FAILED)")
    total: int = Field(..., ge=0, description="PENDING payments selected")
    failed_ids: List[str] = Field(default_factory=list)
    skipped: int = Field(default=0, ge=0, description="Already moved by another invocation")

    model_config = {"frozen": True}


class AutoRefundResultDTO(BaseModel):
    refunded: int = Field(..., ge=0)
    total: int = Field(..., ge=0, description="FAILED payments considered")
    manual_review_ids: List[str] = Field(
        default_factory=list, description="Too old for automatic refund"
    )
    failed_ids: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class RefundEligibleResultDTO(BaseModel):
    refunded: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    failed_ids: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class DiscrepancyDTO(BaseModel):
    payment_id: str
    order_id: str
    order_total: Decimal
    payment_amount: Decimal
    delta: Decimal

    model_config = {"frozen": True}


class ReconciliationResultDTO(BaseModel):
    """reconciled + len(discrepancies) == total."""

    reconciled: int = Field(..., ge=0)
    discrepancies: List[DiscrepancyDTO] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    failed_ids: List[str] = Field(
        default_factory=list, description="Compared, but the outcome could not be recorded"
    )

    model_config = {"frozen": True}


class PaymentReminderDTO(BaseModel):
    payment_id: str
    order_id: str
    order_number: str
    customer_id: str
    amount: Decimal
    pending_since: datetime
    reminder_sent_at: datetime

    model_config = {"frozen": True}


class RemindersResultDTO(BaseModel):
    sent: int = Field(..., ge=0)
    reminders: List[PaymentReminderDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class InvoiceDTO(BaseModel):
    invoice_number: str = Field(..., description="INV_<YYYY><MM>_<6 chars>")
    customer_id: str
    period: str = Field(..., description="<start date> to <end date>")
    total_amount: Decimal
    order_count: int = Field(..., ge=1)
    order_ids: List[str]
    generated_at: datetime

    model_config = {"frozen": True}


class InvoicesResultDTO(BaseModel):
    generated: int = Field(..., ge=0)
    invoices: List[InvoiceDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class RevenueForecastDTO(BaseModel):
    next_7_days: Decimal
    next_30_days: Decimal
    avg_daily_revenue: Decimal
    trend: RevenueTrend
    currency: str = "USD"

    model_config = {"frozen": True}


class PeriodStatsDTO(BaseModel):
    revenue: Decimal
    transactions: int = Field(..., ge=0)
    success_rate: Decimal = Field(..., description="Percent")

    model_config = {"frozen": True}


class PaymentAnalyticsDTO(BaseModel):
    today: PeriodStatsDTO
    this_month: PeriodStatsDTO
    last_month: PeriodStatsDTO
    growth: Decimal = Field(..., description="Month-over-month revenue growth, percent")
    currency: str = "USD"

    model_config = {"frozen": True}


class OrderPeriodStatsDTO(BaseModel):
    orders: int = Field(..., ge=0)
    revenue: Decimal
    avg_order_value: Decimal

    model_config = {"frozen": True}


class OrderAnalyticsDTO(BaseModel):
    today: OrderPeriodStatsDTO
    yesterday: OrderPeriodStatsDTO
    week: OrderPeriodStatsDTO = Field(..., description="Since midnight 7 days ago")
    order_growth: Decimal = Field(..., description="Today vs yesterday, percent")
    revenue_growth: Decimal = Field(..., description="Today vs yesterday, percent")
    currency: str = "USD"

    model_config = {"frozen": True}


class MethodStatsDTO(BaseModel):
    method: PaymentMethod
    count: int = Field(..., ge=0)
    amount: Decimal
    percentage: Decimal
    revenue_percentage: Decimal

    model_config = {"frozen": True}


class PaymentMethodStatsDTO(BaseModel):
    methods: List[MethodStatsDTO] = Field(default_factory=list)
    total_transactions: int = Field(..., ge=0)
    total_revenue: Decimal

    model_config = {"frozen": True}


class BillingSummaryDTO(BaseModel):
    pending_count: int = Field(..., ge=0)
    pending_amount: Decimal
    failed_count: int = Field(..., ge=0)
    failed_amount: Decimal
    currency: str = "USD"

    model_config = {"frozen": True}
