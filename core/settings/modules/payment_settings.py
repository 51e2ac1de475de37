from decimal import Decimal
from typing import Literal

from pydantic import Field

from core.settings.base import OrderflowBaseSettings


class PaymentSettings(OrderflowBaseSettings):
    """
    Payment bookkeeping settings.
    Loaded from .env file with exact variable name matching.
    """

    reconciliation_tolerance: Decimal = Field(default=Decimal("0.01"), ge=0, alias="PAYMENT_RECONCILIATION_TOLERANCE")
    auto_refund_window_hours: int = Field(default=24, ge=0, alias="PAYMENT_AUTO_REFUND_WINDOW_HOURS")
    reminder_after_minutes: int = Field(default=60, ge=0, alias="PAYMENT_REMINDER_AFTER_MINUTES")
    settlement_timeout_seconds: float = Field(default=10.0, gt=0, alias="PAYMENT_SETTLEMENT_TIMEOUT_SECONDS")
    settlement_provider: Literal["mock", "http"] = Field(default="mock", alias="PAYMENT_SETTLEMENT_PROVIDER")
    settlement_url: str = Field(default="", alias="PAYMENT_SETTLEMENT_URL")
    settlement_success_rate: float = Field(default=0.9, ge=0, le=1, alias="PAYMENT_SETTLEMENT_SUCCESS_RATE")
    forecast_window_days: int = Field(default=30, ge=14, alias="PAYMENT_FORECAST_WINDOW_DAYS")
