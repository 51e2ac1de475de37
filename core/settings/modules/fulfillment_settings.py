from decimal import Decimal

from pydantic import Field

from core.settings.base import OrderflowBaseSettings


class FulfillmentSettings(OrderflowBaseSettings):
    """
    Order fulfillment settings: SLA, kitchen workload and courier pay.
    Loaded from .env file with exact variable name matching.
    """

    delivery_buffer_minutes: int = Field(default=15, ge=0, alias="FULFILLMENT_DELIVERY_BUFFER_MINUTES")
    estimate_on_create: bool = Field(default=False, alias="FULFILLMENT_ESTIMATE_ON_CREATE")
    operating_hours: int = Field(default=12, ge=1, le=24, alias="FULFILLMENT_OPERATING_HOURS")
    kitchen_capacity: int = Field(default=1, ge=1, alias="FULFILLMENT_KITCHEN_CAPACITY")
    workload_low_max: float = Field(default=10, ge=0, alias="FULFILLMENT_WORKLOAD_LOW_MAX")
    workload_medium_max: float = Field(default=15, ge=0, alias="FULFILLMENT_WORKLOAD_MEDIUM_MAX")
    stale_pending_minutes: int = Field(default=30, ge=1, alias="FULFILLMENT_STALE_PENDING_MINUTES")
    courier_base_fee: Decimal = Field(default=Decimal("2.50"), ge=0, alias="COURIER_BASE_FEE")
    courier_per_km_fee: Decimal = Field(default=Decimal("0.50"), ge=0, alias="COURIER_PER_KM_FEE")
    currency: str = Field(default="USD", min_length=3, max_length=3, alias="FULFILLMENT_CURRENCY")
