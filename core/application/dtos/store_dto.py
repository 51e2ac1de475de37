"""Application DTOs for Store and kitchen operations."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from core.domain.enums.order_status import OrderStatus
from core.domain.enums.workload_level import WorkloadLevel


class CreateStoreRequest(BaseModel):
    """Request DTO for registering a store."""

    name: str = Field(..., min_length=1, max_length=255)
    operating_hours: Optional[int] = Field(None, ge=1, le=24, description="Hours open per day")
    kitchen_capacity: Optional[int] = Field(None, ge=1, description="Orders prepared in parallel")

    model_config = {"frozen": True}


class StoreDTO(BaseModel):
    store_id: str
    name: str
    operating_hours: int
    kitchen_capacity: int
    created_at: Optional[datetime] = None

    model_config = {"frozen": True}


class KitchenWorkloadDTO(BaseModel):
    """Kitchen pressure snapshot."""

    store_id: str
    active_orders: int = Field(..., ge=0)
    total_prep_time: int = Field(..., ge=0, description="Minutes")
    avg_prep_time: float = Field(..., ge=0, description="Minutes")
    workload_level: WorkloadLevel
    estimated_completion_time: datetime
    orders_per_hour: float = Field(..., ge=0)

    model_config = {"frozen": True}


class QueueEntryDTO(BaseModel):
    position: int = Field(..., ge=1)
    order_id: str
    order_number: str
    status: OrderStatus
    prep_minutes: int = Field(..., ge=0)
    created_at: datetime

    model_config = {"frozen": True}


class KitchenQueueDTO(BaseModel):
    """Active orders, shortest preparation first."""

    store_id: str
    queue: List[QueueEntryDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class OverdueOrderDTO(BaseModel):
    order_id: str
    order_number: str
    status: OrderStatus
    estimated_delivery: datetime
    minutes_late: float

    model_config = {"frozen": True}


class OverdueOrdersDTO(BaseModel):
    store_id: str
    orders: List[OverdueOrderDTO] = Field(default_factory=list)
    total: int = Field(..., ge=0)

    model_config = {"frozen": True}
