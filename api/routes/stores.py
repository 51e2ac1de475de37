"""
Store endpoints.

Store registration plus the kitchen and dispatch views of a store.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_kitchen_service, get_order_service
from core.application.dtos import (
    AutoCancelResultDTO,
    CreateStoreRequest,
    DeliveryStatusDTO,
    KitchenQueueDTO,
    KitchenWorkloadDTO,
    OrderListDTO,
    OverdueOrdersDTO,
    StoreDTO,
)
from core.application.services import KitchenApplicationService, OrderApplicationService
from core.domain.enums.order_status import OrderStatus


router = APIRouter()


@router.post("", response_model=StoreDTO, status_code=status.HTTP_201_CREATED, summary="Register a store")
async def create_store(
    request: CreateStoreRequest,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.create_store(request)


@router.get("/{store_id}", response_model=StoreDTO, summary="Get store")
async def get_store(
    store_id: str,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.get_store(store_id)


@router.get("/{store_id}/orders", response_model=OrderListDTO, summary="List store orders")
async def list_orders(
    store_id: str,
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.list_orders(store_id, status=order_status)


@router.post(
    "/{store_id}/orders/auto-cancel",
    response_model=AutoCancelResultDTO,
    summary="Cancel stale pending orders",
    description="Cancel PENDING orders that were not accepted within the configured window.",
)
async def auto_cancel(
    store_id: str,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.auto_cancel_stale_orders(store_id)


@router.get("/{store_id}/orders/overdue", response_model=OverdueOrdersDTO, summary="Overdue orders")
async def overdue_orders(
    store_id: str,
    service: KitchenApplicationService = Depends(get_kitchen_service),
):
    return await service.get_overdue_orders(store_id)


@router.get("/{store_id}/kitchen/workload", response_model=KitchenWorkloadDTO, summary="Kitchen workload")
async def kitchen_workload(
    store_id: str,
    service: KitchenApplicationService = Depends(get_kitchen_service),
):
    return await service.get_workload(store_id)


@router.get("/{store_id}/kitchen/queue", response_model=KitchenQueueDTO, summary="Preparation queue")
async def kitchen_queue(
    store_id: str,
    service: KitchenApplicationService = Depends(get_kitchen_service),
):
    return await service.get_queue(store_id)


@router.get("/{store_id}/delivery/status", response_model=DeliveryStatusDTO, summary="Dispatch board")
async def delivery_status(
    store_id: str,
    service: KitchenApplicationService = Depends(get_kitchen_service),
):
    return await service.get_delivery_status(store_id)
