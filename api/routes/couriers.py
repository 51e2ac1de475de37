"""Courier endpoints."""
from fastapi import APIRouter, Depends

from api.dependencies import get_order_service
from core.application.dtos import CourierSummaryDTO
from core.application.services import OrderApplicationService


router = APIRouter()


@router.get("/{courier_id}/summary", response_model=CourierSummaryDTO, summary="Courier dashboard")
async def courier_summary(
    courier_id: str,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.get_courier_summary(courier_id)
