"""
Order endpoints.

Order intake, detail, state machine transitions, SLA and status history.
Domain errors are mapped to HTTP responses by the handlers in api.main.
"""
from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_order_service
from core.application.dtos import (
    AllowedTransitionsDTO,
    CreateOrderRequest,
    OrderDTO,
    OrderHistoryDTO,
    OrderSlaDTO,
    TransitionRequest,
)
from core.application.services import OrderApplicationService
from core.domain.enums.role import Role


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=OrderDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
    description="Create a PENDING order and its PENDING payment. The store allocates the next order number.",
)
async def create_order(
    request: CreateOrderRequest,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.create_order(request)


@router.get(
    "/{order_id}",
    response_model=OrderDTO,
    summary="Get order by ID",
)
async def get_order(
    order_id: str,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.get_order(order_id)


@router.post(
    "/{order_id}/transitions",
    response_model=OrderDTO,
    summary="Transition order status",
    description="""
    Move the order along the fulfillment state machine.

    **Errors:**
    - `422`: edge not allowed, role not authorized, or wrong courier
    - `409`: the order changed since `expected_status` was observed
    - `404`: unknown order
    """,
)
async def transition_order(
    order_id: str,
    request: TransitionRequest,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.transition_order(order_id, request)


@router.get(
    "/{order_id}/transitions",
    response_model=AllowedTransitionsDTO,
    summary="List transitions a role may request",
)
async def allowed_transitions(
    order_id: str,
    role: Role = Query(..., description="Role of the acting user"),
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.allowed_transitions(order_id, role)


@router.get(
    "/{order_id}/sla",
    response_model=OrderSlaDTO,
    summary="Delivery deadline and overdue flag",
)
async def get_order_sla(
    order_id: str,
    now: Optional[datetime] = Query(None, description="Reference time (ISO 8601, with offset)"),
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.get_order_sla(order_id, now=now)


@router.get(
    "/{order_id}/history",
    response_model=OrderHistoryDTO,
    summary="Status history",
)
async def get_order_history(
    order_id: str,
    service: OrderApplicationService = Depends(get_order_service),
):
    return await service.get_order_history(order_id)
