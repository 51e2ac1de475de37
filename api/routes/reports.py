"""Revenue, payment and order report endpoints."""
from fastapi import APIRouter, Depends

from api.dependencies import get_reporting_service
from core.application.dtos import (
    BillingSummaryDTO,
    OrderAnalyticsDTO,
    PaymentAnalyticsDTO,
    PaymentMethodStatsDTO,
    RevenueForecastDTO,
)
from core.application.services import ReportingApplicationService


router = APIRouter()


@router.get("/{store_id}/reports/revenue-forecast", response_model=RevenueForecastDTO)
async def revenue_forecast(
    store_id: str,
    service: ReportingApplicationService = Depends(get_reporting_service),
):
    return await service.revenue_forecast(store_id)


@router.get("/{store_id}/reports/payment-analytics", response_model=PaymentAnalyticsDTO)
async def payment_analytics(
    store_id: str,
    service: ReportingApplicationService = Depends(get_reporting_service),
):
    return await service.payment_analytics(store_id)


@router.get("/{store_id}/reports/order-analytics", response_model=OrderAnalyticsDTO)
async def order_analytics(
    store_id: str,
    service: ReportingApplicationService = Depends(get_reporting_service),
):
    return await service.order_analytics(store_id)


@router.get("/{store_id}/reports/payment-methods", response_model=PaymentMethodStatsDTO)
async def payment_methods(
    store_id: str,
    service: ReportingApplicationService = Depends(get_reporting_service),
):
    return await service.payment_method_stats(store_id)


@router.get("/{store_id}/reports/billing-summary", response_model=BillingSummaryDTO)
async def billing_summary(
    store_id: str,
    service: ReportingApplicationService = Depends(get_reporting_service),
):
    return await service.billing_summary(store_id)
