"""
Payment automation endpoints.

Batch operations over one store's payments. Each call is safe to repeat:
payments already moved by an earlier or concurrent run are skipped.
"""
from fastapi import APIRouter, Depends

from api.dependencies import get_payment_service
from core.application.dtos import (
    AutoRefundResultDTO,
    InvoicesResultDTO,
    ProcessPendingResultDTO,
    ReconciliationResultDTO,
    RefundEligibleResultDTO,
    RemindersResultDTO,
)
from core.application.services import PaymentApplicationService


router = APIRouter()


@router.post(
    "/{store_id}/payments/process-pending",
    response_model=ProcessPendingResultDTO,
    summary="Settle pending payments",
)
async def process_pending(
    store_id: str,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return await service.process_pending(store_id)


@router.post(
    "/{store_id}/payments/auto-refund",
    response_model=AutoRefundResultDTO,
    summary="Refund recent failed payments",
)
async def auto_refund(
    store_id: str,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return await service.auto_refund_stale(store_id)


@router.post(
    "/{store_id}/payments/refund-eligible",
    response_model=RefundEligibleResultDTO,
    summary="Refund payments of cancelled or refunded orders",
)
async def refund_eligible(
    store_id: str,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return await service.process_refund_eligible(store_id)


@router.post(
    "/{store_id}/payments/reconcile",
    response_model=ReconciliationResultDTO,
    summary="Reconcile payments against order totals",
)
async def reconcile(
    store_id: str,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return await service.reconcile(store_id)


@router.post(
    "/{store_id}/payments/reminders",
    response_model=RemindersResultDTO,
    summary="Remind customers about pending payments",
)
async def reminders(
    store_id: str,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return await service.send_pending_reminders(store_id)


@router.post(
    "/{store_id}/payments/invoices",
    response_model=InvoicesResultDTO,
    summary="Generate this month's invoices",
)
async def invoices(
    store_id: str,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return await service.generate_monthly_invoices(store_id)
