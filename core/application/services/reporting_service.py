"""Application service for revenue, payment and order reports."""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.payment_dto import (
    BillingSummaryDTO,
    MethodStatsDTO,
    OrderAnalyticsDTO,
    OrderPeriodStatsDTO,
    PaymentAnalyticsDTO,
    PaymentMethodStatsDTO,
    PeriodStatsDTO,
    RevenueForecastDTO,
)
from core.application.interfaces import Clock
from core.data.uow import create_uow
from core.domain.entities.payment import Payment
from core.domain.enums.payment_status import PaymentStatus
from core.domain.exceptions import UnknownStore
from core.domain.services.forecasting import OrderPeriodStats, PeriodStats, RevenueForecaster
from core.domain.services.reconciliation import month_start

logger = logging.getLogger(__name__)


def _period_to_dto(stats: PeriodStats) -> PeriodStatsDTO:
    return PeriodStatsDTO(
        revenue=stats.revenue.amount,
        transactions=stats.transactions,
        success_rate=stats.success_rate,
    )


def _order_period_to_dto(stats: OrderPeriodStats) -> OrderPeriodStatsDTO:
    return OrderPeriodStatsDTO(
        orders=stats.orders,
        revenue=stats.revenue.amount,
        avg_order_value=stats.avg_order_value.amount,
    )


class ReportingApplicationService:
    """Read-only reports over a store's payments and orders."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Clock,
        forecaster: Optional[RevenueForecaster] = None,
    ) -> None:
        self._session_factory = session_factory
        self.clock = clock
        self.forecaster = forecaster or RevenueForecaster()

    async def _payments(self, store_id: str, statuses=None, created_after=None) -> List[Payment]:
        async with create_uow(self._session_factory) as uow:
            if await uow.stores.get(store_id) is None:
                raise UnknownStore(store_id)
            return await uow.payments.list_by_store(
                store_id, statuses=statuses, created_after=created_after
            )

    async def revenue_forecast(self, store_id: str) -> RevenueForecastDTO:
        now = self.clock.now()
        payments = await self._payments(
            store_id,
            statuses=[PaymentStatus.COMPLETED],
            created_after=self.forecaster.window_start(now),
        )
        forecast = self.forecaster.forecast(payments, now)
        logger.info(
            f"Revenue forecast for store {store_id}: {forecast.trend.value}, "
            f"avg {forecast.avg_daily_revenue}/day"
        )
        return RevenueForecastDTO(
            next_7_days=forecast.next_7_days.amount,
            next_30_days=forecast.next_30_days.amount,
            avg_daily_revenue=forecast.avg_daily_revenue.amount,
            trend=forecast.trend,
            currency=self.forecaster.currency,
        )

    async def payment_analytics(self, store_id: str) -> PaymentAnalyticsDTO:
        now = self.clock.now()
        last_month_start = month_start(month_start(now) - timedelta(days=1))
        payments = await self._payments(store_id, created_after=last_month_start)

        analytics = self.forecaster.payment_analytics(payments, now)
        return PaymentAnalyticsDTO(
            today=_period_to_dto(analytics.today),
            this_month=_period_to_dto(analytics.this_month),
            last_month=_period_to_dto(analytics.last_month),
            growth=analytics.growth,
            currency=self.forecaster.currency,
        )

    async def order_analytics(self, store_id: str) -> OrderAnalyticsDTO:
        now = self.clock.now()
        week_start = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=7)
        async with create_uow(self._session_factory) as uow:
            if await uow.stores.get(store_id) is None:
                raise UnknownStore(store_id)
            orders = await uow.orders.list_by_store(store_id, created_after=week_start)

        analytics = self.forecaster.order_analytics(orders, now)
        return OrderAnalyticsDTO(
            today=_order_period_to_dto(analytics.today),
            yesterday=_order_period_to_dto(analytics.yesterday),
            week=_order_period_to_dto(analytics.week),
            order_growth=analytics.order_growth,
            revenue_growth=analytics.revenue_growth,
            currency=self.forecaster.currency,
        )

    async def payment_method_stats(self, store_id: str) -> PaymentMethodStatsDTO:
        payments = await self._payments(store_id, statuses=[PaymentStatus.COMPLETED])
        stats = self.forecaster.payment_method_stats(payments)
        return PaymentMethodStatsDTO(
            methods=[
                MethodStatsDTO(
                    method=s.method,
                    count=s.count,
                    amount=s.amount.amount,
                    percentage=s.percentage,
                    revenue_percentage=s.revenue_percentage,
                )
                for s in stats
            ],
            total_transactions=sum(s.count for s in stats),
            total_revenue=sum((s.amount.amount for s in stats), Decimal("0")),
        )

    async def billing_summary(self, store_id: str) -> BillingSummaryDTO:
        payments = await self._payments(
            store_id, statuses=[PaymentStatus.PENDING, PaymentStatus.FAILED]
        )
        summary = self.forecaster.billing_summary(payments)
        return BillingSummaryDTO(
            pending_count=summary.pending_count,
            pending_amount=summary.pending_amount.amount,
            failed_count=summary.failed_count,
            failed_amount=summary.failed_amount.amount,
            currency=self.forecaster.currency,
        )
