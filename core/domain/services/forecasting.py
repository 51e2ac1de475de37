"""
Revenue forecasting with payment and order analytics.

A moving-average heuristic over trailing daily revenue, not a
statistical model.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from ..entities.order import Order
from ..entities.payment import Payment
from ..enums.payment_status import PaymentMethod, PaymentStatus
from ..enums.revenue_trend import RevenueTrend
from ..value_objects import CENT, Money
from .reconciliation import month_start

# (next 7 days, next 30 days) adjustment per trend
TREND_BUMPS = {
    RevenueTrend.INCREASING: (Decimal("0.10"), Decimal("0.15")),
    RevenueTrend.DECREASING: (Decimal("-0.05"), Decimal("-0.10")),
    RevenueTrend.STABLE: (Decimal("0"), Decimal("0")),
}


@dataclass(frozen=True)
class RevenueForecast:
    next_7_days: Money
    next_30_days: Money
    avg_daily_revenue: Money
    trend: RevenueTrend


@dataclass(frozen=True)
class PeriodStats:
    revenue: Money
    transactions: int
    success_rate: Decimal  # percent


@dataclass(frozen=True)
class PaymentAnalytics:
    today: PeriodStats
    this_month: PeriodStats
    last_month: PeriodStats
    growth: Decimal  # month-over-month, percent


@dataclass(frozen=True)
class OrderPeriodStats:
    orders: int
    revenue: Money
    avg_order_value: Money


@dataclass(frozen=True)
class OrderAnalytics:
    today: OrderPeriodStats
    yesterday: OrderPeriodStats
    week: OrderPeriodStats
    order_growth: Decimal  # day-over-day, percent
    revenue_growth: Decimal


@dataclass(frozen=True)
class MethodStats:
    method: PaymentMethod
    count: int
    amount: Money
    percentage: Decimal
    revenue_percentage: Decimal


@dataclass(frozen=True)
class BillingSummary:
    pending_count: int
    pending_amount: Money
    failed_count: int
    failed_amount: Money


def _pct(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return Decimal("0.00")
    return (Decimal(part) / Decimal(whole) * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def _sum(payments: Iterable[Payment], currency: str) -> Money:
    total = Money.zero(currency)
    for payment in payments:
        total = total + payment.amount
    return total


class RevenueForecaster:
    """Short-horizon revenue projection from trailing COMPLETED payments."""

    def __init__(self, window_days: int = 30, currency: str = "USD"):
        if window_days < 14:
            raise ValueError("Forecast window must cover at least 14 days")
        self.window_days = window_days
        self.currency = currency

    def window_start(self, now: datetime) -> datetime:
        """Midnight (UTC) of the first day in the trailing window, today inclusive."""
        first_day = now.date() - timedelta(days=self.window_days - 1)
        return datetime.combine(first_day, datetime.min.time(), tzinfo=now.tzinfo)

    def daily_totals(self, payments: Iterable[Payment], now: datetime) -> List[Decimal]:
        """Revenue per calendar day, oldest first; days without payments are 0."""
        today = now.date()
        days: Dict[date, Decimal] = {
            today - timedelta(days=offset): Decimal("0")
            for offset in range(self.window_days)
        }
        for payment in payments:
            if payment.status != PaymentStatus.COMPLETED:
                continue
            day = payment.created_at.date()
            if day in days:
                days[day] += payment.amount.amount
        return [days[day] for day in sorted(days)]

    @staticmethod
    def classify_trend(daily: List[Decimal]) -> RevenueTrend:
        """mean(last 7 days) - mean(the 7 days before); stable when it rounds to 0.00."""
        last_week = sum(daily[-7:], Decimal("0")) / 7
        prior_week = sum(daily[-14:-7], Decimal("0")) / 7
        trend = (last_week - prior_week).quantize(CENT, rounding=ROUND_HALF_UP)
        if trend > 0:
            return RevenueTrend.INCREASING
        if trend < 0:
            return RevenueTrend.DECREASING
        return RevenueTrend.STABLE

    def forecast(self, payments: Iterable[Payment], now: datetime) -> RevenueForecast:
        daily = self.daily_totals(payments, now)
        avg = sum(daily, Decimal("0")) / self.window_days
        trend = self.classify_trend(daily)
        bump_7, bump_30 = TREND_BUMPS[trend]

        return RevenueForecast(
            next_7_days=Money(avg * 7 * (1 + bump_7), self.currency).rounded(),
            next_30_days=Money(avg * 30 * (1 + bump_30), self.currency).rounded(),
            avg_daily_revenue=Money(avg, self.currency).rounded(),
            trend=trend,
        )

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def _period(self, payments: List[Payment]) -> PeriodStats:
        completed = [p for p in payments if p.status == PaymentStatus.COMPLETED]
        return PeriodStats(
            revenue=_sum(completed, self.currency),
            transactions=len(payments),
            success_rate=_pct(len(completed), len(payments)),
        )

    def payment_analytics(self, payments: Iterable[Payment], now: datetime) -> PaymentAnalytics:
        """Today, this month and last month revenue with month-over-month growth."""
        payments = list(payments)
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        this_month = month_start(now)
        last_month = month_start(this_month - timedelta(days=1))

        today_stats = self._period([p for p in payments if p.created_at >= today_start])
        this_stats = self._period([p for p in payments if p.created_at >= this_month])
        last_stats = self._period(
            [p for p in payments if last_month <= p.created_at < this_month]
        )

        last_revenue = last_stats.revenue.amount
        growth = (
            _pct(this_stats.revenue.amount - last_revenue, last_revenue)
            if last_revenue > 0 else Decimal("0.00")
        )
        return PaymentAnalytics(
            today=today_stats,
            this_month=this_stats,
            last_month=last_stats,
            growth=growth,
        )

    def _order_period(self, orders: List[Order]) -> OrderPeriodStats:
        revenue = Money.zero(self.currency)
        for order in orders:
            revenue = revenue + order.total
        avg = revenue.amount / len(orders) if orders else Decimal("0")
        return OrderPeriodStats(
            orders=len(orders),
            revenue=revenue,
            avg_order_value=Money(avg, self.currency).rounded(),
        )

    def order_analytics(self, orders: Iterable[Order], now: datetime) -> OrderAnalytics:
        """Order volume and revenue for today, yesterday and the last 7 days.

        Growth compares today with yesterday and is 0 when yesterday had no
        orders (or no revenue).
        """
        orders = list(orders)
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        yesterday_start = today_start - timedelta(days=1)
        week_start = today_start - timedelta(days=7)

        today = self._order_period([o for o in orders if o.created_at >= today_start])
        yesterday = self._order_period(
            [o for o in orders if yesterday_start <= o.created_at < today_start]
        )
        week = self._order_period([o for o in orders if o.created_at >= week_start])

        return OrderAnalytics(
            today=today,
            yesterday=yesterday,
            week=week,
            order_growth=_pct(today.orders - yesterday.orders, yesterday.orders),
            revenue_growth=_pct(
                today.revenue.amount - yesterday.revenue.amount, yesterday.revenue.amount
            ),
        )

    def payment_method_stats(self, payments: Iterable[Payment]) -> List[MethodStats]:
        """Per-method share of COMPLETED transactions and revenue."""
        completed = [p for p in payments if p.status == PaymentStatus.COMPLETED]
        total_amount = _sum(completed, self.currency).amount

        by_method: Dict[PaymentMethod, List[Payment]] = {}
        for payment in completed:
            by_method.setdefault(payment.method, []).append(payment)

        stats = []
        for method, method_payments in by_method.items():
            amount = _sum(method_payments, self.currency)
            stats.append(
                MethodStats(
                    method=method,
                    count=len(method_payments),
                    amount=amount,
                    percentage=_pct(len(method_payments), len(completed)),
                    revenue_percentage=_pct(amount.amount, total_amount),
                )
            )
        stats.sort(key=lambda s: (-s.count, s.method.value))
        return stats

    def billing_summary(self, payments: Iterable[Payment]) -> BillingSummary:
        payments = list(payments)
        pending = [p for p in payments if p.status == PaymentStatus.PENDING]
        failed = [p for p in payments if p.status == PaymentStatus.FAILED]
        return BillingSummary(
            pending_count=len(pending),
            pending_amount=_sum(pending, self.currency),
            failed_count=len(failed),
            failed_amount=_sum(failed, self.currency),
        )
