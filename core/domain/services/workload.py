"""Kitchen workload estimation and queue ordering."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from ..entities.order import Order
from ..entities.store import Store
from ..enums.order_status import (
    DISPATCH_BOARD_STATUSES,
    KITCHEN_ACTIVE_STATUSES,
    OrderStatus,
)
from ..enums.workload_level import WorkloadLevel


@dataclass(frozen=True)
class KitchenWorkload:
    """Snapshot of kitchen pressure at a point in time."""
    active_orders: int
    total_prep_time: int  # minutes
    avg_prep_time: float  # minutes
    workload_level: WorkloadLevel
    estimated_completion_time: datetime
    orders_per_hour: float


@dataclass(frozen=True)
class QueueEntry:
    position: int
    order_id: str
    order_number: str
    status: OrderStatus
    prep_minutes: int
    created_at: datetime


class KitchenWorkloadEstimator:
    """
    Aggregates ACCEPTED/PREPARING orders into a workload level and a
    queue-clear estimate.

    Level is classified on orders per hour (same-day orders divided by the
    store's operating hours): LOW up to ``low_max``, MEDIUM up to
    ``medium_max``, HIGH above.
    """

    def __init__(self, low_max: float = 10, medium_max: float = 15):
        if low_max > medium_max:
            raise ValueError("low_max must not exceed medium_max")
        self.low_max = low_max
        self.medium_max = medium_max

    def classify(self, orders_per_hour: float) -> WorkloadLevel:
        if orders_per_hour <= self.low_max:
            return WorkloadLevel.LOW
        if orders_per_hour <= self.medium_max:
            return WorkloadLevel.MEDIUM
        return WorkloadLevel.HIGH

    @staticmethod
    def active(orders: Iterable[Order]) -> List[Order]:
        return [order for order in orders if order.status in KITCHEN_ACTIVE_STATUSES]

    def estimate(self, orders: Iterable[Order], store: Store, now: datetime) -> KitchenWorkload:
        """
        Args:
            orders: The store's orders (any status); filtered here
            store: Supplies operating hours and kitchen capacity
            now: Reference time; "same day" is its UTC calendar date
        """
        orders = list(orders)
        active = self.active(orders)

        total_minutes = sum(
            int(order.aggregate_prep_time.total_seconds() // 60) for order in active
        )
        avg_minutes = round(total_minutes / len(active), 2) if active else 0.0

        today = now.date()
        todays_orders = sum(1 for order in orders if order.created_at.date() == today)
        orders_per_hour = round(todays_orders / store.operating_hours, 2)

        capacity = max(1, store.kitchen_capacity)
        completion = now + timedelta(minutes=total_minutes / capacity)

        return KitchenWorkload(
            active_orders=len(active),
            total_prep_time=total_minutes,
            avg_prep_time=avg_minutes,
            workload_level=self.classify(orders_per_hour),
            estimated_completion_time=completion,
            orders_per_hour=orders_per_hour,
        )

    def prioritized_queue(self, orders: Iterable[Order]) -> List[QueueEntry]:
        """Active orders, shortest preparation first; ties by creation time."""
        active = sorted(
            self.active(orders),
            key=lambda order: (order.aggregate_prep_time, order.created_at),
        )
        return [
            QueueEntry(
                position=index,
                order_id=order.order_id,
                order_number=str(order.order_number),
                status=order.status,
                prep_minutes=int(order.aggregate_prep_time.total_seconds() // 60),
                created_at=order.created_at,
            )
            for index, order in enumerate(active, start=1)
        ]

    @staticmethod
    def delivery_status(orders: Iterable[Order]) -> Dict[OrderStatus, int]:
        """Count of orders per dispatch-board status (zeros included)."""
        counts = {status: 0 for status in DISPATCH_BOARD_STATUSES}
        for order in orders:
            if order.status in counts:
                counts[order.status] += 1
        return counts
