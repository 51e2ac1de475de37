"""SLA tracking: delivery deadlines and overdue detection."""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..entities.order import Order

DEFAULT_DELIVERY_BUFFER = timedelta(minutes=15)


class SLATracker:
    """
    Computes delivery deadlines.

    estimated_delivery = stamp time + aggregate prep time + delivery buffer,
    where aggregate prep time assumes one kitchen working serially. Overdue
    is derived at read time, never stored.
    """

    def __init__(self, delivery_buffer: timedelta = DEFAULT_DELIVERY_BUFFER):
        if delivery_buffer < timedelta(0):
            raise ValueError("Delivery buffer cannot be negative")
        self.delivery_buffer = delivery_buffer

    def estimate(self, order: Order, now: datetime) -> datetime:
        return now + order.aggregate_prep_time + self.delivery_buffer

    def stamp(self, order: Order, now: datetime) -> datetime:
        """Set and return the order's estimated delivery."""
        estimated = self.estimate(order, now)
        order.set_estimate(estimated)
        return estimated

    @staticmethod
    def time_remaining(order: Order, now: datetime) -> Optional[timedelta]:
        """Time until the deadline; zero or negative means overdue. None without an estimate."""
        if order.estimated_delivery is None:
            return None
        return order.estimated_delivery - now

    @staticmethod
    def is_overdue(order: Order, now: datetime) -> bool:
        if order.is_terminal or order.estimated_delivery is None:
            return False
        return now >= order.estimated_delivery

    def overdue_orders(self, orders: Iterable[Order], now: datetime) -> List[Order]:
        """Overdue orders, most overdue first."""
        overdue = [order for order in orders if self.is_overdue(order, now)]
        overdue.sort(key=lambda order: order.estimated_delivery)
        return overdue
