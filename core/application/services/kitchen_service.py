"""Application service for kitchen and dispatch views of a store."""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos.order_dto import DeliveryStatusDTO
from core.application.dtos.store_dto import (
    KitchenQueueDTO,
    KitchenWorkloadDTO,
    OverdueOrderDTO,
    OverdueOrdersDTO,
    QueueEntryDTO,
)
from core.application.interfaces import Clock
from core.data.uow import create_uow
from core.domain.entities.order import Order
from core.domain.entities.store import Store
from core.domain.enums.order_status import (
    DISPATCH_BOARD_STATUSES,
    KITCHEN_ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    OrderStatus,
)
from core.domain.exceptions import UnknownStore
from core.domain.services.sla import SLATracker
from core.domain.services.workload import KitchenWorkloadEstimator
from core.settings.modules.fulfillment_settings import FulfillmentSettings

logger = logging.getLogger(__name__)

_OPEN_STATUSES = [status for status in OrderStatus if status not in TERMINAL_STATUSES]


class KitchenApplicationService:
    """Read-only projections over a store's orders: workload, queue, overdue, dispatch."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Clock,
        estimator: Optional[KitchenWorkloadEstimator] = None,
        sla_tracker: Optional[SLATracker] = None,
    ) -> None:
        self._session_factory = session_factory
        self.clock = clock
        self.estimator = estimator or KitchenWorkloadEstimator()
        self.sla_tracker = sla_tracker or SLATracker()

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker,
        clock: Clock,
        settings: FulfillmentSettings,
        sla_tracker: Optional[SLATracker] = None,
    ) -> "KitchenApplicationService":
        return cls(
            session_factory,
            clock,
            estimator=KitchenWorkloadEstimator(
                low_max=settings.workload_low_max,
                medium_max=settings.workload_medium_max,
            ),
            sla_tracker=sla_tracker,
        )

    async def _load(
        self,
        store_id: str,
        statuses: Optional[List[OrderStatus]] = None,
        created_after: Optional[datetime] = None,
    ) -> Tuple[Store, List[Order]]:
        async with create_uow(self._session_factory) as uow:
            store = await uow.stores.get(store_id)
            if store is None:
                raise UnknownStore(store_id)
            orders = await uow.orders.list_by_store(
                store_id, statuses=statuses, created_after=created_after
            )
        return store, orders

    async def get_workload(self, store_id: str) -> KitchenWorkloadDTO:
        now = self.clock.now()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

        store, active = await self._load(store_id, statuses=list(KITCHEN_ACTIVE_STATUSES))
        _, todays = await self._load(store_id, created_after=today_start)

        # Active orders from earlier days still count toward the queue
        orders: Dict[str, Order] = {order.order_id: order for order in todays}
        for order in active:
            orders.setdefault(order.order_id, order)

        workload = self.estimator.estimate(orders.values(), store, now)
        logger.debug(
            f"Workload for store {store_id}: {workload.active_orders} active, "
            f"{workload.orders_per_hour} orders/hour ({workload.workload_level.value})"
        )
        return KitchenWorkloadDTO(
            store_id=store_id,
            active_orders=workload.active_orders,
            total_prep_time=workload.total_prep_time,
            avg_prep_time=workload.avg_prep_time,
            workload_level=workload.workload_level,
            estimated_completion_time=workload.estimated_completion_time,
            orders_per_hour=workload.orders_per_hour,
        )

    async def get_queue(self, store_id: str) -> KitchenQueueDTO:
        _, active = await self._load(store_id, statuses=list(KITCHEN_ACTIVE_STATUSES))
        return KitchenQueueDTO(
            store_id=store_id,
            queue=[
                QueueEntryDTO(
                    position=entry.position,
                    order_id=entry.order_id,
                    order_number=entry.order_number,
                    status=entry.status,
                    prep_minutes=entry.prep_minutes,
                    created_at=entry.created_at,
                )
                for entry in self.estimator.prioritized_queue(active)
            ],
        )

    async def get_overdue_orders(
        self,
        store_id: str,
        now: Optional[datetime] = None,
    ) -> OverdueOrdersDTO:
        _, open_orders = await self._load(store_id, statuses=_OPEN_STATUSES)
        now = now or self.clock.now()

        overdue = self.sla_tracker.overdue_orders(open_orders, now)
        if overdue:
            logger.warning(f"🔔 {len(overdue)} overdue orders in store {store_id}")
        return OverdueOrdersDTO(
            store_id=store_id,
            orders=[
                OverdueOrderDTO(
                    order_id=order.order_id,
                    order_number=str(order.order_number),
                    status=order.status,
                    estimated_delivery=order.estimated_delivery,
                    minutes_late=round((now - order.estimated_delivery).total_seconds() / 60, 1),
                )
                for order in overdue
            ],
            total=len(overdue),
        )

    async def get_delivery_status(self, store_id: str) -> DeliveryStatusDTO:
        _, orders = await self._load(store_id, statuses=list(DISPATCH_BOARD_STATUSES))
        counts = self.estimator.delivery_status(orders)
        return DeliveryStatusDTO(
            store_id=store_id,
            counts=counts,
            total_active=sum(counts.values()),
        )
