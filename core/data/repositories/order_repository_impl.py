"""SQLAlchemy implementation of OrderRepository."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.order import Order
from core.domain.enums.order_status import OrderStatus
from core.domain.exceptions import StaleState
from core.domain.repositories.order_repository import OrderRepository

from ..mappers import OrderMapper
from ..models.order_model import OrderModel

logger = logging.getLogger(__name__)


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, order: Order) -> None:
        self._session.add(OrderMapper.to_persistence(order))
        await self._session.flush()  # Propagate to DB without committing

    async def update(self, order: Order) -> None:
        """Version-checked write: ``UPDATE ... WHERE order_id = ? AND version = ?``.

        Raises:
            StaleState: zero rows matched
        """
        result = await self._session.execute(
            update(OrderModel)
            .where(
                OrderModel.order_id == order.order_id,
                OrderModel.version == order.version,
            )
            .values(version=order.version + 1, **OrderMapper.mutable_values(order))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            current = await self._session.execute(
                select(OrderModel.status, OrderModel.version)
                .where(OrderModel.order_id == order.order_id)
            )
            row = current.one_or_none()
            actual = f"{row.status} (version {row.version})" if row else "missing"
            logger.warning(
                f"Stale write rejected for order {order.order_id}: "
                f"held version {order.version}, stored {actual}"
            )
            raise StaleState(
                order.order_id,
                f"{order.status.value} (version {order.version})",
                actual,
            )
        order.version += 1

    async def get(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(OrderModel)
            .where(OrderModel.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        if not model:
            return None
        return OrderMapper.to_domain(model)

    async def list_by_store(
        self,
        store_id: str,
        statuses: Optional[Iterable[OrderStatus]] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
    ) -> List[Order]:
        query = select(OrderModel).where(OrderModel.store_id == store_id)
        if statuses is not None:
            query = query.where(OrderModel.status.in_([s.value for s in statuses]))
        if created_after is not None:
            query = query.where(OrderModel.created_at >= created_after)
        if created_before is not None:
            query = query.where(OrderModel.created_at < created_before)
        query = query.order_by(OrderModel.created_at, OrderModel.order_number)

        result = await self._session.execute(
            query.execution_options(populate_existing=True)
        )
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]

    async def list_by_courier(self, courier_id: str) -> List[Order]:
        result = await self._session.execute(
            select(OrderModel)
            .where(OrderModel.courier_id == courier_id)
            .order_by(OrderModel.courier_assigned_at)
            .execution_options(populate_existing=True)
        )
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]
