"""SQLAlchemy implementation of PaymentRepository."""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.payment import Payment
from core.domain.enums.payment_status import PaymentStatus
from core.domain.repositories.payment_repository import PaymentRepository

from ..mappers import PaymentMapper
from ..models.payment_model import PaymentModel


class SqlAlchemyPaymentRepository(PaymentRepository):
    """Concrete implementation of PaymentRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, payment: Payment) -> None:
        self._session.add(PaymentMapper.to_persistence(payment))
        await self._session.flush()

    async def update(self, payment: Payment, expected_status: PaymentStatus) -> bool:
        """Compare-and-set on (payment_id, status, version)."""
        result = await self._session.execute(
            update(PaymentModel)
            .where(
                PaymentModel.payment_id == payment.payment_id,
                PaymentModel.status == expected_status.value,
                PaymentModel.version == payment.version,
            )
            .values(version=payment.version + 1, **PaymentMapper.mutable_values(payment))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        payment.version += 1
        return True

    async def get(self, payment_id: str) -> Optional[Payment]:
        result = await self._session.execute(
            select(PaymentModel)
            .where(PaymentModel.payment_id == payment_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return PaymentMapper.to_domain(model) if model else None

    async def get_by_order(self, order_id: str) -> Optional[Payment]:
        result = await self._session.execute(
            select(PaymentModel)
            .where(PaymentModel.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return PaymentMapper.to_domain(model) if model else None

    async def list_by_store(
        self,
        store_id: str,
        statuses: Optional[Iterable[PaymentStatus]] = None,
        created_after: Optional[datetime] = None,
    ) -> List[Payment]:
        query = select(PaymentModel).where(PaymentModel.store_id == store_id)
        if statuses is not None:
            query = query.where(PaymentModel.status.in_([s.value for s in statuses]))
        if created_after is not None:
            query = query.where(PaymentModel.created_at >= created_after)
        query = query.order_by(PaymentModel.created_at)

        result = await self._session.execute(
            query.execution_options(populate_existing=True)
        )
        return [PaymentMapper.to_domain(model) for model in result.scalars().all()]
