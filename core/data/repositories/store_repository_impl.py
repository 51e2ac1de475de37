"""SQLAlchemy implementation of StoreRepository."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities.store import Store
from core.domain.repositories.store_repository import StoreRepository

from ..mappers import StoreMapper
from ..models.store_model import StoreModel


class SqlAlchemyStoreRepository(StoreRepository):
    """Concrete implementation of StoreRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, store: Store) -> None:
        self._session.add(StoreMapper.to_persistence(store))
        await self._session.flush()

    async def update(self, store: Store) -> None:
        model = await self._session.get(StoreModel, store.store_id)
        if model is None:
            raise ValueError(f"Store {store.store_id} does not exist")
        StoreMapper.update_persistence(store, model)
        await self._session.flush()

    async def get(self, store_id: str) -> Optional[Store]:
        model = await self._session.get(StoreModel, store_id)
        return StoreMapper.to_domain(model) if model else None

    async def list_all(self) -> List[Store]:
        result = await self._session.execute(select(StoreModel).order_by(StoreModel.name))
        return [StoreMapper.to_domain(model) for model in result.scalars().all()]
