"""Repository interface for Store entity."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.store import Store


class StoreRepository(ABC):
    """Abstract repository for Store persistence."""

    @abstractmethod
    async def add(self, store: Store) -> None:
        pass

    @abstractmethod
    async def update(self, store: Store) -> None:
        pass

    @abstractmethod
    async def get(self, store_id: str) -> Optional[Store]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Store]:
        pass
