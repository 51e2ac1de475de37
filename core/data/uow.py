"""Unit of Work pattern for atomic transactions."""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.event_bus import EventBus
from core.domain.events.base import DomainEvent
from core.domain.value_objects import ExecutionID

from .event_store import EventStore
from .repositories.order_repository_impl import SqlAlchemyOrderRepository
from .repositories.payment_repository_impl import SqlAlchemyPaymentRepository
from .repositories.store_repository_impl import SqlAlchemyStoreRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern for atomic transactions.

    Responsibilities:
    1. Manage SQLAlchemy session lifecycle
    2. Propagate ExecutionID across all operations
    3. Append domain events of tracked aggregates in the same transaction
    4. Publish those events after a successful commit
    5. Lazy initialization of repositories
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        """Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
            event_bus: Receives events after commit (optional)
        """
        self._session_factory = session_factory
        self._event_bus = event_bus
        self._session: Optional[AsyncSession] = None
        self._execution_id: Optional[ExecutionID] = None
        self._tracked: list = []
        self._extra_events: List[DomainEvent] = []

        # Lazy-loaded repositories
        self._order_repository: Optional[SqlAlchemyOrderRepository] = None
        self._payment_repository: Optional[SqlAlchemyPaymentRepository] = None
        self._store_repository: Optional[SqlAlchemyStoreRepository] = None
        self._event_store: Optional[EventStore] = None

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        self._execution_id = ExecutionID.generate()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rollback on exception, always close the session."""
        if exc_type is not None:
            logger.debug(f"Rolling back unit of work {self._execution_id}: {exc_type.__name__}")
            await self._session.rollback()
        await self._session.close()
        self._tracked.clear()
        self._extra_events.clear()

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def execution_id(self) -> ExecutionID:
        """Get current execution ID for tracing."""
        if self._execution_id is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._execution_id

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        if self._order_repository is None:
            self._order_repository = SqlAlchemyOrderRepository(self._require_session())
        return self._order_repository

    @property
    def payments(self) -> SqlAlchemyPaymentRepository:
        if self._payment_repository is None:
            self._payment_repository = SqlAlchemyPaymentRepository(self._require_session())
        return self._payment_repository

    @property
    def stores(self) -> SqlAlchemyStoreRepository:
        if self._store_repository is None:
            self._store_repository = SqlAlchemyStoreRepository(self._require_session())
        return self._store_repository

    @property
    def events(self) -> EventStore:
        if self._event_store is None:
            self._event_store = EventStore(self._require_session())
        return self._event_store

    def track(self, *aggregates) -> None:
        """Register aggregates whose recorded events belong to this transaction."""
        for aggregate in aggregates:
            if aggregate is not None and aggregate not in self._tracked:
                self._tracked.append(aggregate)

    def record(self, event: DomainEvent) -> None:
        """Add an event that is not owned by an aggregate (e.g. a discrepancy)."""
        self._extra_events.append(event)

    def _collect_events(self) -> List[DomainEvent]:
        events: List[DomainEvent] = []
        for aggregate in self._tracked:
            events.extend(aggregate.get_domain_events())
        events.extend(self._extra_events)
        execution_id = str(self.execution_id)
        for event in events:
            if not event.execution_id:
                event.execution_id = execution_id
        return events

    async def commit(self) -> None:
        """Append pending events, commit, then publish."""
        session = self._require_session()
        events = self._collect_events()
        if events:
            await self.events.append_all(events)
        await session.commit()

        for aggregate in self._tracked:
            aggregate.clear_domain_events()
        self._tracked.clear()
        self._extra_events.clear()

        if self._event_bus and events:
            await self._event_bus.publish_all(events)

    async def rollback(self) -> None:
        """Rollback all pending changes."""
        await self._require_session().rollback()


def create_uow(
    session_factory: async_sessionmaker,
    event_bus: Optional[EventBus] = None,
) -> UnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory
        event_bus: Optional bus receiving events after commit

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory, event_bus)
