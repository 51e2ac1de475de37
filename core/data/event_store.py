"""
Event Store Implementation.

Append-only storage for domain events. Events are written in the same
session (and therefore the same transaction) as the state change that
produced them; an order's OrderStatusChangedEvent records are its
observable status history.
"""
import logging
from typing import Dict, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.events import (
    DomainEvent,
    OrderCreatedEvent,
    OrderDeliveredEvent,
    OrderStatusChangedEvent,
    PaymentDiscrepancyDetectedEvent,
    PaymentStatusChangedEvent,
)

from .models.event_model import EventModel

logger = logging.getLogger(__name__)

EVENT_CLASSES: Dict[str, Type[DomainEvent]] = {
    cls.__name__: cls
    for cls in (
        OrderCreatedEvent,
        OrderStatusChangedEvent,
        OrderDeliveredEvent,
        PaymentStatusChangedEvent,
        PaymentDiscrepancyDetectedEvent,
    )
}


class ConcurrencyError(Exception):
    """Raised when two writers appended the same aggregate sequence number."""
    pass


class EventStore:
    """
    Event Store for domain events.

    Usage:
        async with uow:
            await uow.events.append(event)
            history = await uow.events.get_events(order_id)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, event: DomainEvent) -> int:
        """
        Append event to store.

        Returns:
            The sequence number assigned within the aggregate

        Raises:
            ConcurrencyError: sequence number already taken
        """
        sequence_number = await self.get_latest_sequence(event.aggregate_id) + 1

        self.session.add(
            EventModel(
                event_id=event.event_id,
                event_type=event.event_type,
                event_version=event.event_version,
                aggregate_id=event.aggregate_id,
                aggregate_type=event.aggregate_type,
                event_data=event._get_event_data(),
                execution_id=event.execution_id,
                actor_id=event.actor_id,
                occurred_at=event.occurred_at,
                sequence_number=sequence_number,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.error(f"Failed to append {event.event_type} for {event.aggregate_id}: {e}")
            raise ConcurrencyError(
                f"Event append failed for {event.aggregate_id} - concurrent modification detected"
            ) from e

        logger.debug(
            f"Event appended: {event.event_type} "
            f"(aggregate: {event.aggregate_id}, sequence: {sequence_number})"
        )
        return sequence_number

    async def append_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            await self.append(event)

    async def get_events(
        self,
        aggregate_id: str,
        event_type: Optional[str] = None,
    ) -> List[DomainEvent]:
        """
        Get events for an aggregate in sequence order.

        Args:
            aggregate_id: Aggregate ID
            event_type: Optional class name filter, e.g. ``OrderStatusChangedEvent``
        """
        query = select(EventModel).where(EventModel.aggregate_id == aggregate_id)
        if event_type:
            query = query.where(EventModel.event_type == event_type)
        query = query.order_by(EventModel.sequence_number)

        result = await self.session.execute(query)
        events = []
        for model in result.scalars().all():
            event = self._to_domain_event(model)
            if event:
                events.append(event)
        return events

    async def get_latest_sequence(self, aggregate_id: str) -> int:
        """Latest sequence number for aggregate (0 if no events)."""
        result = await self.session.execute(
            select(func.max(EventModel.sequence_number))
            .where(EventModel.aggregate_id == aggregate_id)
        )
        return result.scalar() or 0

    def _to_domain_event(self, model: EventModel) -> Optional[DomainEvent]:
        event_class = EVENT_CLASSES.get(model.event_type)
        if not event_class:
            logger.warning(f"Unknown event type: {model.event_type}")
            return None

        event = event_class(
            event_id=model.event_id,
            event_version=model.event_version,
            aggregate_id=model.aggregate_id,
            execution_id=model.execution_id,
            actor_id=model.actor_id,
            occurred_at=model.occurred_at,
            **model.event_data,
        )
        return event
