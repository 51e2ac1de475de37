"""
Base Domain Event.

Every fulfillment and payment event derives from DomainEvent. Events are
recorded on aggregates, appended to the event store inside the same Unit of
Work as the state change and published after commit.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any
import uuid


_METADATA_FIELDS = (
    "event_id", "event_type", "event_version",
    "aggregate_id", "aggregate_type",
    "execution_id", "actor_id", "occurred_at",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent:
    """
    Base class for all domain events.

    aggregate_id is filled by subclasses from their own identity field
    (order_id, payment_id) so the event store can index by aggregate.
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str = field(init=False, default="")
    event_version: int = 1

    aggregate_id: str = field(default="")
    aggregate_type: str = field(init=False, default="")

    # Tracing context
    execution_id: Optional[str] = None
    actor_id: Optional[str] = None

    occurred_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        """Set event type and aggregate type from class name."""
        if not self.event_type:
            self.event_type = self.__class__.__name__
        if not self.aggregate_type:
            self.aggregate_type = self._get_aggregate_type()

    def _get_aggregate_type(self) -> str:
        """
        Extract aggregate type from event type.

        Example: PaymentStatusChangedEvent -> Payment
        """
        name = self.__class__.__name__
        if name.endswith("Event"):
            name = name[:-5]
        for i, char in enumerate(name):
            if i > 0 and char.isupper():
                return name[:i]
        return name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the event store and the event bus."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "event_version": self.event_version,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "execution_id": self.execution_id,
            "actor_id": self.actor_id,
            "occurred_at": self.occurred_at.isoformat(),
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """Event payload: every non-metadata field, JSON-safe."""
        data = {}
        for key, value in self.__dict__.items():
            if key in _METADATA_FIELDS:
                continue
            if isinstance(value, Decimal):
                data[key] = str(value)
            elif isinstance(value, Enum):
                data[key] = value.value
            elif isinstance(value, datetime):
                data[key] = value.isoformat()
            else:
                data[key] = value
        return data
