"""SQLAlchemy ORM model for the append-only event store."""

from sqlalchemy import JSON, Column, Index, Integer, String, UniqueConstraint

from .base import Base, UTCDateTime


class EventModel(Base):
    """
    Event store model.

    Append-only storage for domain events. sequence_number orders events
    within one aggregate; the unique constraint rejects concurrent appends
    that computed the same sequence.
    """

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), unique=True, nullable=False)
    event_type = Column(String(100), nullable=False, index=True)
    event_version = Column(Integer, nullable=False, default=1)
    aggregate_id = Column(String(255), nullable=False, index=True)
    aggregate_type = Column(String(100), nullable=False)
    event_data = Column(JSON, nullable=False)
    execution_id = Column(String(36), nullable=True)
    actor_id = Column(String(255), nullable=True)
    occurred_at = Column(UTCDateTime, nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_events_aggregate_sequence", "aggregate_id", "sequence_number"),
        UniqueConstraint("aggregate_id", "sequence_number", name="uq_events_aggregate_sequence"),
    )

    def __repr__(self):
        return (
            f"<EventModel(id={self.id}, type={self.event_type}, "
            f"aggregate={self.aggregate_id}, sequence={self.sequence_number})>"
        )
