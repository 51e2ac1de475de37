"""SQLAlchemy ORM model for payments."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Numeric, String

from .base import Base, UTCDateTime


class PaymentModel(Base):
    """SQLAlchemy ORM model for payments table."""

    __tablename__ = "payments"

    payment_id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey("orders.order_id"), nullable=False, unique=True)
    store_id = Column(String(36), ForeignKey("stores.store_id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    method = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False, default="PENDING")
    transaction_id = Column(String(120), nullable=True)
    refund_eligible = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=True)
    reconciled_at = Column(UTCDateTime, nullable=True)
    version = Column(Integer, nullable=False, default=0)
    execution_id = Column(String(36), nullable=True)

    __table_args__ = (
        Index("ix_payments_store_status", "store_id", "status"),
        Index("ix_payments_store_created", "store_id", "created_at"),
    )
