"""SQLAlchemy ORM models for Order aggregate."""

from sqlalchemy import Column, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime


class OrderModel(Base):
    """SQLAlchemy ORM model for orders table.

    The delivery assignment is stored inline (courier_* columns); it is
    absent when courier_id is NULL.
    """

    __tablename__ = "orders"

    order_id = Column(String(36), primary_key=True)
    order_number = Column(Integer, nullable=False)
    store_id = Column(String(36), ForeignKey("stores.store_id"), nullable=False, index=True)
    customer_id = Column(String(100), nullable=False, index=True)
    status = Column(String(30), nullable=False, default="PENDING", index=True)
    currency = Column(String(3), nullable=False, default="USD")
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    delivery_fee = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(String(20), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, index=True)
    estimated_delivery = Column(UTCDateTime, nullable=True)
    actual_delivery = Column(UTCDateTime, nullable=True)

    courier_id = Column(String(100), nullable=True, index=True)
    courier_assigned_at = Column(UTCDateTime, nullable=True)
    delivery_distance_km = Column(Numeric(8, 2), nullable=True)
    courier_earnings = Column(Numeric(12, 2), nullable=True)
    delivered_at = Column(UTCDateTime, nullable=True)

    version = Column(Integer, nullable=False, default=0)
    execution_id = Column(String(36), nullable=True, index=True)

    # Relationship to items (eager: async sessions cannot lazy-load)
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("store_id", "order_number", name="uq_orders_store_number"),
        Index("ix_orders_store_status", "store_id", "status"),
    )


class OrderItemModel(Base):
    """SQLAlchemy ORM model for order_items table."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.order_id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    menu_item_id = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    prep_time_minutes = Column(Integer, nullable=False, default=0)

    # Relationship back to order
    order = relationship("OrderModel", back_populates="items")
