"""SQLAlchemy ORM model for stores."""

from sqlalchemy import Column, Integer, String

from .base import Base, UTCDateTime


class StoreModel(Base):
    """SQLAlchemy ORM model for stores table."""

    __tablename__ = "stores"

    store_id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    operating_hours = Column(Integer, nullable=False, default=12)
    kitchen_capacity = Column(Integer, nullable=False, default=1)
    last_order_number = Column(Integer, nullable=False, default=1000)
    created_at = Column(UTCDateTime, nullable=True)
