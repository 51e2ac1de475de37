"""Store entity."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import uuid

from ..value_objects import OrderNumber
from ..value_objects.order_number import FIRST_ORDER_NUMBER


@dataclass
class Store:
    """
    A storefront with its kitchen parameters.

    operating_hours feeds orders-per-hour; kitchen_capacity is the number
    of orders the kitchen prepares in parallel (1 = strictly serial).
    """
    store_id: str
    name: str
    operating_hours: int = 12
    kitchen_capacity: int = 1
    last_order_number: int = FIRST_ORDER_NUMBER - 1
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not 0 < self.operating_hours <= 24:
            raise ValueError(
                f"Operating hours must be between 1 and 24, got: {self.operating_hours}"
            )
        if self.kitchen_capacity < 1:
            raise ValueError(
                f"Kitchen capacity must be at least 1, got: {self.kitchen_capacity}"
            )

    @classmethod
    def create(
        cls,
        name: str,
        operating_hours: int = 12,
        kitchen_capacity: int = 1,
        created_at: Optional[datetime] = None,
        store_id: Optional[str] = None,
    ) -> "Store":
        return cls(
            store_id=store_id or str(uuid.uuid4()),
            name=name,
            operating_hours=operating_hours,
            kitchen_capacity=kitchen_capacity,
            created_at=created_at,
        )

    def allocate_order_number(self) -> OrderNumber:
        """Next order number in this store's sequence (#1001, #1002, ...)."""
        self.last_order_number += 1
        return OrderNumber(self.last_order_number)
