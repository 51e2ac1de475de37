"""Order number value object."""
from dataclasses import dataclass

FIRST_ORDER_NUMBER = 1001


@dataclass(frozen=True)
class OrderNumber:
    """
    Human-readable, store-scoped order number.

    Allocated sequentially per store starting at 1001 and rendered
    with a leading hash, e.g. ``#1001``.
    """
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"Order number must be an integer: {self.value!r}")
        if self.value < 1:
            raise ValueError(f"Order number must be positive: {self.value}")

    @classmethod
    def first(cls) -> "OrderNumber":
        return cls(FIRST_ORDER_NUMBER)

    @classmethod
    def parse(cls, text: str) -> "OrderNumber":
        """Parse ``#1001`` or ``1001``."""
        cleaned = text.strip().lstrip("#")
        if not cleaned.isdigit():
            raise ValueError(f"Invalid order number: {text}")
        return cls(int(cleaned))

    def next(self) -> "OrderNumber":
        return OrderNumber(self.value + 1)

    def __str__(self) -> str:
        return f"#{self.value}"
