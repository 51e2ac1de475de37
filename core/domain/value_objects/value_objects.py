"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union
from uuid import UUID, uuid4

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary value with currency.

    CRITICAL: Always use Decimal, never float! Floats handed in are
    converted through str() so 20.25 stays 20.25.
    """
    amount: Decimal
    currency: str = "USD"

    def __post_init__(self):
        # Convert to Decimal if needed
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        # Validate currency code (3 letters)
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    @classmethod
    def zero(cls, currency: str = "USD") -> 'Money':
        """Zero amount in the given currency."""
        return cls(amount=Decimal("0.00"), currency=currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __add__(self, other: 'Money') -> 'Money':
        """Add two Money objects (must have same currency)."""
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two Money objects (must have same currency)."""
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, factor: Union[int, Decimal]) -> 'Money':
        """Scale by a quantity or rate."""
        return Money(amount=self.amount * Decimal(str(factor)), currency=self.currency)

    __rmul__ = __mul__

    def __neg__(self) -> 'Money':
        return Money(amount=-self.amount, currency=self.currency)

    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == 0

    def abs(self) -> 'Money':
        """Return absolute value."""
        return Money(amount=abs(self.amount), currency=self.currency)

    def rounded(self) -> 'Money':
        """Round half-up to cents."""
        return Money(
            amount=self.amount.quantize(CENT, rounding=ROUND_HALF_UP),
            currency=self.currency,
        )

    def differs_from(self, other: 'Money', tolerance: Decimal = CENT) -> bool:
        """
        True when the absolute difference exceeds tolerance.

        The boundary itself passes: 20.26 vs 20.25 does not differ at 0.01.
        """
        self._check_currency(other, "compare")
        return abs(self.amount - other.amount) > tolerance

    def _check_currency(self, other: 'Money', operation: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} different currencies: {self.currency} vs {other.currency}"
            )


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for tracing one unit of work and the events it records."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
