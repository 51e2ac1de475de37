"""Revenue trend direction."""
from enum import Enum


class RevenueTrend(str, Enum):
    """Direction of trailing revenue."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
